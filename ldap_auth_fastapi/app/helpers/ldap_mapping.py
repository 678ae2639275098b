# app/helpers/ldap_mapping.py
"""
Directory attribute mapping for the shadow user record.

LDAP_MAPPING overrides which directory attribute feeds each logical user
field, e.g. ``name=cn,email=mail``. Fields not overridden keep their
default attribute of the same name.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional

DEFAULT_LDAP_MAPPING: Dict[str, str] = {
    "name": "name",
    "email": "email",
}


def parse_ldap_mapping(raw: Optional[str]) -> Dict[str, str]:
    """
    Parse ``logical=attribute`` pairs separated by commas.

    Segments that do not split into exactly two non-empty parts are skipped.
    A missing or empty value yields an empty dict.
    """
    overrides: Dict[str, str] = {}
    if not raw:
        return overrides

    for segment in (s.strip() for s in raw.split(",")):
        if not segment:
            continue
        parts = [p.strip() for p in segment.split("=")]
        if len(parts) != 2 or not all(parts):
            continue
        logical, attribute = parts
        overrides[logical] = attribute

    return overrides


@dataclass(frozen=True)
class AttributeMapping:
    overrides: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_string(cls, raw: Optional[str]) -> "AttributeMapping":
        return cls(overrides=parse_ldap_mapping(raw))

    def effective(self) -> Dict[str, str]:
        """Defaults with the configured overrides applied."""
        return {**DEFAULT_LDAP_MAPPING, **self.overrides}

    def attribute_for(self, logical: str) -> str:
        return self.effective()[logical]
