import pytest

from app.helpers.ldap_mapping import DEFAULT_LDAP_MAPPING, AttributeMapping, parse_ldap_mapping


def test_parse_ldap_mapping_trims_whitespace():
    assert parse_ldap_mapping("name=cn, email=mail") == {"name": "cn", "email": "mail"}


@pytest.mark.parametrize("raw", [None, "", "   ", ",,", "bogus"])
def test_parse_ldap_mapping_empty_or_malformed(raw):
    assert parse_ldap_mapping(raw) == {}


@pytest.mark.parametrize(
    "raw",
    [
        "name=",
        "=cn",
        " = ",
        "name=cn=x",
    ],
)
def test_parse_ldap_mapping_rejects_segments_without_two_parts(raw):
    assert parse_ldap_mapping(raw) == {}


def test_parse_ldap_mapping_keeps_valid_segments_next_to_bad_ones():
    raw = "bogus, name = displayName ,email=,=mail"

    assert parse_ldap_mapping(raw) == {"name": "displayName"}


def test_parse_ldap_mapping_later_segment_wins():
    assert parse_ldap_mapping("name=cn,name=sn") == {"name": "sn"}


def test_attribute_mapping_defaults_when_no_overrides():
    mapping = AttributeMapping.from_string("")

    assert mapping.effective() == DEFAULT_LDAP_MAPPING
    assert mapping.attribute_for("name") == "name"


def test_attribute_mapping_merges_overrides_over_defaults():
    mapping = AttributeMapping.from_string("name=cn")

    assert mapping.effective() == {"name": "cn", "email": "email"}
    assert mapping.attribute_for("email") == "email"


def test_attribute_mapping_effective_does_not_leak_mutations():
    mapping = AttributeMapping.from_string("name=cn")

    mapping.effective()["name"] = "sn"

    assert mapping.attribute_for("name") == "cn"
