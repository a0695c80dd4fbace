import pytest

from oa3kit.components import is_valid_component_name, parse_ref, validate_component_names
from oa3kit.validation import SpecError


@pytest.mark.parametrize(
    "kind",
    [
        "schemas",
        "responses",
        "parameters",
        "examples",
        "requestBodies",
        "headers",
        "securitySchemes",
        "links",
        "callbacks",
    ],
)
def test_parse_ref_accepts_each_kind(kind):
    assert parse_ref(f"#components/{kind}/Thing", kind) == "Thing"


def test_parse_ref_leading_slash_has_wrong_shape():
    with pytest.raises(SpecError, match="must contain a url in the form"):
        parse_ref("#/components/schemas/Pet", "schemas")


def test_parse_ref_rejects_file_reference():
    with pytest.raises(SpecError, match="non-file-local"):
        parse_ref("other.yaml#components/schemas/Pet", "schemas")


def test_parse_ref_rejects_remote_reference():
    with pytest.raises(SpecError, match="non-file-local"):
        parse_ref("https://example.com/spec#components/schemas/Pet", "schemas")


def test_parse_ref_requires_fragment():
    with pytest.raises(SpecError, match="must contain a url fragment"):
        parse_ref("#", "schemas")


def test_parse_ref_requires_components_prefix():
    with pytest.raises(SpecError, match="must start with '#/components'"):
        parse_ref("#definitions/schemas/Pet", "schemas")


def test_parse_ref_rejects_path_items():
    with pytest.raises(SpecError, match="can only refer to types"):
        parse_ref("#components/pathItems/Users", "pathItems")


@pytest.mark.parametrize(
    "name, expected",
    [
        ("User.Profile-v2_x", True),
        ("bad name", False),
        ("", False),
        ("a/b", False),
    ],
)
def test_is_valid_component_name(name, expected):
    assert is_valid_component_name(name) is expected


def test_validate_component_names_bad_schema_key():
    with pytest.raises(SpecError, match=r"schemas\(bad name\): invalid component key name"):
        validate_component_names({"schemas": {"bad name": {"type": "string"}}})


def test_validate_component_names_checks_schemas_before_responses():
    components = {
        "responses": {"bad response": {}},
        "schemas": {"bad schema": {}},
    }
    with pytest.raises(SpecError, match=r"^schemas\("):
        validate_component_names(components)


def test_validate_component_names_validates_links():
    components = {"links": {"L": {"operationRef": "#/paths/x", "operationId": "getUser"}}}
    with pytest.raises(SpecError, match=r"links\(L\)\.operationRef is mutually exclusive"):
        validate_component_names(components)


def test_validate_component_names_section_must_be_mapping():
    with pytest.raises(SpecError, match="headers must be a mapping"):
        validate_component_names({"headers": ["X-Rate"]})


def test_validate_component_names_skips_link_references_then_checks_callbacks():
    components = {
        "links": {"L": {"$ref": "#components/links/M", "operationRef": "a", "operationId": "b"}},
        "callbacks": {"bad/cb": {}},
    }
    with pytest.raises(SpecError, match=r"^callbacks\(bad/cb\)"):
        validate_component_names(components)