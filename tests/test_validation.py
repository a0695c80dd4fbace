import pytest

from oa3kit.validation import (
    Contact,
    Example,
    ExternalDocs,
    Info,
    License,
    Link,
    SpecError,
    is_email,
    is_semver,
)


@pytest.mark.parametrize(
    "version, expected",
    [
        ("3.0.3", True),
        ("1.0.0-alpha+build.1", True),
        ("3.0", False),
        ("01.0.0", False),
        ("3.0.3\n", False),
    ],
)
def test_is_semver(version, expected):
    assert is_semver(version) is expected


@pytest.mark.parametrize(
    "address, expected",
    [
        ("someone@example.com", True),
        ("no-at-sign.example.com", False),
        ("someone@example", False),
        ("some one@example.com", False),
    ],
)
def test_is_email(address, expected):
    assert is_email(address) is expected


def test_contact_from_dict_keeps_fields_and_extensions():
    contact = Contact.from_dict(
        {"name": "API team", "url": "https://example.com/team", "email": "team@example.com", "x-internal": True}
    )
    assert contact.name == "API team"
    assert contact.url == "https://example.com/team"
    assert contact.email == "team@example.com"
    assert contact.extensions == {"x-internal": True}
    assert contact.validate() is None


def test_contact_blank_name():
    with pytest.raises(SpecError, match="info.contact.name if present must not be blank"):
        Contact(name="   ").validate()


def test_contact_bad_email():
    with pytest.raises(SpecError, match="info.contact.email if present must be an e-mail address"):
        Contact(email="not-an-address").validate()


def test_contact_bad_url():
    with pytest.raises(SpecError, match="info.contact.url if present must be a url"):
        Contact(url="https://example.com/\x7f").validate()


def test_license_blank_name():
    with pytest.raises(SpecError, match="info.license.name cannot be blank"):
        License.from_dict({"url": "https://example.com/license"}).validate()


def test_license_bad_url():
    with pytest.raises(SpecError, match="info.license.url if present must be a url"):
        License(name="MIT", url=":nope").validate()


def test_external_docs_bad_port():
    with pytest.raises(SpecError, match="url must be a valid url"):
        ExternalDocs(url="http://example.com:port/docs").validate()


def test_external_docs_bad_escape():
    with pytest.raises(SpecError, match="url must be a valid url"):
        ExternalDocs(url="https://example.com/a%zz").validate()


def test_external_docs_blank_description():
    with pytest.raises(SpecError, match="description if present must not be blank"):
        ExternalDocs.from_dict({"description": "", "url": "https://example.com"}).validate()


def test_link_mutually_exclusive():
    link = Link.from_dict({"operationRef": "#/paths/~1users/get", "operationId": "getUser"})
    with pytest.raises(SpecError, match="operationRef is mutually exclusive with operationId"):
        link.validate()


def test_link_from_dict_fields():
    link = Link.from_dict({"operationId": "getUser", "parameters": {"id": "$response.body#/id"}})
    assert link.operation_id == "getUser"
    assert link.operation_ref is None
    assert link.parameters == {"id": "$response.body#/id"}


def test_example_from_dict():
    example = Example.from_dict({"summary": "s", "value": {"a": [1, 2]}, "x-note": "n"})
    assert example.summary == "s"
    assert example.value == {"a": [1, 2]}
    assert example.external_value == ""
    assert example.extensions == {"x-note": "n"}


def test_info_from_dict_nested_and_numeric_version():
    info = Info.from_dict(
        {"title": "Pets", "version": 1.5, "contact": {"email": "pets@example.com"}, "license": {"name": "MIT"}}
    )
    assert info.version == "1.5"
    assert info.contact.email == "pets@example.com"
    assert info.license.name == "MIT"


def test_info_blank_title():
    with pytest.raises(SpecError, match="info.title must not be blank"):
        Info(title=" ", version="1").validate()


def test_info_blank_version():
    with pytest.raises(SpecError, match="info.version must not be blank"):
        Info(title="Pets").validate()


def test_info_propagates_contact_error():
    info = Info(title="Pets", version="1", contact=Contact(email="bad"))
    with pytest.raises(SpecError, match="info.contact.email"):
        info.validate()


def test_info_bad_terms_of_service():
    with pytest.raises(SpecError, match="info.termsOfService if present must be a url"):
        Info(title="Pets", version="1", terms_of_service="a:b/c").validate()


def test_from_dict_rejects_non_mapping():
    with pytest.raises(SpecError):
        Info.from_dict(["title"])


def test_from_dict_rejects_non_string_field():
    with pytest.raises(SpecError):
        Contact.from_dict({"name": ["a"]})