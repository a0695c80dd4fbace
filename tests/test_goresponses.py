import pytest

from oa3kit.goresponses import (
    TagOp,
    TagPath,
    has_complex_servers,
    has_json_response,
    response_kind,
    response_needs_ptr,
    response_needs_wrap,
    tag_paths,
)


def _json(schema):
    return {"content": {"application/json": {"schema": schema}}}


@pytest.fixture
def spec():
    return {
        "paths": {
            "/users": {
                "get": {"operationId": "listUsers", "tags": ["users"]},
                "post": {"operationId": "createUser", "tags": ["users", "admin"]},
            },
            "/health": {"get": {"operationId": "health"}},
            "/admin": {"delete": {"operationId": "wipe", "tags": ["admin"]}},
        }
    }


def test_tag_paths_groups_sorted_by_tag(spec):
    groups = tag_paths(spec)
    assert [g.tag for g in groups] == ["", "admin", "users"]


def test_tag_paths_orders_ops_by_operation_id(spec):
    groups = {g.tag: g for g in tag_paths(spec)}
    users = groups["users"]
    assert [o.op["operationId"] for o in users.ops] == ["createUser", "listUsers"]
    assert [o.method for o in users.ops] == ["POST", "GET"]
    assert all(o.path == "/users" for o in users.ops)


def test_tag_paths_untagged_operation(spec):
    groups = {g.tag: g for g in tag_paths(spec)}
    untagged = groups[""]
    assert untagged == TagPath(
        tag="", ops=[TagOp(path="/health", method="GET", op={"operationId": "health"})]
    )


def test_tag_paths_empty_spec():
    assert tag_paths({}) == []


def test_response_kind_headers_wrapped():
    op = {"responses": {"200": {"headers": {"X-Rate": {}}, **_json({"type": "string"})}}}
    assert response_kind(op, "200") == "wrapped"


def test_response_kind_no_content_empty():
    op = {"responses": {"204": {"description": "none"}}}
    assert response_kind(op, "204") == "empty"


def test_response_kind_non_json_plain():
    op = {"responses": {"200": {"content": {"text/plain": {"schema": {"type": "string"}}}}}}
    assert response_kind(op, "200") == ""


def test_response_kind_same_ref_wrapped():
    ref = {"$ref": "#/components/schemas/Err", "type": "object"}
    op = {"responses": {"400": _json(dict(ref)), "500": _json(dict(ref))}}
    assert response_kind(op, "400") == "wrapped"
    assert response_kind(op, "500") == "wrapped"


def test_response_kind_two_inline_strings_wrapped():
    op = {"responses": {"200": _json({"type": "string"}), "201": _json({"type": "string"})}}
    assert response_kind(op, "200") == "wrapped"


def test_response_kind_two_inline_objects_not_wrapped():
    op = {"responses": {"200": _json({"type": "object"}), "201": _json({"type": "object"})}}
    assert response_kind(op, "200") == ""


def test_response_kind_other_without_body_ignored():
    op = {"responses": {"200": _json({"type": "string"}), "204": {}}}
    assert response_kind(op, "200") == ""


def test_response_needs_wrap_headers():
    op = {"responses": {"200": {"headers": {"X-Id": {}}}}}
    assert response_needs_wrap(op, "200") is True


def test_response_needs_wrap_duplicate_media_refs():
    ref = "#/components/schemas/User"
    op = {
        "responses": {
            "200": {
                "content": {
                    "application/json": {"schema": {"$ref": ref}},
                    "application/xml": {"schema": {"$ref": ref}},
                }
            }
        }
    }
    assert response_needs_wrap(op, "200") is True


def test_response_needs_wrap_distinct_media():
    op = {
        "responses": {
            "200": {
                "content": {
                    "application/json": {"schema": {"$ref": "#/components/schemas/A"}},
                    "application/xml": {"schema": {"$ref": "#/components/schemas/B"}},
                }
            }
        }
    }
    assert response_needs_wrap(op, "200") is False


def test_response_needs_wrap_single_media():
    op = {"responses": {"200": _json({"type": "string"})}}
    assert response_needs_wrap(op, "200") is False


def test_response_needs_ptr_multiple_responses():
    op = {"responses": {"200": _json({"type": "string"}), "404": {}}}
    assert response_needs_ptr(op) is False


def test_response_needs_ptr_json_single():
    op = {"responses": {"200": _json({"type": "object"})}}
    assert response_needs_ptr(op) is True


def test_response_needs_ptr_non_json():
    op = {"responses": {"200": {"content": {"text/plain": {"schema": {"type": "string"}}}}}}
    assert response_needs_ptr(op) is False


def test_response_needs_ptr_no_body():
    assert response_needs_ptr({"responses": {"204": {}}}) is True


def test_has_complex_servers():
    with_vars = {"url": "/{v}", "variables": {"v": {"default": "1"}}}
    plain = {"url": "/"}
    assert has_complex_servers([with_vars, plain]) is True
    assert has_complex_servers([with_vars]) is False
    assert has_complex_servers([plain, plain]) is False
    assert has_complex_servers([]) is False


def test_has_json_response():
    assert has_json_response({"responses": {"200": _json({"type": "string"})}}) is True
    assert has_json_response(
        {"responses": {"200": {"content": {"text/plain": {}}}, "204": {}}}
    ) is False
    assert has_json_response({}) is False