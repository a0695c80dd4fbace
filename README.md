# oa3kit

Helpers for working with OpenAPI 3 documents and for deciding how they map
onto Go code.

A loaded document is kept as plain nested dictionaries and lists, as it was
parsed. Every mapping key is turned into a string.

## Installation

```
pip install oa3kit
```

## Loading a document

```python
from oa3kit.document import load_yaml

doc = load_yaml("api.yaml", True)
```

When the second argument is true, the document is post-processed after
loading (`post_process`):

1. `resolve_refs` fills every `$ref` object with the keys of the object it
   refers to. The `$ref` key stays in place. Local references of the form
   `#/components/TYPE/NAME` are supported. So are references to other `.yaml`,
   `.yml` or `.json` files, which are resolved relative to the loaded file, or
   to the working directory when loading from text. A cycle of references is
   reported as `cycle detected`.
2. `validate_document` checks the `openapi` version (a semantic version
   starting with `3.`), the `info` object, that there is at least one path and
   that every path begins with `/`, the component key names, the inline links
   and `externalDocs`. It adds a `/` server when no servers are listed.
3. `copy_inherited_items` pushes path-level parameters down into each
   operation. A parameter with the same name and location on the operation
   wins.
4. `resolve_all_ofs` merges the parts of every `allOf` schema into the schema
   itself: their `required` lists, `properties`, `additionalProperties` and
   `discriminator`.

`load_json`, `load_yaml_text` and `load_json_text` work the same way. You can
also run each step on its own. `validate_ref_uri` checks a single `$ref`
string.

Problems raise `oa3kit.validation.SpecError`, a `ValueError`. The message is
prefixed with the step and the location, for example
`validation failed: components.schemas(bad name): invalid component key name`.

## Document objects

`oa3kit.validation` has dataclasses for the descriptive parts of a document:
`Info`, `Contact`, `License`, `ExternalDocs`, `Link` and `Example`. Each one
has a `from_dict` constructor, and all except `Example` have a `validate`
method. The module also provides `is_semver` and `is_email`.

`oa3kit.components` provides `parse_ref`, which returns the component name of
a local reference, along with `is_valid_component_name` and
`validate_component_names`.

## Go naming helpers

```python
from oa3kit.gonames import camel_snake, snake_to_camel, param_schema_name

camel_snake("FileIDName.tpl")                  # "file_id_name.tpl"
snake_to_camel("user_id")                      # "userId"
param_schema_name("getUser", "GET", "sort")    # "GetUserGetSortParam"
```

`filter_non_ident_chars` keeps only letters and underscores. `go_title`
upper-cases the first letter of each word. `render_imports` renders a Go
`import (...)` block: standard-library paths first, then paths whose first
segment contains a dot. Each group is sorted.

## Go type mapping

```python
from oa3kit.gotypes import TypeContext, primitive

ctx = TypeContext(params={"timetype": "chrono"})
primitive(ctx, {"type": "string", "format": "date"})   # "chrono.Date"
ctx.imports                                            # {"github.com/aarondl/chrono"}
```

Three parameters change the mapping:

| parameter     | value        | effect                                          |
|---------------|--------------|-------------------------------------------------|
| `timetype`    | `chrono`     | chrono date/time types in place of `time.Time`  |
| `uuidtype`    | `google`     | `uuid.UUID` for `format: uuid`                  |
| `decimaltype` | `shopspring` | `decimal.Decimal` for `format: decimal`         |

The module also provides these functions:

- `primitive_bits` and `primitive_wrapped`.
- `omitnull_wrap`, `omitnull_unwrap` and `omitnull_is_wrapped`, for optional
  and nullable fields.
- `must_validate` and `must_validate_recurse`, which decide whether a schema
  needs generated validation.
- `param_requires_type`.
- `param_convert_fn`, which builds the Go expression that converts a
  parameter's raw string values.

`oa3kit.goresponses` decides how responses are represented with
`response_kind`, `response_needs_wrap`, `response_needs_ptr`,
`has_json_response` and `has_complex_servers`. `tag_paths` groups operations
by their first tag into `TagPath` and `TagOp` records. Groups are sorted by
tag, and the operations in each group by operation id.

## Debug output

`oa3kit.debug.set_debug(True)` traces reference resolution to standard error.

## What it does not do

oa3kit has no command-line tool and renders no Go source files. It makes the
naming, typing and response decisions that such a generator needs, and leaves
rendering and writing files to the caller. Path items, operations, parameters,
request bodies, responses, headers and schemas are not validated in detail
beyond the checks listed above.