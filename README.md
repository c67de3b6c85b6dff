# httpreqkit

Building blocks for declarative HTTP request resources: evaluating jq-style
queries against response data, comparing and reshaping JSON-shaped
dictionaries, keeping sensitive values in secrets behind
`{{name:namespace:key}}` placeholders, and recording the outcome of a request
on a resource. The package has no dependencies outside the standard library.

## Install

```
pip install httpreqkit
```

For running the tests:

```
pip install "httpreqkit[test]"
pytest
```

## Modules

- `httpreqkit.jq`: a small jq expression engine. `compile_query` parses a
  query into a `Query`, whose `run(obj)` yields every result. `run_query`
  returns the first result; `parse_string`, `parse_float`, `parse_bool` and
  `parse_map_interface` also check its type. `parse_map_strings` evaluates
  lists of queries per key, keeping a query verbatim when it fails and raising
  when a result is not a string. `is_jq_query` tells whether a string parses.
  All failures raise `JQError`.
- `httpreqkit.jsonutil`: `contains` (nested subset check), `is_json_string`,
  `json_string_to_map`, `convert_json_strings_to_maps` (decodes JSON object
  strings in place), `struct_to_map` (dataclasses or objects with `to_dict`
  to plain dicts, raising `ValueError` when the result is not an object) and
  `convert_map_to_json` (compact JSON with sorted keys).
- `httpreqkit.retry`: `should_retry`, `rollback_enabled`,
  `retries_limit_reached`, `wait_timeout` (default five minutes) and
  `get_rollback_retries_limit` (default 1).
- `httpreqkit.text`: `normalize_whitespace`.
- `httpreqkit.validate`: `is_request_valid` raises `InvalidRequestError` for
  an empty method or an invalid URL; `is_http_success`, `is_http_error`,
  `is_url_valid`.
- `httpreqkit.kube`: the `Secret` and `OwnerReference` records, the abstract
  `SecretClient` interface and the dictionary-backed `InMemorySecretClient`,
  plus `get_secret`, `get_or_create_secret`, `update_secret`,
  `set_owner_reference` and `has_owner_reference`. Errors are `KubeError`, or
  `SecretNotFoundError` for a missing secret.
- `httpreqkit.messages`: the `HttpRequest` and `HttpResponse` records;
  `HttpResponse.to_dict()` gives the `statusCode`/`headers`/`body` shape used
  for queries.
- `httpreqkit.status`: `RequestResource` builds status functions
  (`set_status_code`, `set_headers`, `set_body`, `set_request_details`,
  `set_synced`, `set_last_reconcile_time`, `set_cache`, `set_error`,
  `reset_failures`) that apply only when the resource implements the matching
  protocol (`ResponseSetter`, `CacheSetter`, `SyncedSetter`, `ErrorSetter`,
  `FailureResetter`, `LastReconcileTimeSetter`, `RequestDetailsSetter`).
  `set_request_resource_status` runs them in order and then calls
  `client.update_status(resource)`.
- `httpreqkit.secret_patcher`: `prepare_data_map`, `extract_value_to_patch`,
  `update_secret_with_patched_value` (stores a response value in a secret and
  masks it in the response), `update_secret_labels_and_annotations`,
  `sync_map`, `update_secret_data`, `replace_sensitive_values` and
  `is_secret_data_up_to_date`.
- `httpreqkit.placeholders`: `find_placeholders`, `remove_duplicates`,
  `parse_placeholder`, `replace_placeholder_with_secret_value`, and
  `patch_secrets_into_string`, `patch_secrets_into_headers` and
  `patch_secrets_into_map`, which return resolved copies.

Diagnostics are written with the standard `logging` module under the
`httpreqkit.secret_patcher` and `httpreqkit.placeholders` loggers.

## Example

```python
from httpreqkit.jq import parse_string
from httpreqkit.validate import is_request_valid

data = {"payload": {"baseUrl": "https://api.example.com/users"},
        "response": {"body": {"id": "123"}}}

url = parse_string('(.payload.baseUrl + "/" + .response.body.id)', data)
is_request_valid("GET", url)  # raises InvalidRequestError if invalid
print(url)  # https://api.example.com/users/123
```

Resolving a placeholder from a secret:

```python
from httpreqkit.kube import InMemorySecretClient, Secret
from httpreqkit.placeholders import patch_secrets_into_string

client = InMemorySecretClient()
client.create(Secret(name="creds", namespace="default", data={"token": b"token"}))

print(patch_secrets_into_string(client, "Bearer {{creds:default:token}}"))
# Bearer token
```

## What the package does not do

- It sends no HTTP requests; `HttpRequest` and `HttpResponse` only record them.
- It runs no reconcile loop, controller or command-line program.
- It talks to no cluster: secrets go through a `SecretClient`, and the only
  implementation shipped is `InMemorySecretClient`. Status updates go to
  whatever object is passed as the client.
- The jq engine covers paths, indexing and iteration, pipes, commas, `//`,
  `and`/`or`, comparisons, arithmetic, array and object construction,
  `if`/`elif`/`else`, `?`, and the functions `empty`, `not`, `length`, `keys`,
  `type`, `tostring`, `tonumber`, `select` and `map`. Variables, `def`,
  `reduce`, `foreach`, `try`/`catch` and other built-ins are not supported.