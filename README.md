# mapepire

Building blocks for clients of the Mapepire daemon. Mapepire gives access to
Db2 for IBM i as JSON messages sent over secure WebSockets.

The package supplies:

- **Request messages** (`mapepire.request`). These are the typed outgoing messages:
  `Connect`, `Sql`, `PrepareSql`, `PrepareSqlExecute`, `Execute`, `SqlMore`,
  `SqlClose`, `Cl`, `GetVersion`, `GetDbJob`, `SetConfig`, `GetTraceData`,
  `Dove`, `Ping` and `Exit`. Each one turns into its exact wire JSON, and
  `parse_request` turns the JSON back into a message.
- **Response messages** (`mapepire.response`). These are the typed incoming
  messages, such as `Connected`, `QueryResult`, `ClResult` and `ErrorResponse`.
  `parse_response` decodes them.
- **Request ids** (`mapepire.codec.IdAllocator`). Each allocator issues
  correlation ids of the form `<prefix>-<n>`, with a random prefix and a
  counter that goes up by one for each id.
- **Errors** (`mapepire.errors`). All errors derive from `MapepireError`.
  `ServerError` carries SQLSTATE, SQLCODE and job details, and has predicates
  such as `is_transient()` and `is_constraint_violation()`.
- **Passwords** (`mapepire.password.Password`). The plaintext is never shown
  in `repr`, and `zeroize()` wipes the stored value.

## Installation

```
pip install mapepire
```

## Usage

Build a request and encode it:

```python
from mapepire.codec import IdAllocator
from mapepire.request import Sql

ids = IdAllocator()
request = Sql(id=ids.next(), sql="SELECT * FROM ORDERS WHERE ID = ?", rows=100, parameters=[42])
wire = request.to_json()
# {"type":"sql","id":"…","sql":"SELECT * FROM ORDERS WHERE ID = ?","rows":100,"parameters":[42]}
```

Decode a response, and raise an error when the daemon reports one:

```python
from mapepire.helpers import server_error, unexpected
from mapepire.response import ErrorResponse, QueryResult, parse_response

response = parse_response(text_from_socket)
if isinstance(response, QueryResult):
    for row in response.data:
        print(row)
elif isinstance(response, ErrorResponse):
    raise server_error(response)
else:
    raise unexpected(response)
```

Classify errors raised by the server:

```python
from mapepire.errors import ServerError

try:
    ...
except ServerError as err:
    if err.is_transient():
        ...  # retry
    elif err.is_constraint_violation():
        ...
```

Keep credentials out of logs:

```python
from mapepire.password import Password

password = "password"
secret = Password(password)
print(repr(secret))  # Password([REDACTED])
```

## Running the tests

```
pip install -e ".[test]"
pytest
```