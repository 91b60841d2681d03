# coserve

A small asynchronous HTTP/1.1 server built on asyncio. Connections stay open, so one client
can send several requests over the same connection. The server answers each request this way:

- If the request has a body, the body comes back with `Content-Type: text/plain`.
- If it has no body, the reply is a short "Hello, World!" HTML page (`text/html`).

Requests are parsed a piece at a time. A request counts as complete once its header block
(ending in a blank line) has arrived and the body has reached the length given by
`Content-Length`. Without a `Content-Length` header the body is taken to be empty.

## Installation

```
pip install .
```

## Running the server

```
coserve
```

The server listens on `localhost:8080` by default. Choose another address with the options:

```
coserve --host 0.0.0.0 --port 9000
```

It logs its start-up steps and each connection that is removed. Stop it with Ctrl-C.

From Python:

```python
from coserve.server import run_server

run_server("localhost", 8080)
```

Inside a running asyncio event loop, `await coserve.server.serve(host, port)` starts listening
and returns the `asyncio` server object without blocking.

## Parsing requests yourself

```python
from coserve.http import HttpRequest

request = HttpRequest()
request.feed(b"POST /echo?x=1 HTTP/1.1\r\nContent-Length: 5\r\n\r\nhel")
request.is_complete()   # False
request.feed(b"lo")
request.is_complete()   # True
request.method          # "POST"
request.url             # "/echo?x=1"
request.path            # "/echo"
request.version         # "HTTP/1.1"
request.param("x")      # "1"
request.header("Content-Length")  # "5"
request.body            # b"hello"
```

`request.reset()` clears everything so the object can take the next request.
Lower-level parsers live in `coserve.parser`: `HttpParser`, `RequestParser` and
`ResponseParser` (the latter extracts `status_code`).

## Building responses

```python
from coserve.http import HttpResponse

response = HttpResponse()
response.json('{"ok": true}')
response.render()   # the full response as bytes, ready to send
```

`HttpResponse` also provides `ok`, `not_found`, `server_error`, `bad_request`, `redirect`,
`set_status`, `set_header`, `set_body` (which also sets `Content-Length`) and
`set_content_type`. To write a response to an asyncio stream writer, await
`coserve.http.send_response(writer, response)`; it raises `ConnectionClosedError` when the
peer has gone away.

## Limits

The server has no routing and serves no files: every request gets the echo or the
"Hello, World!" reply described above. Chunked transfer encoding is not understood, and a
connection is only closed when the client closes it or an error occurs.

## Running the tests

```
pip install .[test]
pytest
```