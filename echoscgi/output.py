#! /usr/bin/python3

import asyncio
import functools
import http

__doc__ = "Output Handler"

SERVER_ID = "EchoSCGI v0.1"

## Standard HTTP/1.1 and HTTP/1.0 no-cache headers
NO_CACHE = {
    "Cache-Control": "private, no-store, no-cache, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0"
}

def ignore_err(err):
    "Use this to ignore the error"
    def wrapper(fun):
        @functools.wraps(fun)
        def inner(*args, **kwargs):
            try:
                fun(*args, **kwargs)
            except err as exc:
                print("Failed to write to the output:", repr(exc))
        return inner
    return wrapper

@ignore_err(ConnectionError)
def write_http(
    req,
    stdout: asyncio.streams.StreamWriter,
    status: int = 200,
    header: dict = None,
    body: bytes = b""
):
    " Write the response to stdout StreamWriter "
    ## Sanity Check
    ## For writes occurred before the header is parsed
    if req is None:
        req = {"REQUEST_METHOD": "GET"}
    if header is None:
        header = {}
    if body and "Content-Type" not in header:
        header["Content-Type"] = "text/plain; charset=utf-8"
    if "Content-Length" not in header:
        header["Content-Length"] = str(len(body))
    if "X-Server" not in header:
        header["X-Server"] = SERVER_ID

    ## Status Line
    stdout.write(b" ".join((
        b"Status:",
        str(status).encode("ascii"),
        http.HTTPStatus(status).phrase.encode("ascii")
    )) + b"\r\n")
    ## HTTP Header
    stdout.write(b"\r\n".join((
        item[0].encode("ascii") + b": " + item[1].encode("ascii") for item in header.items()
    )))
    stdout.write(b"\r\n\r\n")
    ## HTTP Body
    if (req.get("REQUEST_METHOD") or "GET").upper() != "HEAD":
        stdout.write(body)

def write_response(stdout: asyncio.streams.StreamWriter, content_type: str, data: bytes, req = None):
    """ Write a 200 response that must never be cached by the client or a proxy """
    header = {
        "Content-Type": content_type,
        "Content-Length": str(len(data))
    }
    header.update(NO_CACHE)
    write_http(req, stdout, status = 200, header = header, body = data)
