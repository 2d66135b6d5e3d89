from echoscgi import output
from echoscgi.error import ResponseError


def test_write_response_headers(writer):
    output.write_response(writer, "text/plain", "grüß".encode("utf-8"))
    status, header, body = writer.response()
    assert status == 200
    assert bytes(writer.data).startswith(b"Status: 200 OK\r\n")
    assert header["Content-Type"] == "text/plain"
    assert header["Content-Length"] == "6"
    assert header["Cache-Control"] == "private, no-store, no-cache, must-revalidate"
    assert header["Pragma"] == "no-cache"
    assert header["Expires"] == "0"
    assert header["X-Server"] == output.SERVER_ID
    assert body == "grüß".encode("utf-8")


def test_write_http_defaults(writer):
    output.write_http(None, writer, status=404, body=b"missing")
    status, header, body = writer.response()
    assert status == 404
    assert header["Content-Type"] == "text/plain; charset=utf-8"
    assert header["Content-Length"] == "7"
    assert body == b"missing"


def test_head_response_has_no_body(writer):
    output.write_response(writer, "text/plain", b"report", req={"REQUEST_METHOD": "HEAD"})
    _, header, body = writer.response()
    assert header["Content-Length"] == "6"
    assert body == b""


def test_connection_error_is_ignored(broken_writer, capsys):
    output.write_response(broken_writer, "text/plain", b"lost")
    assert "Failed to write to the output" in capsys.readouterr().out


def test_response_error_write(writer):
    ResponseError(431, "Payload head too large").write(None, writer)
    status, _, body = writer.response()
    assert status == 431
    assert body == b"Payload head too large"


def test_response_error_default_reason():
    err = ResponseError(404)
    assert err.reason == "Not Found"
    assert str(err) == "Response Error: 404 Not Found"
