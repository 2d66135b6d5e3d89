#! /usr/bin/python3

import asyncio

from . import error
from . import output
from .request import InboundRequest

__doc__ = """Plain text report of what the server received for a request

The report has five sections, always in this order: request headers,
connection information, client certificate chain, then either the request
body (POST, PUT) or the request parameters (every other method).
"""

NEW_LINE = "\r\n"
SEPARATOR = " : "

## Section header formatting, overridden from the [Report] config section
WIDTH = 80
PAD = "="

BODY_ERROR = "Cannot read request body"
NO_CERTIFICATE = "No client certificate"

def include_body(method: str) -> bool:
    """ Whether the report shows the body instead of the parameters """
    return method.upper() in ("POST", "PUT")

def render_block(block: dict) -> str:
    """ One `key : value` line per entry, sorted by key, CRLF terminated """
    return NEW_LINE.join(
        key + SEPARATOR + value for key, value in sorted(block.items())
    ) + NEW_LINE

def render_section_header(title: str, width: int = None, pad: str = None) -> str:
    """ Center title within width columns of pad characters """
    width = WIDTH if width is None else width
    pad = pad or PAD
    padding = width - len(title)
    if padding <= 0:
        return title + NEW_LINE
    ## The left side gets the smaller half
    left = padding // 2
    return pad * left + title + pad * (padding - left) + NEW_LINE

def extract_headers(request: InboundRequest) -> dict:
    result = {}
    for name, value in request.headers:
        result[name] = value
    return result

def _text(value) -> str:
    return "" if value is None else str(value)

def extract_connection_info(request: InboundRequest) -> dict:
    """ Addressing and path metadata of the request """
    return {
        "local-addr": _text(request.local_addr),
        "local-name": _text(request.local_name),
        "local-port": _text(request.local_port),
        "remote-addr": _text(request.remote_addr),
        "remote-host": _text(request.remote_host),
        "remote-user": _text(request.remote_user),
        "remote-port": _text(request.remote_port),
        "servlet-contextpath": _text(request.context_path),
        "servlet-pathinfo": _text(request.path_info),
        "servlet-pathtranslated": _text(request.path_translated),
        "servlet-protocol": _text(request.protocol),
        "servlet-scheme": _text(request.scheme),
        "servlet-servername": _text(request.server_name)
    }

def extract_client_certificates(request: InboundRequest) -> dict:
    """ Subject and issuer of each client certificate, leaf at level-0 """
    if request.certificate_chain is None:
        return {NO_CERTIFICATE: ""}
    return {
        "level-" + str(index): cert.subject_dn + "[" + cert.issuer_dn + "]"
        for index, cert in enumerate(request.certificate_chain)
    }

def extract_parameters(request: InboundRequest) -> dict:
    return {name: ",".join(values) for name, values in request.parameters.items()}

async def extract_body(request: InboundRequest) -> str:
    """ The request body as text, or a placeholder when it cannot be read """
    try:
        data = await request.read_body()
    except (error.ResponseError, asyncio.IncompleteReadError, OSError) as err:
        print("Cannot read request body:", repr(err))
        return BODY_ERROR + NEW_LINE
    return data.decode("utf-8", "replace") + NEW_LINE

async def build_report(request: InboundRequest, write_body: bool) -> str:
    """ Render the full report for request """
    sections = [
        render_section_header("The HTTP Request Header"),
        render_block(extract_headers(request)),
        render_section_header("The Servlet Information"),
        render_block(extract_connection_info(request)),
        render_section_header("The Client Certificate"),
        render_block(extract_client_certificates(request))
    ]
    if write_body:
        sections.append(render_section_header("The Request Body"))
        sections.append(await extract_body(request))
    else:
        sections.append(render_section_header("The Request Parameter"))
        sections.append(render_block(extract_parameters(request)))
    return "".join(sections)

async def dispatch(
    request: InboundRequest,
    stdout: asyncio.streams.StreamWriter,
    write_body: bool
):
    """ Write the report for request as a text/plain response """
    report = await build_report(request, write_body)
    output.write_response(
        stdout,
        "text/plain",
        report.encode("utf-8"),
        req = {"REQUEST_METHOD": request.method}
    )
