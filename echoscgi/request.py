#! /usr/bin/python3

import asyncio
import socket
import urllib.parse as up
from dataclasses import dataclass, field as dcfield
from typing import Dict, List, Optional, Tuple

from cryptography import x509

from . import field

__doc__ = "Inbound request as seen through the SCGI environment"

UNPARSABLE_CERT = "Cannot parse client certificate"

@dataclass(frozen=True)
class Certificate:
    """
    One certificate of a client chain, reduced to its distinguished names
    """
    subject_dn: str
    issuer_dn: str

    @classmethod
    def from_pem(cls, pem: str) -> "Certificate":
        """ Parse a PEM certificate, or mark it unparsable """
        try:
            cert = x509.load_pem_x509_certificate(pem.encode("ascii"))
            ## Names are decoded lazily, so malformed ones fail here
            return cls(cert.subject.rfc4514_string(), cert.issuer.rfc4514_string())
        except (ValueError, UnicodeEncodeError):
            return cls(UNPARSABLE_CERT, "")

@dataclass
class InboundRequest:
    """
    Everything the echo report shows about a request

    certificate_chain is None when no client certificate was negotiated,
    otherwise it is ordered leaf first.
    """
    method: str
    headers: List[Tuple[str, str]] = dcfield(default_factory=list)
    parameters: Dict[str, List[str]] = dcfield(default_factory=dict)
    local_addr: Optional[str] = None
    local_name: Optional[str] = None
    local_port: Optional[str] = None
    remote_addr: Optional[str] = None
    remote_host: Optional[str] = None
    remote_user: Optional[str] = None
    remote_port: Optional[str] = None
    context_path: Optional[str] = None
    path_info: Optional[str] = None
    path_translated: Optional[str] = None
    protocol: Optional[str] = None
    scheme: Optional[str] = None
    server_name: Optional[str] = None
    certificate_chain: Optional[Tuple[Certificate, ...]] = None
    content_length: Optional[str] = None
    stdin: Optional[asyncio.streams.StreamReader] = None

    async def read_body(self) -> bytes:
        """ Read the whole request body """
        return await field.read_body(self.content_length, self.stdin)

def header_name(variable: str) -> Optional[str]:
    """ Turn a CGI variable name back into an HTTP header name """
    if variable.startswith("HTTP_"):
        variable = variable[5:]
    elif variable not in ("CONTENT_TYPE", "CONTENT_LENGTH"):
        return None
    return "-".join(word.capitalize() for word in variable.split("_"))

def get_headers(environ: dict) -> List[Tuple[str, str]]:
    """ HTTP headers in the order the front server sent them """
    result = []
    for key, value in environ.items():
        name = header_name(key)
        if name is None:
            continue
        if key == "CONTENT_TYPE" and not value:
            continue
        if key == "CONTENT_LENGTH" and value in ("", "0"):
            continue
        result.append((name, value))
    return result

def get_scheme(environ: dict) -> str:
    if environ.get("REQUEST_SCHEME"):
        return environ["REQUEST_SCHEME"]
    return "https" if (environ.get("HTTPS") or "").lower() in ("on", "1") else "http"

def get_certificate_chain(environ: dict) -> Optional[Tuple[Certificate, ...]]:
    """
    Client certificate chain from nginx or mod_ssl variables

    The leaf comes from SSL_CLIENT_S_DN/SSL_CLIENT_I_DN, or from the PEM
    in SSL_CLIENT_CERT (mod_ssl) or SSL_CLIENT_ESCAPED_CERT (nginx).
    SSL_CLIENT_CERT_CHAIN_<n> adds the intermediates.
    """
    if (environ.get("SSL_CLIENT_VERIFY") or "").upper() == "NONE":
        return None
    if environ.get("SSL_CLIENT_S_DN"):
        leaf = Certificate(environ["SSL_CLIENT_S_DN"], environ.get("SSL_CLIENT_I_DN") or "")
    elif environ.get("SSL_CLIENT_CERT"):
        leaf = Certificate.from_pem(environ["SSL_CLIENT_CERT"])
    elif environ.get("SSL_CLIENT_ESCAPED_CERT"):
        leaf = Certificate.from_pem(up.unquote(environ["SSL_CLIENT_ESCAPED_CERT"]))
    else:
        return None
    chain = [leaf]
    index = 0
    while environ.get("SSL_CLIENT_CERT_CHAIN_" + str(index)):
        chain.append(Certificate.from_pem(environ["SSL_CLIENT_CERT_CHAIN_" + str(index)]))
        index += 1
    return tuple(chain)

def from_environ(
    environ: dict,
    stdin: asyncio.streams.StreamReader = None
) -> InboundRequest:
    """ Build the InboundRequest for a parsed SCGI header """
    return InboundRequest(
        method = environ.get("REQUEST_METHOD") or "GET",
        headers = get_headers(environ),
        parameters = field.parse_query(environ.get("QUERY_STRING")),
        local_addr = environ.get("SERVER_ADDR"),
        local_name = socket.gethostname(),
        local_port = environ.get("SERVER_PORT"),
        remote_addr = environ.get("REMOTE_ADDR"),
        remote_host = environ.get("REMOTE_HOST") or environ.get("REMOTE_ADDR"),
        remote_user = environ.get("REMOTE_USER"),
        remote_port = environ.get("REMOTE_PORT"),
        context_path = environ.get("SCRIPT_NAME"),
        path_info = environ.get("PATH_INFO"),
        path_translated = environ.get("PATH_TRANSLATED"),
        protocol = environ.get("SERVER_PROTOCOL"),
        scheme = get_scheme(environ),
        server_name = environ.get("SERVER_NAME"),
        certificate_chain = get_certificate_chain(environ),
        content_length = environ.get("CONTENT_LENGTH"),
        stdin = stdin
    )
