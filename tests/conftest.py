import asyncio
import datetime
import ssl

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID


class FakeWriter:
    """ In-memory stand-in for asyncio.StreamWriter """
    def __init__(self, broken=False):
        self.data = bytearray()
        self.broken = broken
        self.closed = False

    def write(self, data):
        if self.broken:
            raise ConnectionResetError("peer went away")
        self.data += data

    async def drain(self):
        pass

    def close(self):
        self.closed = True

    async def wait_closed(self):
        pass

    def response(self):
        """ Split the SCGI response into status, header dict and body """
        head, _, body = bytes(self.data).partition(b"\r\n\r\n")
        lines = head.decode("ascii").split("\r\n")
        status = int(lines[0].split(" ")[1])
        header = dict(line.split(": ", 1) for line in lines[1:])
        return status, header, body


@pytest.fixture
def writer():
    return FakeWriter()


@pytest.fixture
def broken_writer():
    return FakeWriter(broken=True)


@pytest.fixture
def reader_for():
    """ Build a fed StreamReader, must be called inside a running loop """
    def build(data: bytes, eof: bool = True):
        reader = asyncio.StreamReader()
        reader.feed_data(data)
        if eof:
            reader.feed_eof()
        return reader
    return build


@pytest.fixture(scope="session")
def make_pem():
    key = ec.generate_private_key(ec.SECP256R1())

    def build(subject_cn: str, issuer_cn: str) -> str:
        start = datetime.datetime(2024, 1, 1)
        cert = (
            x509.CertificateBuilder()
            .subject_name(x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, subject_cn)]))
            .issuer_name(x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, issuer_cn)]))
            .public_key(key.public_key())
            .serial_number(x509.random_serial_number())
            .not_valid_before(start)
            .not_valid_after(start + datetime.timedelta(days=365))
            .sign(key, hashes.SHA256())
        )
        return cert.public_bytes(serialization.Encoding.PEM).decode("ascii")
    return build


def netstring(environ: dict, body: bytes = b"") -> bytes:
    head = b"".join(
        key.encode("latin-1") + b"\0" + value.encode("utf-8") + b"\0"
        for key, value in environ.items()
    )
    return str(len(head)).encode("ascii") + b":" + head + b"," + body


@pytest.fixture
def scgi_payload():
    return netstring


@pytest.fixture(scope="session")
def bad_name_pem(make_pem):
    """ A certificate whose subject CN is a UTF8String holding invalid bytes """
    der = ssl.PEM_cert_to_DER_cert(make_pem("ZZZZ", "Example CA"))
    assert der.count(b"\x0c\x04ZZZZ") == 1
    return ssl.DER_cert_to_PEM_cert(der.replace(b"\x0c\x04ZZZZ", b"\x0c\x04\xff\xfe\xff\xfe"))
