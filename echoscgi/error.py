#! /usr/bin/python3

import asyncio
import http

from . import output

__doc__ = "Exceptions"

class ResponseError(Exception):
    " Represent an error to be sent to the client "
    def __init__(self, status: int = 500, reason: str = None):
        super().__init__()
        self.status = status
        self.reason = reason or http.HTTPStatus(status).phrase
    def __repr__(self) -> str:
        return "".join(("<ResponseError code=", str(self.status), " reason=\"", self.reason, "\">"))
    def __str__(self) -> str:
        return " ".join(("Response Error:", str(self.status), self.reason))
    def write(self, req, stdout: asyncio.streams.StreamWriter):
        " Write the ResponseError to stdout "
        output.write_http(
            req, stdout, status = self.status,
            header = {"Content-Type": "text/plain; charset=utf-8"},
            body = self.reason.encode("utf-8")
        )
