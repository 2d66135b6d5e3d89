#! /usr/bin/python3

import asyncio
import urllib.parse as up

from . import error

__doc__ = "Request parameters and body for user input"
MAX_CONTENT_LENGTH = 1<<20

def parse_query(query: str) -> dict:
    """Parse a query string into a dict of name to every value, in order"""
    if not query:
        return {}
    return up.parse_qs(query, keep_blank_values=True)

def content_length(value: str) -> int:
    """Declared body size, bounded by MAX_CONTENT_LENGTH"""
    try:
        length = int(value or 0)
    except ValueError as err:
        raise error.ResponseError(400, "Bad content length") from err
    if length < 0:
        raise error.ResponseError(400, "Bad content length")
    if length > MAX_CONTENT_LENGTH:
        raise error.ResponseError(413)
    return length

async def read_body(value: str, stdin: asyncio.streams.StreamReader) -> bytes:
    """Read exactly the declared number of body bytes"""
    length = content_length(value)
    if length == 0:
        return b""
    return await stdin.readexactly(length)
