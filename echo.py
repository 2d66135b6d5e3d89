#!/usr/bin/python3

import asyncio

import echoscgi
from echoscgi import inspector

__doc__ = "HTTP echo endpoint: reflect the request metadata back as plain text"

async def main(
    header: dict,
    stdin: asyncio.streams.StreamReader,
    stdout: asyncio.streams.StreamWriter
):
    """ Process HTTP request """
    request = echoscgi.request.from_environ(header, stdin)
    await inspector.dispatch(request, stdout, inspector.include_body(request.method))
