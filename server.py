#!/usr/bin/python3
import asyncio
import importlib
import posixpath
import signal
import sys

import echoscgi
import config
ResponseError = echoscgi.ResponseError

__doc__ = "SCGI Server that routes requests to handler modules"

REQUIRED = ("CONTENT_LENGTH", "REQUEST_METHOD", "REQUEST_URI", "SCGI")
AVAIL_MOD = {}

def route(header: dict) -> str:
    """ Find the handler name for a request and set DOCUMENT_URI and PATH_INFO """
    raw = header.get("DOCUMENT_URI") or header["REQUEST_URI"].split("?", 1)[0]
    ## normpath keeps a leading "//"
    raw = "/" + raw.lstrip("/")
    path = posixpath.normpath(raw)
    if raw.endswith("/") and not path.endswith("/"):
        path += "/"
    prefix = config.CONFIG["prefix"]
    if prefix and (path == prefix or path.startswith(prefix + "/")):
        path = path[len(prefix):] or "/"
    header["DOCUMENT_URI"] = path
    segment = path[1:].split("/", 1)[0]
    header["PATH_INFO"] = path[1 + len(segment):]
    return segment.split(".", 1)[0]

async def process_request(
    header: dict,
    stdin: asyncio.streams.StreamReader,
    stdout: asyncio.streams.StreamWriter
):
    """ Process HTTP request - Router"""
    modname = route(header)
    if modname not in config.CONFIG["handlers"]:
        echoscgi.write_http(
            req = header,
            stdout = stdout,
            status = 404,
            header = {"Content-Type": "text/plain; charset=utf-8"},
            body = ("File not found: " + header["DOCUMENT_URI"]).encode("utf-8")
        )
        return
    if modname not in AVAIL_MOD:
        AVAIL_MOD[modname] = importlib.import_module(modname).main
    target = AVAIL_MOD[modname]
    try:
        await target(header, stdin, stdout)
    except ResponseError as err:
        err.write(req = header, stdout = stdout)
    except Exception as err: #pylint: disable=broad-except
        print(type(err))
        print(repr(err))
        echoscgi.write_http(
            req = header,
            stdout = stdout,
            status = 500,
            header = {"Content-Type": "text/plain; charset=utf-8"},
            body = str(err).encode("utf-8")
        )

def parse_head(data: bytes) -> dict:
    """ Turn the NUL separated SCGI head into an environment dict """
    data = data.split(b"\0")
    data = [data[item << 1:1 + item << 1] for item in range(len(data) >> 1)]
    return {
        item[0].decode("latin-1"): item[1].decode("utf-8", "replace")
        for item in data
    }

async def handle(stdin, stdout):
    """ Socket connection handler """
    try:
        try:
            data = await stdin.readuntil(b":")
            data = data[:-1]
            headlen = int(data)
            if headlen > config.CONFIG["maxsize"]["head"]:
                raise ResponseError(431, "Payload head too large")
            data = await stdin.readexactly(headlen+1)
            if data[-1:] != b",":
                raise ResponseError(400, "Payload malformed")
            data = data[:-2]
        except asyncio.LimitOverrunError as err:
            raise ResponseError(431, "Payload too large") from err
        except asyncio.IncompleteReadError as err:
            raise ResponseError(413, "Payload malformed") from err
        except ValueError as err:
            raise ResponseError(400, "Payload malformed") from err
        ## Now we can parse the header
        header = parse_head(data)
    except ResponseError as err:
        print(str(err))
        err.write(None, stdout)
        try:
            await stdout.drain()
        except ConnectionError:
            print(str(err))
        await echoscgi.close_connection(stdout)
        return
    ## Stop the try here for errors without header
    try:
        if False in (entry in header for entry in REQUIRED) or header["SCGI"] != "1":
            print("\n".join((": ".join(item) for item in header.items())))
            raise ResponseError(400, "Payload head missing value")
        ## Header parsed. Now process the entity with the processor.
        await process_request(header, stdin, stdout)
        await stdout.drain()
    except ResponseError as err:
        err.write(header, stdout)
    except ConnectionError:
        print("Error returning request:", header)
    await echoscgi.close_connection(stdout)

async def main():
    """ Main function for invocation via cmdline """
    server = await config.CONFIG["server"].start(handle)
    print("Started", config.CONFIG["server"])
    stop_request = asyncio.Event()
    loop = asyncio.get_running_loop()
    loop.add_signal_handler(signal.SIGINT, stop_request.set)
    loop.add_signal_handler(signal.SIGTERM, stop_request.set)
    await stop_request.wait()
    server.close()
    await server.wait_closed()
    print("Stopped", config.CONFIG["server"])

def run():
    """ Console entry point, takes an optional config file path """
    if len(sys.argv) > 1:
        config.load(sys.argv[1])
    asyncio.run(main())

if __name__ == "__main__":
    run()
