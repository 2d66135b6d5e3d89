#! /usr/bin/python3

import asyncio

__doc__ = "Listener definitions for starting the SCGI server"

class ServerBase():
    """ Listener that knows how to start an asyncio server on its address """
    kind = "Server"
    def address(self) -> str:
        "Printable listening address - Must be implemented"
        raise NotImplementedError()
    def __str__(self):
        return self.kind + " " + self.address()
    def __repr__(self) -> str:
        return "<" + str(self) + ">"
    def start(self, client_connected_cb, **kwargs):
        "Start server and return coroutine - Must be implemented"
        raise NotImplementedError()

class UnixServer(ServerBase):
    "Listen on a UNIX domain socket"
    kind = "unix"
    def __init__(self, path: str):
        self.path = path
    def address(self) -> str:
        return self.path
    def start(self, client_connected_cb, **kwargs):
        return asyncio.start_unix_server(client_connected_cb, self.path, **kwargs)

class NetServer(ServerBase):
    "Listen on a TCP host and port"
    kind = "net"
    def __init__(self, host: str, port: int):
        self.host = host
        self.port = port & 65535
    def address(self) -> str:
        if ":" in self.host:
            return "[" + self.host + "]:" + str(self.port)
        return self.host + ":" + str(self.port)
    def start(self, client_connected_cb, **kwargs):
        return asyncio.start_server(client_connected_cb, self.host, self.port, **kwargs)

LISTENERS = {
    "net": lambda section: NetServer(host = section["host"], port = section.getint("port")),
    "unix": lambda section: UnixServer(path = section["path"])
}

def from_config(section) -> ServerBase:
    """ Build the listener described by a [Server] config section """
    if section["type"] not in LISTENERS:
        raise NotImplementedError("Unknown server type: " + section["type"])
    return LISTENERS[section["type"]](section)
