#!/usr/bin/python3

from . import error
from . import output
from . import field
from . import server
from . import request
from . import inspector

__doc__ = "Functionalities shared by the SCGI server and its handlers"

async def close_connection(stdout):
    "Close server connection"
    try:
        stdout.close()
        await stdout.wait_closed()
    except ConnectionError:
        print("Connection Error when closing connection.")

## Rebinding

ResponseError = error.ResponseError
write_http = output.write_http
InboundRequest = request.InboundRequest
