#! /usr/bin/python3

import configparser

import echoscgi
__doc__ = "Configuration file loader for EchoSCGI."

CONFIG = {}

DEFAULTS = {
    "Server": {
        "type": "net",
        "host": "127.0.0.1",
        "port": "4000",
        "path": "/run/echoscgi.sock"
    },
    "Path": {
        "prefix": "/",
        "handlers": "echo"
    },
    "Tuning": {
        "max head size": str(1 << 20),
        "max body size": str(1 << 24)
    },
    "Report": {
        "width": "80",
        "pad": "="
    }
}

def load(path: str = "config.ini"):
    "Load config file and apply to echoscgi"
    config = configparser.ConfigParser()
    config.read_dict(DEFAULTS)
    config.read(path)

    ## Server Definitions
    CONFIG["server"] = echoscgi.server.from_config(config["Server"])

    ## Path Prefix - Set the path prefix when accessed through HTTP
    CONFIG["prefix"] = config["Path"]["prefix"].rstrip("/")
    CONFIG["handlers"] = frozenset(config["Path"]["handlers"].split())
    CONFIG["maxsize"] = {
        "head": config["Tuning"].getint("max head size"),
        "body": config["Tuning"].getint("max body size")
    }
    echoscgi.field.MAX_CONTENT_LENGTH = CONFIG["maxsize"]["body"]

    ## Report layout
    CONFIG["report"] = {
        "width": config["Report"].getint("width"),
        "pad": config["Report"]["pad"][:1] or "="
    }
    echoscgi.inspector.WIDTH = CONFIG["report"]["width"]
    echoscgi.inspector.PAD = CONFIG["report"]["pad"]
    return CONFIG

load()
if __name__ == "__main__":
    print(CONFIG)
