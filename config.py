import json
from pathlib import Path

_DEFAULT_CONFIG = Path(__file__).parent / "config.json"


class CodecConfig:
    __slots__ = ("layout", "namespace", "machine")

    def __init__(self, layout="v2", namespace=None, machine=None):
        self.layout = layout
        self.namespace = namespace
        # hex string; None means the host name hash
        self.machine = machine


class ServerConfig:
    __slots__ = ("host", "port")

    def __init__(self, host="127.0.0.1", port=8080):
        self.host = host
        self.port = port


class LoggingConfig:
    __slots__ = ("level", "crash_file")

    def __init__(self, level="INFO", crash_file="logs/crash.log"):
        self.level = level
        self.crash_file = crash_file


class Config:
    __slots__ = ("codec", "server", "logging")

    def __init__(self, codec=None, server=None, logging=None):
        self.codec = codec or CodecConfig()
        self.server = server or ServerConfig()
        self.logging = logging or LoggingConfig()

    @classmethod
    def from_dict(cls, d):
        return cls(
            CodecConfig(**d.get("codec", {})),
            ServerConfig(**d.get("server", {})),
            LoggingConfig(**d.get("logging", {})),
        )


def load_config(path=None):
    config_path = Path(path) if path else _DEFAULT_CONFIG

    if not config_path.exists():
        return Config()

    with open(config_path) as file:
        return Config.from_dict(json.load(file))
