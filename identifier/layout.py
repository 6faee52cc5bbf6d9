"""Binary layouts: segment lengths of an identifier.

Segments are always written in the same order, namespace, time, machine,
noise, so that byte order follows creation time within a namespace.
"""

from core.errors import ConfigError


class Layout:
    __slots__ = ("name", "namespace_len", "time_len", "machine_len", "noise_len", "default_namespace")

    def __init__(self, name, namespace_len, time_len, machine_len, noise_len, default_namespace):
        if not 1 <= time_len <= 8:
            raise ConfigError(f"time segment must be 1..8 bytes, got {time_len}", key="time_len")
        if len(default_namespace) != namespace_len:
            raise ConfigError(
                f"default namespace must be {namespace_len} bytes", key="default_namespace"
            )
        self.name = name
        self.namespace_len = namespace_len
        self.time_len = time_len
        self.machine_len = machine_len
        self.noise_len = noise_len
        self.default_namespace = bytes(default_namespace)

    @property
    def size(self):
        return self.namespace_len + self.time_len + self.machine_len + self.noise_len

    @property
    def hex_size(self):
        return self.size * 2

    @property
    def max_offset(self):
        """Largest microsecond offset the time segment can hold."""
        return (1 << (8 * self.time_len)) - 1

    @property
    def time_start(self):
        return self.namespace_len

    @property
    def machine_start(self):
        return self.namespace_len + self.time_len

    @property
    def noise_start(self):
        return self.machine_start + self.machine_len

    def to_dict(self):
        return {
            "name": self.name,
            "size": self.size,
            "namespace_len": self.namespace_len,
            "time_len": self.time_len,
            "machine_len": self.machine_len,
            "noise_len": self.noise_len,
            "default_namespace": self.default_namespace.decode("utf-8", "replace"),
        }

    def __eq__(self, other):
        if not isinstance(other, Layout):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __hash__(self):
        return hash((self.name, self.namespace_len, self.time_len, self.machine_len, self.noise_len))

    def __repr__(self):
        return f"Layout({self.name!r}, size={self.size})"


V2 = Layout("v2", namespace_len=3, time_len=7, machine_len=2, noise_len=4, default_namespace=b"___")
V1 = Layout("v1", namespace_len=4, time_len=7, machine_len=2, noise_len=3, default_namespace=b"uuid")

DEFAULT_LAYOUT = V2

_LAYOUTS = {layout.name: layout for layout in (V1, V2)}


def get_layout(name):
    """Resolve a layout by name ("v1" or "v2")."""
    try:
        return _LAYOUTS[name.lower()]
    except (KeyError, AttributeError):
        raise ConfigError(f"unknown layout {name!r}", key="layout") from None
