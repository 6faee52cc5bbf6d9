"""
Sortable identifier codec.

Binary form (default v2 layout, 16 bytes):
    3 bytes namespace | 7 bytes time | 2 bytes machine | 4 bytes noise

Time is the microsecond offset from 2020-01-01T00:00:00Z, big-endian,
keeping the low bytes of a 64-bit integer. Within one namespace, byte
order (and therefore hex order) follows creation time.
"""

import binascii
import secrets
from datetime import datetime, timezone

from core.errors import ConfigError, InvalidFieldError, MalformedInputError, TruncatedInputError
from identifier.layout import DEFAULT_LAYOUT, get_layout
from identifier.machine import default_machine
from utils.timestamp import EPOCH, format_display, from_epoch_micros, to_epoch_micros


def _as_bytes(value, field="value"):
    if isinstance(value, str):
        return value.encode("utf-8")
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    raise InvalidFieldError(
        f"{field} must be str or bytes, got {type(value).__name__}", field=field
    )


class Identifier:
    """A namespace tag, a creation time, a machine tag and random noise."""

    __slots__ = ("namespace", "timestamp", "machine", "noise", "layout")

    def __init__(self, namespace, timestamp, machine, noise, layout=DEFAULT_LAYOUT):
        self.namespace = _as_bytes(namespace, "namespace")
        self.timestamp = timestamp
        self.machine = _as_bytes(machine, "machine")
        self.noise = _as_bytes(noise, "noise")
        self.layout = layout

    def with_namespace(self, namespace):
        self.namespace = _as_bytes(namespace, "namespace")
        return self

    def with_machine(self, machine):
        self.machine = _as_bytes(machine, "machine")
        return self

    def to_bytes(self):
        return encode(self)

    def hex(self):
        return encode_hex(self)

    def display(self):
        return to_display(self)

    @classmethod
    def from_bytes(cls, data, layout=DEFAULT_LAYOUT):
        return decode(data, layout)

    @classmethod
    def from_hex(cls, text, layout=DEFAULT_LAYOUT):
        return decode_hex(text, layout)

    def to_dict(self):
        return {
            "namespace": self.namespace.decode("utf-8", "replace"),
            "timestamp": self.timestamp.isoformat(),
            "machine": self.machine.hex(),
            "noise": self.noise.hex(),
        }

    def __eq__(self, other):
        if not isinstance(other, Identifier):
            return NotImplemented
        return (
            self.namespace == other.namespace
            and self.timestamp == other.timestamp
            and self.machine == other.machine
            and self.noise == other.noise
        )

    __hash__ = None

    def __str__(self):
        return to_display(self)

    def __repr__(self):
        return (
            f"Identifier(namespace={self.namespace!r}, timestamp={self.timestamp.isoformat()!r}, "
            f"machine={self.machine.hex()!r}, noise={self.noise.hex()!r})"
        )


def new(namespace=None, machine=None, layout=DEFAULT_LAYOUT):
    """Create a fresh identifier stamped with the current time."""
    return Identifier(
        namespace=layout.default_namespace if namespace is None else namespace,
        timestamp=datetime.now(timezone.utc),
        machine=default_machine(layout.machine_len) if machine is None else machine,
        noise=secrets.token_bytes(layout.noise_len),
        layout=layout,
    )


def _field_bytes(ident, field, expected):
    # Fields are public, so they are checked again at encode time.
    value = _as_bytes(getattr(ident, field), field)
    actual = len(value)
    if actual != expected:
        raise InvalidFieldError(
            f"length of {field} must be {expected}, got {actual}",
            field=field,
            context={"expected": expected, "actual": actual},
        )
    return value


def encode(ident):
    """Binary form of ident; raises InvalidFieldError on any bad field."""
    layout = ident.layout
    namespace = _field_bytes(ident, "namespace", layout.namespace_len)

    offset = to_epoch_micros(ident.timestamp)
    if offset < 0:
        raise InvalidFieldError(f"timestamp must not precede {EPOCH.isoformat()}", field="timestamp")
    if offset > layout.max_offset:
        raise InvalidFieldError(
            f"timestamp does not fit in {layout.time_len} time bytes", field="timestamp"
        )

    machine = _field_bytes(ident, "machine", layout.machine_len)
    noise = _field_bytes(ident, "noise", layout.noise_len)

    time_bytes = offset.to_bytes(8, "big")[8 - layout.time_len:]
    return namespace + time_bytes + machine + noise


def encode_hex(ident):
    return encode(ident).hex()


def to_display(ident):
    """Human readable, second precision. Not meant to be decoded."""
    return "-".join([
        _as_bytes(ident.namespace, "namespace").decode("utf-8", "replace"),
        format_display(ident.timestamp),
        _as_bytes(ident.machine, "machine").hex(),
        _as_bytes(ident.noise, "noise").hex(),
    ])


def decode(data, layout=DEFAULT_LAYOUT):
    """Rebuild an identifier from exactly layout.size bytes."""
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise MalformedInputError(f"expected bytes, got {type(data).__name__}")
    data = bytes(data)

    if len(data) < layout.size:
        raise TruncatedInputError(
            f"identifier needs {layout.size} bytes, got {len(data)}",
            expected=layout.size,
            actual=len(data),
        )
    if len(data) > layout.size:
        raise MalformedInputError(
            f"identifier needs {layout.size} bytes, got {len(data)}",
            expected=layout.size,
            actual=len(data),
        )

    offset = int.from_bytes(data[layout.time_start:layout.machine_start], "big")
    return Identifier(
        namespace=data[:layout.time_start],
        timestamp=from_epoch_micros(offset),
        machine=data[layout.machine_start:layout.noise_start],
        noise=data[layout.noise_start:],
        layout=layout,
    )


def decode_hex(text, layout=DEFAULT_LAYOUT):
    try:
        data = binascii.unhexlify(text)
    except (binascii.Error, ValueError, TypeError) as exc:
        raise MalformedInputError("identifier is not valid hex", cause=exc) from exc
    return decode(data, layout)


class Codec:
    """Codec bound to one layout, with optional namespace and machine overrides."""

    __slots__ = ("layout", "namespace", "machine")

    def __init__(self, layout=DEFAULT_LAYOUT, namespace=None, machine=None):
        self.layout = layout
        self.namespace = None if namespace is None else _as_bytes(namespace, "namespace")
        self.machine = None if machine is None else _as_bytes(machine, "machine")

    @classmethod
    def from_config(cls, codec_config):
        layout = get_layout(codec_config.layout)
        namespace = codec_config.namespace
        if namespace is not None:
            try:
                namespace = _as_bytes(namespace, "namespace")
            except InvalidFieldError as exc:
                raise ConfigError("namespace must be a string", key="namespace", cause=exc) from exc
        if namespace is not None and len(namespace) != layout.namespace_len:
            raise ConfigError(f"namespace must be {layout.namespace_len} bytes", key="namespace")

        machine = codec_config.machine
        if machine is not None:
            try:
                machine = bytes.fromhex(machine)
            except (ValueError, TypeError) as exc:
                raise ConfigError("machine must be hex", key="machine", cause=exc) from exc
            if len(machine) != layout.machine_len:
                raise ConfigError(f"machine must be {layout.machine_len} bytes", key="machine")
        return cls(layout, namespace, machine)

    def new(self, namespace=None):
        if namespace is None:
            namespace = self.namespace
        return new(namespace=namespace, machine=self.machine, layout=self.layout)

    def _check_layout(self, ident):
        if ident.layout != self.layout:
            raise InvalidFieldError(
                f"identifier uses layout {ident.layout.name}, codec uses {self.layout.name}",
                field="layout",
            )

    def encode(self, ident):
        self._check_layout(ident)
        return encode(ident)

    def encode_hex(self, ident):
        self._check_layout(ident)
        return encode_hex(ident)

    def display(self, ident):
        return to_display(ident)

    def decode(self, data):
        return decode(data, self.layout)

    def decode_hex(self, text):
        return decode_hex(text, self.layout)
