from identifier.codec import Codec, Identifier, decode, decode_hex, encode, encode_hex, new, to_display
from identifier.layout import DEFAULT_LAYOUT, V1, V2, Layout, get_layout
from identifier.machine import default_machine

__all__ = [
    "Codec",
    "Identifier",
    "Layout",
    "DEFAULT_LAYOUT",
    "V1",
    "V2",
    "get_layout",
    "default_machine",
    "new",
    "encode",
    "encode_hex",
    "decode",
    "decode_hex",
    "to_display",
]
