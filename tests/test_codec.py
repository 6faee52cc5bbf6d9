"""Unit tests for the identifier codec."""

import re
import time
from datetime import datetime, timedelta, timezone

import pytest

from core.errors import InvalidFieldError, MalformedInputError, TruncatedInputError
from identifier.codec import Codec, Identifier, decode, decode_hex, encode, encode_hex, new, to_display
from identifier.layout import V1, V2
from identifier.machine import default_machine
from utils.timestamp import EPOCH


class TestCreate:
    """Tests for minting fresh identifiers."""

    def test_defaults(self):
        """New identifier uses the layout defaults."""
        ident = new()
        assert ident.namespace == b"___"
        assert ident.machine == default_machine(2)
        assert len(ident.noise) == 4
        assert ident.layout is V2

    def test_timestamp_is_now(self):
        """Timestamp is the current UTC wall clock."""
        before = datetime.now(timezone.utc)
        ident = new()
        after = datetime.now(timezone.utc)
        assert before <= ident.timestamp <= after

    def test_overrides(self):
        """Namespace and machine can be overridden."""
        ident = new(namespace="ord", machine=b"\xff\xee")
        assert ident.namespace == b"ord"
        assert ident.machine == b"\xff\xee"

    def test_chained_setters(self):
        """with_namespace and with_machine chain."""
        ident = new().with_namespace("usr").with_machine(b"\x00\x01")
        assert ident.namespace == b"usr"
        assert ident.machine == b"\x00\x01"

    def test_noise_differs(self):
        """Noise is drawn fresh for every identifier."""
        noises = {new().noise for _ in range(50)}
        assert len(noises) > 1


class TestEncode:
    """Tests for binary, hex and display encoding."""

    def test_known_bytes(self, fixed_identifier):
        """Segments are written in namespace, time, machine, noise order."""
        assert encode(fixed_identifier) == (
            b"abc" + b"\x00\x00\x00\x00\x00\x00\x01" + b"\x01\x02" + b"\x0a\x0b\x0c\x0d"
        )

    def test_known_hex(self, fixed_identifier):
        """Hex form is lowercase."""
        assert encode_hex(fixed_identifier) == "616263" + "00000000000001" + "0102" + "0a0b0c0d"
        assert fixed_identifier.hex() == encode_hex(fixed_identifier)

    def test_fixed_length(self):
        """Binary and hex forms have fixed length."""
        for _ in range(20):
            ident = new()
            assert len(ident.to_bytes()) == 16
            assert len(ident.hex()) == 32

    def test_v1_length(self):
        """Legacy layout encodes its own segment lengths."""
        ident = new(layout=V1)
        assert ident.namespace == b"uuid"
        assert len(ident.to_bytes()) == V1.size
        assert ident.hex().startswith(b"uuid".hex())

    def test_epoch_encodes_to_zero(self):
        """The epoch itself is a zero time segment."""
        ident = Identifier(b"abc", EPOCH, b"\x00\x00", b"\x00\x00\x00\x00")
        assert encode(ident)[3:10] == bytes(7)

    def test_naive_timestamp_is_utc(self):
        """Naive datetimes are read as UTC."""
        ident = Identifier(b"abc", datetime(2020, 1, 1, 0, 0, 1), b"\x00\x00", b"\x00\x00\x00\x00")
        assert int.from_bytes(encode(ident)[3:10], "big") == 1_000_000

    def test_display_format(self):
        """Display string is namespace, second-precision time, machine hex, noise hex."""
        ident = new()
        pattern = r"^___-\d{4}_\d{2}_\d{2}T\d{2}:\d{2}:\d{2}-[0-9a-f]{4}-[0-9a-f]{8}$"
        assert re.match(pattern, str(ident))
        assert ident.display() == to_display(ident)

    def test_display_known_value(self, fixed_identifier):
        """Display drops sub-second precision."""
        assert str(fixed_identifier) == "abc-2020_01_01T00:00:00-0102-0a0b0c0d"

    def test_display_v1(self):
        """Legacy display carries the uuid namespace."""
        pattern = r"^uuid-\d{4}_\d{2}_\d{2}T\d{2}:\d{2}:\d{2}-[0-9a-f]{4}-[0-9a-f]{6}$"
        assert re.match(pattern, str(new(layout=V1)))


class TestEncodeValidation:
    """Tests for fields that cannot be encoded."""

    @pytest.mark.parametrize("field", ["namespace", "machine", "noise"])
    def test_wrong_length_rejected(self, field):
        """Wrong field lengths fail instead of truncating or padding."""
        ident = new()
        setattr(ident, field, bytes(20))
        with pytest.raises(InvalidFieldError, match=f"length of {field}") as info:
            ident.to_bytes()
        assert info.value.context["field"] == field

    @pytest.mark.parametrize("field", ["namespace", "machine", "noise"])
    def test_short_length_rejected(self, field):
        """Too-short fields fail as well."""
        ident = new()
        setattr(ident, field, b"")
        with pytest.raises(InvalidFieldError):
            ident.hex()

    def test_before_epoch_rejected(self):
        """Timestamps before 2020 cannot be encoded."""
        ident = new()
        ident.timestamp = EPOCH - timedelta(microseconds=1)
        with pytest.raises(InvalidFieldError, match="must not precede"):
            ident.to_bytes()

    def test_overflow_rejected(self):
        """Timestamps past the time segment range fail instead of wrapping."""
        ident = new()
        ident.timestamp = EPOCH + timedelta(microseconds=V2.max_offset + 1)
        with pytest.raises(InvalidFieldError, match="does not fit"):
            ident.to_bytes()

    def test_max_offset_accepted(self):
        """The largest representable offset still round trips."""
        ident = new()
        ident.timestamp = EPOCH + timedelta(microseconds=V2.max_offset)
        assert decode(ident.to_bytes()) == ident

    @pytest.mark.parametrize("build", [
        lambda: Identifier(3, EPOCH, b"\x00\x00", b"\x00" * 4),
        lambda: Identifier(b"abc", EPOCH, 2, b"\x00" * 4),
        lambda: new(namespace=3),
        lambda: new().with_machine(2),
    ])
    def test_int_fields_rejected(self, build):
        """Integers are not turned into zero-filled fields."""
        with pytest.raises(InvalidFieldError, match="must be str or bytes"):
            build()

    def test_assigned_int_field_rejected(self):
        """Fields assigned directly are still type checked on encode."""
        ident = new()
        ident.machine = 2
        with pytest.raises(InvalidFieldError) as info:
            ident.to_bytes()
        assert info.value.context["field"] == "machine"

    def test_assigned_text_and_bytearray_fields(self):
        """Directly assigned str and bytearray fields encode to bytes."""
        ident = new()
        ident.namespace = "abc"
        ident.noise = bytearray(4)
        data = ident.to_bytes()
        assert type(data) is bytes
        assert data.startswith(b"abc")
        assert data.endswith(bytes(4))
        assert str(ident).startswith("abc-")

    def test_errors_are_value_errors(self):
        """Field errors can be caught as ValueError."""
        ident = new().with_namespace("toolong")
        with pytest.raises(ValueError):
            ident.to_bytes()


class TestDecode:
    """Tests for decoding binary and hex forms."""

    def test_round_trip_binary(self):
        """decode(encode(i)) == i at microsecond precision."""
        for _ in range(100):
            ident = new()
            assert decode(encode(ident)) == ident

    def test_round_trip_hex(self):
        """Hex decode reproduces every field."""
        ident = new(namespace="abc")
        decoded = decode_hex(ident.hex())
        assert decoded.namespace == b"abc"
        assert decoded.timestamp == ident.timestamp
        assert decoded.machine == ident.machine
        assert decoded.noise == ident.noise

    def test_reencode_is_exact(self, fixed_identifier):
        """decode then encode gives back the same bytes."""
        data = encode(fixed_identifier)
        assert encode(decode(data)) == data

    def test_round_trip_v1(self):
        """Legacy layout round trips with its own layout."""
        ident = new(layout=V1)
        assert Identifier.from_hex(ident.hex(), layout=V1) == ident

    def test_decoded_timestamp_is_utc(self, fixed_identifier):
        """Decoded timestamps are aware UTC datetimes."""
        decoded = Identifier.from_bytes(encode(fixed_identifier))
        assert decoded.timestamp.tzinfo == timezone.utc
        assert decoded.timestamp == EPOCH + timedelta(microseconds=1)

    def test_accepts_bytearray(self, fixed_identifier):
        """bytearray and memoryview are accepted."""
        data = encode(fixed_identifier)
        assert decode(bytearray(data)) == fixed_identifier
        assert decode(memoryview(data)) == fixed_identifier

    def test_short_input(self):
        """Short input is reported as truncated."""
        with pytest.raises(TruncatedInputError) as info:
            decode(new().to_bytes()[:10])
        assert info.value.context == {"expected": 16, "actual": 10}

    def test_long_input(self):
        """Over-long input is malformed but not truncated."""
        with pytest.raises(MalformedInputError) as info:
            decode(new().to_bytes() + b"\x00")
        assert not isinstance(info.value, TruncatedInputError)

    def test_not_bytes(self):
        """Strings must go through decode_hex."""
        with pytest.raises(MalformedInputError):
            decode(new().hex())

    @pytest.mark.parametrize("text", ["zz" * 16, "abc", "", "é" * 32])
    def test_invalid_hex(self, text):
        """Invalid hex is a malformed input error."""
        with pytest.raises(MalformedInputError):
            decode_hex(text)

    def test_uppercase_hex(self, fixed_identifier):
        """Uppercase hex decodes to the same identifier."""
        assert decode_hex(fixed_identifier.hex().upper()) == fixed_identifier


class TestOrdering:
    """Tests for time ordering of encoded identifiers."""

    def test_hex_sorts_in_creation_order(self):
        """Identifiers spaced 1ms apart sort in creation order."""
        created = []
        for _ in range(100):
            time.sleep(0.001)
            created.append(new().hex())
        assert sorted(created) == created

    def test_binary_sorts_by_timestamp(self):
        """Byte order follows timestamp order within one namespace."""
        base = datetime(2024, 5, 1, tzinfo=timezone.utc)
        idents = [
            Identifier(b"abc", base + timedelta(microseconds=step), b"\xff\xff", b"\xff\xff\xff\xff")
            for step in (0, 1, 255, 256, 10**9)
        ]
        encoded = [ident.to_bytes() for ident in idents]
        assert sorted(encoded) == encoded


class TestClockBeforeEpoch:
    """Tests for a host clock set before 2020."""

    def test_new_identifier_cannot_encode(self, clock_2019):
        """Encoding reports the epoch violation."""
        ident = new()
        with pytest.raises(InvalidFieldError, match="must not precede") as info:
            ident.hex()
        assert len(info.value.error_id) == 32

    def test_decode_errors_still_raised(self, clock_2019):
        """Decode errors are raised with a random tracking id."""
        with pytest.raises(MalformedInputError) as info:
            decode_hex("zz")
        assert re.fullmatch(r"[0-9a-f]{32}", info.value.error_id)


class TestCodec:
    """Tests for the configured Codec facade."""

    def test_codec_defaults(self, codec):
        """Codec without overrides uses layout defaults."""
        ident = codec.new()
        assert ident.namespace == V2.default_namespace
        assert codec.decode_hex(codec.encode_hex(ident)) == ident

    def test_codec_overrides(self):
        """Codec overrides apply to every new identifier."""
        codec = Codec(V2, namespace="job", machine=b"\xab\xcd")
        ident = codec.new()
        assert ident.namespace == b"job"
        assert ident.machine == b"\xab\xcd"
        assert codec.new("evt").namespace == b"evt"

    def test_codec_rejects_other_layout(self):
        """A codec only encodes identifiers of its own layout."""
        codec = Codec(V2)
        ident = new(layout=V1)
        with pytest.raises(InvalidFieldError, match="layout") as info:
            codec.encode(ident)
        assert info.value.context["field"] == "layout"
        with pytest.raises(InvalidFieldError):
            codec.encode_hex(ident)

    def test_codec_decode_uses_layout(self):
        """Codec decodes with its own layout."""
        codec = Codec(V1)
        ident = codec.new()
        assert codec.decode(codec.encode(ident)).namespace == b"uuid"
        with pytest.raises(MalformedInputError):
            Codec(V2).decode(codec.encode(ident) + b"\x00")
