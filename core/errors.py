"""Custom errors with tracking IDs."""

import secrets

from utils.timestamp import format_timestamp, to_epoch_micros


def _tracking_id():
    """Fresh identifier hex, or random hex when the clock cannot be encoded."""
    # Imported late: the codec itself raises these errors.
    from identifier.codec import new

    ident = new()
    if not 0 <= to_epoch_micros(ident.timestamp) <= ident.layout.max_offset:
        return secrets.token_hex(ident.layout.size)
    return ident.hex()


class BaseIdError(Exception):
    """Base error with unique ID and timestamp for tracking."""

    def __init__(self, message, context=None, cause=None):
        super().__init__(message)
        self.error_id = _tracking_id()
        self.timestamp = format_timestamp()
        self.context = context or {}
        self.cause = cause

    def __str__(self):
        return f"[{self.error_id}] {super().__str__()}"

    def to_dict(self):
        return {
            "error_id": self.error_id,
            "timestamp": self.timestamp,
            "type": type(self).__name__,
            "msg": self.args[0] if self.args else "",
            "context": self.context,
        }


class InvalidFieldError(BaseIdError, ValueError):
    """Caller misuse: a field cannot be encoded (length, epoch, range)."""

    def __init__(self, message, field=None, **kwargs):
        context = kwargs.pop("context", {})
        if field:
            context["field"] = field
        super().__init__(message, context=context, **kwargs)


class MalformedInputError(BaseIdError, ValueError):
    """Input handed to a decoder is not a valid identifier."""

    def __init__(self, message, expected=None, actual=None, **kwargs):
        context = kwargs.pop("context", {})
        if expected is not None:
            context["expected"] = expected
        if actual is not None:
            context["actual"] = actual
        super().__init__(message, context=context, **kwargs)


class TruncatedInputError(MalformedInputError):
    """Binary input shorter than the layout size."""


class ConfigError(BaseIdError):
    """Invalid configuration values."""

    def __init__(self, message, key=None, **kwargs):
        context = kwargs.pop("context", {})
        if key:
            context["key"] = key
        super().__init__(message, context=context, **kwargs)
