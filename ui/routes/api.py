"""API routes for stats and the active layout."""

from fastapi import APIRouter, Depends

from identifier.machine import default_machine
from utils.timestamp import format_timestamp
from ui.auth import verify_basic_auth

router = APIRouter(prefix="/api/v1", tags=["api"])

# These will be set by app.py
_codec = None
_stats = None


def init(codec, stats):
    """Initialize with codec and stats references."""
    global _codec, _stats
    _codec = codec
    _stats = stats


@router.get("/layout")
async def layout():
    """Return the binary layout identifiers are minted with."""
    return _codec.layout.to_dict()


@router.get("/stats")
async def stats(username=Depends(verify_basic_auth)):
    """Return issue counters (requires basic auth)."""
    return {
        "timestamp": format_timestamp(),
        "layout": _codec.layout.name,
        "machine": (_codec.machine or default_machine(_codec.layout.machine_len)).hex(),
        "ids": _stats.get_stats(),
    }
