"""Identifier minting and decoding routes."""

from typing import Optional

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import JSONResponse

from core.errors import InvalidFieldError, MalformedInputError
from internal.logging import get_logger

router = APIRouter(prefix="/api/v1/ids", tags=["ids"])

MAX_BATCH = 1000

# These will be set by app.py
_codec = None
_stats = None


def init(codec, stats):
    """Initialize with codec and stats references."""
    global _codec, _stats
    _codec = codec
    _stats = stats


def _describe(ident, hex_id):
    return {"hex": hex_id, "display": ident.display(), **ident.to_dict()}


@router.post("")
async def mint(
    count: int = Query(1, ge=1, le=MAX_BATCH),
    namespace: Optional[str] = Query(None),
):
    """Mint one or more identifiers, in creation order."""
    ids = []
    for _ in range(count):
        ident = _codec.new(namespace)
        try:
            hex_id = ident.hex()
        except InvalidFieldError as exc:
            _stats.record_rejected()
            raise HTTPException(status_code=422, detail=exc.to_dict()) from exc
        ids.append(_describe(ident, hex_id))
    _stats.record_minted(len(ids))
    return {"layout": _codec.layout.name, "ids": ids}


@router.get("/{hex_id}")
async def parse(hex_id: str):
    """Decode a hex identifier into its fields."""
    try:
        ident = _codec.decode_hex(hex_id)
    except MalformedInputError as exc:
        _stats.record_rejected()
        get_logger().warn("rejected identifier", error=exc, input=hex_id[:64])
        return JSONResponse(content=exc.to_dict(), status_code=400)
    _stats.record_decoded()
    return _describe(ident, hex_id.lower())
