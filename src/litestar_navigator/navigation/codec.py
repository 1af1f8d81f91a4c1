"""State token codec.

A state token is the only representation of progress a caller holds:
``v1.gzB64.<base64(gzip(JSON(state)))>``. Tokens are opaque, compact and
versioned; decoding re-validates the full state schema so forged, truncated or
foreign tokens are rejected.
"""

from __future__ import annotations

import base64
import binascii
import gzip
import json
import re
import zlib
from typing import Any

from pydantic import ValidationError

from litestar_navigator.core.state import WorkflowState
from litestar_navigator.core.types import CodecErrorCode
from litestar_navigator.exceptions import StateCodecError

__all__ = [
    "ENCODING",
    "STATE_VERSION",
    "TOKEN_PREFIX",
    "decode_state",
    "encode_state",
    "format_validation_errors",
    "get_compression_ratio",
    "get_token_version",
    "is_valid_token_format",
]

STATE_VERSION = "v1"
"""Token format version, bumped when the payload layout changes."""

ENCODING = "gzB64"
"""Payload encoding identifier."""

TOKEN_PREFIX = f"{STATE_VERSION}.{ENCODING}."

_VERSION_PATTERN = re.compile(r"^(v\d+)\.")


def _serialize(state: WorkflowState) -> bytes:
    return state.model_dump_json(by_alias=True, exclude_none=True).encode("utf-8")


def encode_state(state: WorkflowState) -> str:
    """Encode a workflow state into an opaque token.

    The gzip header timestamp is pinned so the same state always encodes to
    the same token.

    Args:
        state: The state to encode.

    Returns:
        The token, ``v1.gzB64.<payload>``.
    """
    compressed = gzip.compress(_serialize(state), mtime=0)
    return TOKEN_PREFIX + base64.b64encode(compressed).decode("ascii")


def decode_state(token: str) -> WorkflowState:
    """Decode a state token back into a validated WorkflowState.

    Args:
        token: A token produced by :func:`encode_state`.

    Returns:
        The decoded state.

    Raises:
        StateCodecError: ``INVALID_FORMAT`` for a wrong prefix or empty payload,
            ``DECODE_FAILED`` for bad base64 or JSON, ``DECOMPRESS_FAILED`` for a
            payload that is not gzip data, ``VALIDATION_FAILED`` when the JSON does
            not describe a valid state.
    """
    if not token.startswith(TOKEN_PREFIX):
        raise StateCodecError(
            f"Invalid token format. Expected prefix '{TOKEN_PREFIX}'",
            CodecErrorCode.INVALID_FORMAT,
        )

    payload = token[len(TOKEN_PREFIX) :]
    if not payload:
        raise StateCodecError("Empty token payload", CodecErrorCode.INVALID_FORMAT)

    try:
        compressed = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise StateCodecError("Failed to decode base64 payload", CodecErrorCode.DECODE_FAILED) from e

    try:
        raw = gzip.decompress(compressed)
    except (OSError, EOFError, zlib.error) as e:
        raise StateCodecError("Failed to decompress payload", CodecErrorCode.DECOMPRESS_FAILED) from e

    try:
        data: Any = json.loads(raw.decode("utf-8"))
    except ValueError as e:
        raise StateCodecError("Failed to parse JSON payload", CodecErrorCode.DECODE_FAILED) from e

    try:
        return WorkflowState.model_validate(data)
    except ValidationError as e:
        errors = format_validation_errors(e)
        raise StateCodecError(
            f"State validation failed: {'; '.join(errors)}",
            CodecErrorCode.VALIDATION_FAILED,
            errors=errors,
        ) from e


def is_valid_token_format(token: str) -> bool:
    """Cheaply check the prefix and base64 payload of a token without decoding it."""
    if not token.startswith(TOKEN_PREFIX):
        return False
    payload = token[len(TOKEN_PREFIX) :]
    if not payload:
        return False
    try:
        base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        return False
    return True


def get_token_version(token: str) -> str | None:
    """Extract the version tag (e.g. ``"v1"``) of a token without decoding it."""
    match = _VERSION_PATTERN.match(token)
    return match.group(1) if match else None


def get_compression_ratio(state: WorkflowState) -> float:
    """Return compressed size divided by raw JSON size, for diagnostics."""
    raw = _serialize(state)
    return len(gzip.compress(raw, mtime=0)) / len(raw)


def format_validation_errors(error: ValidationError) -> list[str]:
    """Flatten a pydantic ValidationError into ``"<field.path>: <message>"`` strings."""
    messages = []
    for issue in error.errors():
        path = ".".join(str(part) for part in issue["loc"]) or "<root>"
        messages.append(f"{path}: {issue['msg']}")
    return messages
