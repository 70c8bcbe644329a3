"""
Line framing for server-sent-event streams returned by AI providers.

Bytes arrive in arbitrary network reads. `FrameBuffer` decodes them
incrementally (a multi-byte character may be split between reads), cuts the
text on newlines and keeps the trailing partial line until the next read.
`classify_line` turns one complete line into a `StreamFrame`.
"""
from __future__ import annotations

import codecs
import json
from dataclasses import dataclass
from enum import Enum
from typing import Any

from resume_review.ai.errors import FrameDecodeError

DATA_PREFIX = "data:"
COMMENT_PREFIX = ":"
TERMINAL_MARKER = "[DONE]"


class FrameKind(str, Enum):
    DATA = "data"
    COMMENT = "comment"
    TERMINAL = "terminal"
    OTHER = "other"


@dataclass(frozen=True)
class StreamFrame:
    kind: FrameKind
    payload: str = ""


class FrameBuffer:
    def __init__(self, encoding: str = "utf-8"):
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._pending = ""

    @property
    def pending(self) -> str:
        return self._pending

    def feed(self, chunk: bytes) -> list[str]:
        """Append one network read and return every line it completed."""
        self._pending += self._decoder.decode(chunk)
        if "\n" not in self._pending:
            return []
        *lines, self._pending = self._pending.split("\n")
        return lines

    def flush(self) -> list[str]:
        """Drain the decoder and the residual partial line at end of stream."""
        self._pending += self._decoder.decode(b"", final=True)
        residual, self._pending = self._pending, ""
        return [line for line in residual.split("\n") if line.strip()]


def classify_line(line: str) -> StreamFrame | None:
    trimmed = line.strip()
    if not trimmed:
        return None
    if trimmed.startswith(COMMENT_PREFIX):
        return StreamFrame(FrameKind.COMMENT, trimmed[len(COMMENT_PREFIX):].strip())
    if not trimmed.startswith(DATA_PREFIX):
        return StreamFrame(FrameKind.OTHER, trimmed)
    payload = trimmed[len(DATA_PREFIX):].strip()
    if payload == TERMINAL_MARKER:
        return StreamFrame(FrameKind.TERMINAL, payload)
    return StreamFrame(FrameKind.DATA, payload)


def decode_frame(frame: StreamFrame) -> dict[str, Any] | None:
    """Parse the JSON payload of a data frame; `None` for an empty payload."""
    if not frame.payload:
        return None
    try:
        decoded = json.loads(frame.payload)
    except json.JSONDecodeError as exc:
        raise FrameDecodeError(f"Invalid JSON in stream frame: {exc.msg}") from exc
    if not isinstance(decoded, dict):
        raise FrameDecodeError(f"Stream frame is not a JSON object: {type(decoded).__name__}")
    return decoded
