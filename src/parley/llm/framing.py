"""Incremental decoders for streamed HTTP response bodies.

Hides how raw network reads, which may end anywhere (mid-line, mid-JSON,
mid-UTF-8 sequence), are turned into complete JSON values.

Two framings are supported:
- SSE: ``data: <json>`` lines, ``data: [DONE]`` as terminator
- NDJSON: one complete JSON object per line

Decoders are pure: feed() bytes in, get frames out. They never touch the
network or the event bus.
"""

import json
from dataclasses import dataclass
from typing import Any, Union

DONE_MARKER = "[DONE]"

_LITERALS = ("true", "false", "null")


@dataclass(frozen=True)
class JSONFrame:
    """A complete, parsed JSON value."""

    data: Any


@dataclass(frozen=True)
class DoneFrame:
    """End-of-stream marker sent by the server."""


@dataclass(frozen=True)
class FrameError:
    """Data that could not be decoded."""

    message: str


Frame = Union[JSONFrame, DoneFrame, FrameError]


def is_truncated(error: json.JSONDecodeError) -> bool:
    """Tell whether a JSON error means "input ended too early".

    True when the parser ran off the end of the document, stopped inside a
    string, or stopped on a prefix of a literal such as ``tru``.
    """
    doc = error.doc
    if error.msg.startswith("Unterminated string"):
        return True
    if error.pos >= len(doc.rstrip()):
        return True
    rest = doc[error.pos:].strip()
    return any(literal.startswith(rest) and rest != literal for literal in _LITERALS)


def _preview(text: str, limit: int = 80) -> str:
    return text if len(text) <= limit else text[:limit] + "..."


class _LineBuffer:
    """Accumulates bytes and hands out complete lines."""

    def __init__(self) -> None:
        self._buffer = bytearray()

    def __len__(self) -> int:
        return len(self._buffer)

    def push(self, data: bytes) -> None:
        self._buffer.extend(data)

    def pop_line(self) -> str | None:
        """Remove and return the next complete line, or None."""
        index = self._buffer.find(b"\n")
        if index < 0:
            return None
        raw = bytes(self._buffer[:index])
        del self._buffer[: index + 1]
        return raw.decode("utf-8", errors="replace").rstrip("\r")

    def drain(self) -> str:
        """Remove and return whatever is left, terminated or not."""
        raw = bytes(self._buffer)
        self._buffer.clear()
        return raw.decode("utf-8", errors="replace").rstrip("\r")

    def clear(self) -> None:
        self._buffer.clear()


class SSEDecoder:
    """Decoder for ``data: <json>`` server-sent-event streams.

    Only complete lines are decoded. A JSON payload that is cut short is
    kept and prefixed to the payload of the next ``data:`` line; any other
    parse error produces one FrameError and clears everything buffered so
    one bad record cannot corrupt the ones after it. ``data: [DONE]`` always
    ends the stream, even while a cut-short payload is still held back.
    """

    def __init__(self) -> None:
        self._lines = _LineBuffer()
        self._pending: str | None = None

    @property
    def buffered(self) -> int:
        """Bytes and characters held back waiting for more input."""
        return len(self._lines) + len(self._pending or "")

    def feed(self, data: bytes) -> list[Frame]:
        """Decode every complete line contained in the buffered input."""
        self._lines.push(data)
        frames: list[Frame] = []
        while (line := self._lines.pop_line()) is not None:
            decoded = self._decode_line(line)
            frames.extend(decoded)
            if any(isinstance(frame, FrameError) for frame in decoded):
                self.reset()
                break
        return frames

    def flush(self) -> list[Frame]:
        """Decode the unterminated tail of the stream at end of input."""
        frames: list[Frame] = []
        tail = self._lines.drain()
        if tail:
            frames.extend(self._decode_line(tail))
        if self._pending is not None:
            frames.append(self._incomplete_message())
        return frames

    def reset(self) -> None:
        """Drop all buffered input."""
        self._lines.clear()
        self._pending = None

    def _incomplete_message(self) -> FrameError:
        error = FrameError(f"Stream ended in the middle of a message: {_preview(self._pending or '')!r}")
        self._pending = None
        return error

    def _decode_line(self, line: str) -> list[Frame]:
        if not line.startswith("data:"):
            # Blank separators, comments and other SSE fields
            return []
        payload = line[5:]
        if payload.startswith(" "):
            payload = payload[1:]

        if payload.strip() == DONE_MARKER:
            if self._pending is not None:
                return [self._incomplete_message(), DoneFrame()]
            return [DoneFrame()]

        if self._pending is not None:
            payload = self._pending + payload
            self._pending = None
        if not payload.strip():
            return []

        try:
            return [JSONFrame(json.loads(payload))]
        except json.JSONDecodeError as e:
            if is_truncated(e):
                self._pending = payload
                return []
            return [FrameError(f"Malformed stream data ({e.msg}): {_preview(payload)!r}")]


class NDJSONDecoder:
    """Decoder for newline-delimited JSON streams.

    Each line is a whole JSON object, so only partial lines are buffered.
    A malformed line produces a FrameError and decoding continues with the
    next line.
    """

    def __init__(self) -> None:
        self._lines = _LineBuffer()

    @property
    def buffered(self) -> int:
        return len(self._lines)

    def feed(self, data: bytes) -> list[Frame]:
        self._lines.push(data)
        frames: list[Frame] = []
        while (line := self._lines.pop_line()) is not None:
            frame = self._decode_line(line)
            if frame is not None:
                frames.append(frame)
        return frames

    def flush(self) -> list[Frame]:
        frame = self._decode_line(self._lines.drain())
        return [frame] if frame is not None else []

    def reset(self) -> None:
        self._lines.clear()

    @staticmethod
    def _decode_line(line: str) -> Frame | None:
        if not line.strip():
            return None
        try:
            return JSONFrame(json.loads(line))
        except json.JSONDecodeError as e:
            return FrameError(f"Malformed stream data ({e.msg}): {_preview(line)!r}")
