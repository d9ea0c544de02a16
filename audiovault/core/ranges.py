"""HTTP byte-range resolution for audio playback.

Turns an optional ``Range`` header and the stored object size into one of
three outcomes:

* ``FullBody``: no header, serve everything with status 200.
* ``PartialContent``: a satisfiable ``bytes=start-end`` range, status 206.
* ``Unsatisfiable``: malformed or out-of-bounds range, status 416 with
  ``Content-Range: bytes */{total}`` and no body.

Only a single ``bytes=<start>-<end>`` range is understood. Suffix ranges
(``bytes=-500``) and multi-range requests are treated as unsatisfiable.
"""
import re
from dataclasses import dataclass
from typing import Dict, Optional, Union

_RANGE_REGEX = re.compile(r"^bytes=([^-]*)-(.*)$")
_DIGITS = re.compile(r"^\d+$")


@dataclass(frozen=True)
class FullBody:
    total_size: int
    status_code: int = 200

    @property
    def headers(self) -> Dict[str, str]:
        return {
            "Content-Length": str(self.total_size),
            "Accept-Ranges": "bytes",
        }


@dataclass(frozen=True)
class PartialContent:
    start: int
    end: int  # inclusive
    total_size: int
    status_code: int = 206

    @property
    def length(self) -> int:
        return self.end - self.start + 1

    @property
    def headers(self) -> Dict[str, str]:
        return {
            "Content-Length": str(self.length),
            "Content-Range": f"bytes {self.start}-{self.end}/{self.total_size}",
            "Accept-Ranges": "bytes",
        }


@dataclass(frozen=True)
class Unsatisfiable:
    total_size: int
    status_code: int = 416

    @property
    def headers(self) -> Dict[str, str]:
        return {"Content-Range": f"bytes */{self.total_size}"}


RangeResult = Union[FullBody, PartialContent, Unsatisfiable]


def _parse_position(value: str) -> Optional[int]:
    value = value.strip()
    if not _DIGITS.match(value):
        return None
    return int(value)


def resolve_range(range_header: Optional[str], total_size: int) -> RangeResult:
    """Resolve a ``Range`` header value against an object of ``total_size`` bytes."""
    if total_size < 0:
        raise ValueError(f"total_size must be non-negative, got {total_size}")
    if not range_header:
        return FullBody(total_size)

    match = _RANGE_REGEX.match(range_header.strip())
    if not match:
        return Unsatisfiable(total_size)
    start = _parse_position(match.group(1))
    raw_end = match.group(2).strip()
    end = _parse_position(raw_end) if raw_end else total_size - 1
    if start is None or end is None:
        return Unsatisfiable(total_size)
    if start >= total_size or end >= total_size:
        return Unsatisfiable(total_size)
    # Not caught by the bounds checks above when end < total_size
    if start > end:
        return Unsatisfiable(total_size)
    return PartialContent(start=start, end=end, total_size=total_size)
