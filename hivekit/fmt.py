"""Integer conversion, bounded formatting and byte-string comparison."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Union

__all__ = ["itoa", "snprintf", "strcmp", "memcmp"]

BytesLike = Union[str, bytes, bytearray, memoryview]

_UINT64_MASK = (1 << 64) - 1
_HEX_DIGITS = "0123456789ABCDEF"
_DECIMAL = "0123456789"
# Width of a pointer rendered with "%p", "0x" prefix included.
_POINTER_WIDTH = 18


def _as_int64(value: int) -> int:
    return ((value + (1 << 63)) & _UINT64_MASK) - (1 << 63)


def _decimal(value: int) -> str:
    return str(_as_int64(value))


def _hex(value: int) -> str:
    value &= _UINT64_MASK
    if value == 0:
        return "0x00"
    digits = []
    while value:
        digits.append(_HEX_DIGITS[value & 0xF])
        value >>= 4
    text = "".join(reversed(digits))
    if len(text) == 1:
        text = "0" + text
    return "0x" + text


def itoa(value: int, base: int) -> str:
    """Convert an integer to text in base 10 or base 16.

    Base 10 yields a signed 64-bit decimal. Base 16 treats the value as an
    unsigned 64-bit quantity and yields upper-case digits with a ``0x``
    prefix, padded to at least two digits.
    """
    if base == 10:
        return _decimal(value)
    if base == 16:
        return _hex(value)
    raise ValueError(f"unsupported base: {base}")


class _Sink:
    """Accumulates output, silently dropping anything beyond the limit."""

    def __init__(self, limit: int) -> None:
        self.limit = limit
        self.parts: list[str] = []
        self.length = 0

    @property
    def full(self) -> bool:
        return self.length >= self.limit

    def put(self, text: str) -> None:
        room = self.limit - self.length
        if room <= 0 or not text:
            return
        chunk = text[:room]
        self.parts.append(chunk)
        self.length += len(chunk)

    def text(self) -> str:
        return "".join(self.parts)


def _next_arg(args: Iterator[object], directive: str) -> object:
    try:
        return next(args)
    except StopIteration:
        raise TypeError(f"not enough arguments for '%{directive}'") from None


def _char_of(arg: object) -> str:
    if isinstance(arg, str):
        if len(arg) != 1:
            raise TypeError("'%c' requires a single character")
        return arg
    return chr(int(arg) & 0xFF)  # type: ignore[call-overload]


def snprintf(size: int, fmt: str, *args: object) -> str:
    """Format ``args`` into at most ``size - 1`` characters.

    Supported directives are ``%c``, ``%d``, ``%p``, ``%x``, ``%s`` and
    ``%%``. A zero-padding width may follow ``%`` as ``%0N``; it is applied
    to the next ``%d`` directive. Unknown directives print nothing and
    consume no argument.
    """
    if size < 1:
        raise ValueError("size must be at least 1")

    sink = _Sink(size - 1)
    arg_iter = iter(args)
    pad_width = 0
    pos = 0
    end = len(fmt)

    while not sink.full:
        percent = fmt.find("%", pos)
        if percent < 0:
            sink.put(fmt[pos:])
            break
        sink.put(fmt[pos:percent])
        if sink.full:
            break
        pos = percent + 1

        if pos < end and fmt[pos] == "0":
            pos += 1
            while pos < end and fmt[pos] in _DECIMAL:
                pad_width = (pad_width * 10 + int(fmt[pos])) & 0xFF
                pos += 1

        if pos >= end:
            break
        directive = fmt[pos]
        pos += 1

        if directive == "c":
            sink.put(_char_of(_next_arg(arg_iter, directive)))
        elif directive == "%":
            sink.put("%")
        elif directive == "d":
            text = _decimal(int(_next_arg(arg_iter, directive)))  # type: ignore[call-overload]
            if pad_width > 0:
                sink.put("0" * max(0, pad_width - len(text)))
                pad_width = 0
            sink.put(text)
        elif directive == "p":
            text = _hex(int(_next_arg(arg_iter, directive)))  # type: ignore[call-overload]
            sink.put("0x")
            sink.put("0" * max(0, _POINTER_WIDTH - len(text)))
            sink.put(text[2:])
        elif directive == "x":
            text = _hex(int(_next_arg(arg_iter, directive)))  # type: ignore[call-overload]
            sink.put(text[2:])
        elif directive == "s":
            text = str(_next_arg(arg_iter, directive))
            sink.put(text.split("\0", 1)[0])

    return sink.text()


def _to_bytes(data: BytesLike) -> bytes:
    if isinstance(data, str):
        return data.encode("utf-8")
    return bytes(data)


def strcmp(s1: BytesLike, s2: BytesLike) -> int:
    """Compare two NUL-terminated strings byte by byte.

    Returns zero when equal, otherwise the difference of the first pair of
    differing bytes. Comparison stops at the first NUL byte.
    """
    left = _to_bytes(s1) + b"\0"
    right = _to_bytes(s2) + b"\0"
    for a, b in zip(left, right):
        if a != b:
            return a - b
        if a == 0:
            return 0
    return 0


def memcmp(s1: BytesLike, s2: BytesLike, n: int) -> int:
    """Compare the first ``n`` bytes of two buffers.

    Returns zero when equal, otherwise the difference of the first pair of
    differing bytes.
    """
    if n < 0:
        raise ValueError("n must not be negative")
    left = _to_bytes(s1)
    right = _to_bytes(s2)
    if n > len(left) or n > len(right):
        raise ValueError("n exceeds buffer length")
    for a, b in zip(left[:n], right[:n]):
        if a != b:
            return a - b
    return 0