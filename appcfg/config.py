"""Parsing of simple ``key = value`` configuration files."""

from __future__ import annotations

import enum
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from os import PathLike
from pathlib import Path
from typing import Any, TypeVar

T = TypeVar("T")

_BACKSLASH = ord("\\")
_HASH = ord("#")
_EQUALS = ord("=")
_NEWLINE = ord("\n")
_CARRIAGE_RETURN = ord("\r")

_ESCAPES = {
    ord("t"): ord("\t"),
    ord("r"): ord("\r"),
    ord("n"): ord("\n"),
    ord("s"): ord(" "),
    ord("\\"): ord("\\"),
}


class ConfigError(Exception):
    """Base class for every configuration error."""


class InvalidEscapeCharError(ConfigError):
    """A value holds an escape sequence that is not supported."""

    def __init__(self, char: str) -> None:
        super().__init__(f"The escape character format is not supported \\{char}")
        self.char = char


class ValueParseError(ConfigError):
    """A value could not be converted to the requested type."""

    def __init__(self, text: str) -> None:
        super().__init__(f"parse value error: {text}")
        self.text = text


class ConfigParseError(ConfigError):
    """The configuration text is malformed."""

    def __init__(self, message: str, line: int) -> None:
        super().__init__(f"{message} at line {line}")
        self.message = message
        self.line = line


class _State(enum.Enum):
    KEY_BEGIN = enum.auto()
    COMMENT = enum.auto()
    KEY = enum.auto()
    EQUAL = enum.auto()
    VAL_BEGIN = enum.auto()
    VAL = enum.auto()
    VAL_CONTINUE = enum.auto()


@dataclass
class _Span:
    key_begin: int = 0
    key_end: int = 0
    val_begin: int = 0
    val_end: int = 0


def _skip(data: bytes, i: int, n: int, chars: bytes) -> int:
    """Return the first index at or after ``i`` whose byte is not in ``chars``."""
    while i < n and data[i] in chars:
        i += 1
    return i


def _until(data: bytes, i: int, n: int, chars: bytes) -> int:
    """Return the first index at or after ``i`` whose byte is in ``chars``."""
    while i < n and data[i] not in chars:
        i += 1
    return i


def _parse(data: bytes) -> list[tuple[bytes, bytes]]:
    spans: list[_Span] = []
    state = _State.KEY_BEGIN
    current = _Span()
    i, n, line = 0, len(data), 1

    def push(val_end: int) -> None:
        nonlocal current
        current.val_end = val_end
        spans.append(current)
        current = _Span()

    while i < n:
        if data[i] == _NEWLINE:
            line += 1

        if state is _State.KEY_BEGIN:
            i = _skip(data, i, n, b" \t\r\n")
            if i >= n:
                break
            c = data[i]
            if c == _HASH:
                state = _State.COMMENT
            elif c == _EQUALS:
                raise ConfigParseError("Not allow start with '='", line)
            else:
                current.key_begin = i
                state = _State.KEY
        elif state is _State.COMMENT:
            i = _until(data, i, n, b"\r\n")
            if i >= n:
                break
            state = _State.KEY_BEGIN
        elif state is _State.KEY:
            i = _until(data, i, n, b" \t=\r\n")
            if i >= n:
                break
            current.key_end = i
            c = data[i]
            if c == _EQUALS:
                state = _State.VAL_BEGIN
            elif c in b" \t":
                state = _State.EQUAL
            else:
                raise ConfigParseError("Not found field value", line)
        elif state is _State.EQUAL:
            i = _skip(data, i, n, b" \t")
            if i >= n:
                break
            if data[i] != _EQUALS:
                raise ConfigParseError("Not found '='", line)
            state = _State.VAL_BEGIN
        elif state is _State.VAL_BEGIN:
            i = _skip(data, i, n, b" \t")
            if i >= n:
                break
            c = data[i]
            if c in b"\r\n":
                push(0)
                state = _State.KEY_BEGIN
            elif c == _HASH:
                push(0)
                state = _State.COMMENT
            else:
                current.val_begin = i
                state = _State.VAL
        elif state is _State.VAL:
            i = _until(data, i, n, b"\r\n#")
            if i >= n:
                break
            c = data[i]
            if c == _HASH:
                push(i)
                state = _State.COMMENT
            elif data[i - 1] == _BACKSLASH:
                state = _State.VAL_CONTINUE
                if c == _CARRIAGE_RETURN and i + 1 < n and data[i + 1] == _NEWLINE:
                    i += 1
            else:
                push(i)
                state = _State.KEY_BEGIN
        else:  # _State.VAL_CONTINUE
            i = _skip(data, i, n, b" \t")
            if i >= n:
                break
            state = _State.VAL
            continue
        i += 1

    if state is _State.VAL_BEGIN:
        spans.append(current)
    elif state in (_State.VAL, _State.VAL_CONTINUE):
        current.val_end = n
        spans.append(current)
    elif state in (_State.KEY, _State.EQUAL):
        raise ConfigParseError("Not found value", line)

    return [
        (data[s.key_begin:s.key_end], data[s.val_begin:s.val_end]) for s in spans
    ]


def _escape(c: int) -> int:
    try:
        return _ESCAPES[c]
    except KeyError:
        raise InvalidEscapeCharError(chr(c)) from None


def _decode(raw: bytes) -> str:
    """Strip trailing whitespace, resolve escapes and line continuations."""
    val = raw.rstrip(b" \t\r\n")
    if b"\\" not in val:
        return val.decode("utf-8")

    out = bytearray()
    i, n = 0, len(val)
    while i < n:
        c = val[i]
        if c == _BACKSLASH:
            i += 1
            if i < n:
                c = val[i]
                if c in b"\r\n":
                    i = _skip(val, i, n, b"\r\n")
                    if i >= n:
                        break
                    i = _skip(val, i, n, b" \t")
                    if i >= n:
                        break
                    i -= 1
                else:
                    out.append(_escape(c))
        else:
            out.append(c)
        i += 1
    return out.decode("utf-8")


def _convert_bool(text: str) -> bool:
    if text == "true":
        return True
    if text == "false":
        return False
    raise ValueError(text)


class Config:
    """A parsed configuration made of ``key = value`` lines."""

    def __init__(self, data: str | bytes = b"") -> None:
        if isinstance(data, str):
            raw = data.encode("utf-8")
            self._entries = _parse(raw)
        else:
            raw = bytes(data)
            self._entries = _parse(raw)
            try:
                raw.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise ConfigError(str(exc)) from exc
        self._data = raw

    @classmethod
    def from_file(cls, path: str | PathLike[str]) -> Config:
        """Read and parse a configuration file."""
        try:
            raw = Path(path).read_bytes()
        except OSError as exc:
            raise ConfigError(str(exc)) from exc
        try:
            raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ConfigError(str(exc)) from exc
        return cls(raw)

    def get(self, key: str, type_: Callable[[str], T] = str) -> T | None:  # type: ignore[assignment]
        """Return the decoded value converted with ``type_``, or None if absent."""
        text = self.get_str(key)
        if text is None:
            return None
        converter: Callable[[str], Any] = _convert_bool if type_ is bool else type_
        try:
            return converter(text)
        except (ValueError, TypeError):
            raise ValueParseError(text) from None

    def get_str(self, key: str) -> str | None:
        """Return the decoded value for ``key``, or None if absent."""
        raw = self.get_raw(key)
        if raw is None:
            return None
        return _decode(raw)

    def get_raw(self, key: str) -> bytes | None:
        """Return the value bytes for ``key`` exactly as written, or None."""
        wanted = key.encode("utf-8")
        return next((v for k, v in self._entries if k == wanted), None)

    def __iter__(self) -> Iterator[tuple[str, str]]:
        """Yield ``(key, raw value)`` pairs in file order."""
        for key, value in self._entries:
            yield key.decode("utf-8"), value.decode("utf-8")