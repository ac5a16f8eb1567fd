"""Option descriptions, parse failures and the result of a command-line parse."""

from __future__ import annotations

import enum
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any, NamedTuple, TypeVar

T = TypeVar("T")

_ESC = 0x1B
_ZERO = ord("0")


def display_width(text: str) -> int:
    """Return the terminal width of ``text``.

    ASCII characters count 1 and wider characters count 2; ANSI colour
    sequences such as ``ESC[0m`` or ``ESC[34m`` take no space.
    """
    data = text.encode("utf-8")
    total, i, n = 0, 0, len(data)
    while i < n:
        ch = data[i]
        if ch <= 127:
            if ch == _ESC and i + 3 < n:
                i += 4 if data[i + 2] == _ZERO else 5
            else:
                total += 1
                i += 1
        else:
            total += 2
            i += 3
    return total


class HasArg(enum.Enum):
    """Whether an option takes an argument."""

    YES = "yes"
    NO = "no"
    MAYBE = "maybe"


class Occur(enum.Enum):
    """How often an option may occur."""

    REQ = "req"
    OPTIONAL = "optional"
    MULTI = "multi"


class ParsingStyle(enum.Enum):
    """How free arguments interact with options during parsing."""

    FLOATING_FREES = "floating_frees"
    STOP_AT_FIRST_FREE = "stop_at_first_free"


class Fail(Exception):
    """The command line does not conform to the declared options."""

    description = "parse failure"
    _template = "{}"

    def __init__(self, name: str) -> None:
        super().__init__(self._template.format(name))
        self.name = name

    def __eq__(self, other: object) -> bool:
        return type(self) is type(other) and self.name == other.name  # type: ignore[attr-defined]

    def __hash__(self) -> int:
        return hash((type(self), self.name))


class ArgumentMissing(Fail):
    """The option requires an argument but none was passed."""

    description = "missing argument"
    _template = "Argument to option '{}' missing"


class UnrecognizedOption(Fail):
    """The passed option is not declared among the possible options."""

    description = "unrecognized option"
    _template = "Unrecognized option: '{}'"


class OptionMissing(Fail):
    """A required option is not present."""

    description = "missing option"
    _template = "Required option '{}' missing"


class OptionDuplicated(Fail):
    """A single-occurrence option was given more than once."""

    description = "duplicated option"
    _template = "Option '{}' given more than once"


class UnexpectedArgument(Fail):
    """An argument was passed to an option that takes none."""

    description = "unexpected argument"
    _template = "Option '{}' does not take an argument"


class _Name(NamedTuple):
    """An option name: a long name or a single short character."""

    text: str
    is_long: bool

    @classmethod
    def parse(cls, nm: str) -> _Name:
        return cls(nm, len(nm.encode("utf-8")) != 1)

    @classmethod
    def short(cls, ch: str) -> _Name:
        return cls(ch, False)

    @classmethod
    def long(cls, text: str) -> _Name:
        return cls(text, True)

    def __str__(self) -> str:
        return self.text


@dataclass
class Opt:
    """A single option name with its argument and occurrence rules."""

    name: _Name
    hasarg: HasArg
    occur: Occur
    aliases: list[Opt] = field(default_factory=list)

    def __post_init__(self) -> None:
        if isinstance(self.name, str) and not isinstance(self.name, _Name):
            self.name = _Name.parse(self.name)


def find_opt(opts: list[Opt], name: _Name | str) -> int | None:
    """Return the index of the option called ``name``, searching aliases too."""
    if not isinstance(name, _Name):
        name = _Name.parse(name)
    for idx, opt in enumerate(opts):
        if opt.name == name:
            return idx
    for candidate in opts:
        if any(alias.name == name for alias in candidate.aliases):
            return next(i for i, opt in enumerate(opts) if opt.name == candidate.name)
    return None


# A recorded occurrence: (argument position, value or None when only given).
Occurrence = tuple[int, "str | None"]


@dataclass
class Matches:
    """Options matched on a command line, with their values, and free arguments."""

    opts: list[Opt]
    vals: list[list[tuple[int, str | None]]]
    free: list[str] = field(default_factory=list)

    def _opt_vals(self, nm: str) -> list[tuple[int, str | None]]:
        idx = find_opt(self.opts, nm)
        if idx is None:
            raise KeyError(f"No option '{nm}' defined")
        return list(self.vals[idx])

    def _opt_val(self, nm: str) -> tuple[bool, str | None]:
        """Return (present, value) for the first occurrence of ``nm``."""
        occurrences = self._opt_vals(nm)
        if not occurrences:
            return False, None
        return True, occurrences[0][1]

    def opt_defined(self, nm: str) -> bool:
        """Return True if an option called ``nm`` was declared."""
        return find_opt(self.opts, nm) is not None

    def opt_present(self, nm: str) -> bool:
        """Return True if the option was matched."""
        return bool(self._opt_vals(nm))

    def opt_count(self, nm: str) -> int:
        """Return how many times the option was matched."""
        return len(self._opt_vals(nm))

    def opt_positions(self, nm: str) -> list[int]:
        """Return the argument positions at which the option was matched."""
        return [pos for pos, _ in self._opt_vals(nm)]

    def opts_present(self, names: Iterable[str]) -> bool:
        """Return True if any of ``names`` was matched; undeclared names are ignored."""
        for nm in names:
            idx = find_opt(self.opts, nm)
            if idx is not None and self.vals[idx]:
                return True
        return False

    def opts_str(self, names: Iterable[str]) -> str | None:
        """Return the argument of the first of ``names`` that was given one."""
        for nm in names:
            _, value = self._opt_val(nm)
            if value is not None:
                return value
        return None

    def opt_strs(self, nm: str) -> list[str]:
        """Return every argument given to the option."""
        return [value for _, value in self._opt_vals(nm) if value is not None]

    def opt_strs_pos(self, nm: str) -> list[tuple[int, str]]:
        """Return every argument given to the option with its position."""
        return [(pos, value) for pos, value in self._opt_vals(nm) if value is not None]

    def opt_str(self, nm: str) -> str | None:
        """Return the argument of the first match of the option, or None."""
        return self._opt_val(nm)[1]

    def opt_default(self, nm: str, default: str) -> str | None:
        """Return the argument, ``default`` if given without one, or None if absent."""
        present, value = self._opt_val(nm)
        if not present:
            return None
        return default if value is None else value

    def opt_get(self, nm: str, type_: Callable[[str], T]) -> T | None:
        """Return the argument converted with ``type_``, or None if there is none."""
        _, value = self._opt_val(nm)
        if value is None:
            return None
        return type_(value)

    def opt_get_default(
        self, nm: str, default: T, type_: Callable[[str], T] | None = None
    ) -> T:
        """Return the argument converted with ``type_``, or ``default`` if there is none.

        ``type_`` defaults to the type of ``default``.
        """
        _, value = self._opt_val(nm)
        if value is None:
            return default
        converter: Callable[[str], Any] = type_ if type_ is not None else type(default)
        return converter(value)

    def __iter__(self) -> Iterator[str]:
        """Iterate over the free arguments."""
        return iter(self.free)