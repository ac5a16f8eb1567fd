"""Declaration of command-line options and parsing of argument lists."""

from __future__ import annotations

from collections import deque
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass

from appcfg.matches import (
    ArgumentMissing,
    HasArg,
    Matches,
    Occur,
    Opt,
    OptionDuplicated,
    OptionMissing,
    ParsingStyle,
    UnexpectedArgument,
    UnrecognizedOption,
    _Name,
    display_width,
    find_opt,
)

_DESC_INDENT = 24
_DESC_WIDTH = 54
_DESC_SEP = "\n" + " " * _DESC_INDENT


def _validate_names(short_name: str, long_name: str) -> None:
    if len(short_name.encode("utf-8")) not in (0, 1):
        raise ValueError(
            "the short_name (first argument) should be a single character, "
            "or an empty string for none"
        )
    if len(long_name.encode("utf-8")) == 1:
        raise ValueError(
            "the long_name (second argument) should be longer than a single "
            "character, or an empty string for none"
        )


@dataclass(frozen=True)
class _OptGroup:
    """A short and long name sharing one description and set of rules."""

    short_name: str
    long_name: str
    hint: str
    desc: str
    hasarg: HasArg
    occur: Occur

    def to_opt(self) -> Opt:
        if not self.short_name and not self.long_name:
            raise ValueError("this long-format option was given no name")
        if not self.short_name:
            return Opt(_Name.long(self.long_name), self.hasarg, self.occur)
        short = Opt(_Name.short(self.short_name), self.hasarg, self.occur)
        if not self.long_name:
            return short
        return Opt(_Name.long(self.long_name), self.hasarg, self.occur, [short])

    def format(self) -> str:
        """Return the one-option fragment used in a short usage line."""
        line = "" if self.occur is Occur.REQ else "["
        if self.short_name:
            line += "-" + self.short_name
        else:
            line += "--" + self.long_name
        if self.hasarg is HasArg.YES:
            line += " " + self.hint
        elif self.hasarg is HasArg.MAYBE:
            line += " [" + self.hint + "]"
        if self.occur is not Occur.REQ:
            line += "]"
        if self.occur is Occur.MULTI:
            line += ".."
        return line


def _is_arg(arg: str) -> bool:
    return arg.startswith("-") and len(arg) > 1


def _to_text(arg: str | bytes) -> str:
    if isinstance(arg, str):
        return arg
    try:
        return bytes(arg).decode("utf-8")
    except UnicodeDecodeError:
        raise UnrecognizedOption(repr(arg)) from None


def each_split_within(desc: str, lim: int) -> list[str]:
    """Split ``desc`` into rows of at most ``lim`` display columns where possible.

    Rows are only cut at whitespace; a word longer than ``lim`` gets a row
    of its own.  Line breaks in ``desc`` always start a new row.
    """
    rows: list[str] = []
    for line in desc.strip().split("\n"):
        row = ""
        for word in line.rstrip("\r").split():
            sep_width = 1 if row else 0
            if display_width(row) + display_width(word) + sep_width <= lim:
                row = f"{row} {word}" if row else word
                continue
            if row:
                rows.append(row)
            row = word
        if row:
            rows.append(row)
    return rows


class Options:
    """A set of options that a program understands."""

    def __init__(self) -> None:
        self._groups: list[_OptGroup] = []
        self._parsing_style = ParsingStyle.FLOATING_FREES
        self._long_only = False

    def parsing_style(self, style: ParsingStyle) -> Options:
        """Set how free arguments and options may be mixed."""
        self._parsing_style = style
        return self

    def long_only(self, flag: bool) -> Options:
        """Set "long options only" mode, where ``-name`` means ``--name``."""
        self._long_only = flag
        return self

    def opt(
        self,
        short_name: str,
        long_name: str,
        desc: str,
        hint: str,
        hasarg: HasArg,
        occur: Occur,
    ) -> Options:
        """Declare an option, stating every property explicitly."""
        _validate_names(short_name, long_name)
        self._groups.append(_OptGroup(short_name, long_name, hint, desc, hasarg, occur))
        return self

    def optflag(self, short_name: str, long_name: str, desc: str) -> Options:
        """Declare an optional flag that takes no argument."""
        return self.opt(short_name, long_name, desc, "", HasArg.NO, Occur.OPTIONAL)

    def optflagmulti(self, short_name: str, long_name: str, desc: str) -> Options:
        """Declare a flag that takes no argument and may repeat."""
        return self.opt(short_name, long_name, desc, "", HasArg.NO, Occur.MULTI)

    def optflagopt(self, short_name: str, long_name: str, desc: str, hint: str) -> Options:
        """Declare an optional option whose argument is optional."""
        return self.opt(short_name, long_name, desc, hint, HasArg.MAYBE, Occur.OPTIONAL)

    def optmulti(self, short_name: str, long_name: str, desc: str, hint: str) -> Options:
        """Declare an option that takes an argument and may repeat."""
        return self.opt(short_name, long_name, desc, hint, HasArg.YES, Occur.MULTI)

    def optopt(self, short_name: str, long_name: str, desc: str, hint: str) -> Options:
        """Declare an optional option that takes an argument."""
        return self.opt(short_name, long_name, desc, hint, HasArg.YES, Occur.OPTIONAL)

    def reqopt(self, short_name: str, long_name: str, desc: str, hint: str) -> Options:
        """Declare a required option that takes an argument."""
        return self.opt(short_name, long_name, desc, hint, HasArg.YES, Occur.REQ)

    def parse(self, args: Iterable[str | bytes]) -> Matches:
        """Parse ``args`` (without the program name) against the declared options.

        Raises a :class:`~appcfg.matches.Fail` subclass when the arguments
        do not conform.
        """
        opts = [group.to_opt() for group in self._groups]
        vals: list[list[tuple[int, str | None]]] = [[] for _ in opts]
        free: list[str] = []
        pending = deque(_to_text(arg) for arg in args)

        arg_pos = 0
        while pending:
            cur = pending.popleft()
            if not _is_arg(cur):
                free.append(cur)
                if self._parsing_style is ParsingStyle.STOP_AT_FIRST_FREE:
                    free.extend(pending)
                    break
            elif cur == "--":
                free.extend(pending)
                break
            else:
                names, i_arg, was_long = self._split_option(cur, opts)
                for name_pos, nm in enumerate(names, start=1):
                    idx = find_opt(opts, nm)
                    if idx is None:
                        raise UnrecognizedOption(str(nm))
                    hasarg = opts[idx].hasarg
                    is_last = name_pos == len(names)
                    if hasarg is HasArg.NO:
                        if is_last and i_arg is not None:
                            raise UnexpectedArgument(str(nm))
                        vals[idx].append((arg_pos, None))
                    elif hasarg is HasArg.MAYBE:
                        # "--opt value" is deliberately not accepted, as in GNU getopt.
                        if i_arg is not None:
                            vals[idx].append((arg_pos, i_arg))
                            i_arg = None
                        elif was_long or not is_last or not pending or _is_arg(pending[0]):
                            vals[idx].append((arg_pos, None))
                        else:
                            vals[idx].append((arg_pos, pending.popleft()))
                    elif i_arg is not None:
                        vals[idx].append((arg_pos, i_arg))
                        i_arg = None
                    elif pending:
                        vals[idx].append((arg_pos, pending.popleft()))
                    else:
                        raise ArgumentMissing(str(nm))
            arg_pos += 1

        for opt, found in zip(opts, vals):
            if opt.occur is Occur.REQ and not found:
                raise OptionMissing(str(opt.name))
            if opt.occur is not Occur.MULTI and len(found) > 1:
                raise OptionDuplicated(str(opt.name))
        return Matches(opts, vals, free)

    def _split_option(
        self, cur: str, opts: list[Opt]
    ) -> tuple[list[_Name], str | None, bool]:
        """Return the names in one option argument, its inline value and whether it was long."""
        if cur[1] == "-" or self._long_only:
            tail = cur[2:] if cur[1] == "-" else cur[1:]
            name, sep, rest = tail.partition("=")
            return [_Name.parse(name)], (rest if sep else None), True

        names: list[_Name] = []
        for j, ch in enumerate(cur[1:], start=1):
            nm = _Name.short(ch)
            idx = find_opt(opts, nm)
            if idx is None:
                raise UnrecognizedOption(str(nm))
            names.append(nm)
            # A cluster such as -L/usr/lib: the rest is the option's argument.
            if opts[idx].hasarg is not HasArg.NO and j + 1 < len(cur):
                return names, cur[j + 1:], False
        return names, None, False

    def short_usage(self, program_name: str) -> str:
        """Return a one-line usage summary."""
        return f"Usage: {program_name} " + " ".join(g.format() for g in self._groups)

    def usage(self, brief: str) -> str:
        """Return ``brief`` followed by a formatted list of the options."""
        return self.usage_with_format(
            lambda items: f"{brief}\n\nOptions:\n" + "\n".join(items) + "\n"
        )

    def usage_with_format(self, formatter: Callable[[Iterator[str]], str]) -> str:
        """Return what ``formatter`` makes of the formatted option rows."""
        return formatter(self.usage_items())

    def usage_items(self) -> Iterator[str]:
        """Yield one formatted help row for each declared option."""
        any_short = any(group.short_name for group in self._groups)
        for group in self._groups:
            row = "    "
            short_width = display_width(group.short_name)
            long_width = display_width(group.long_name)
            if short_width == 0:
                if any_short:
                    row += "    "
            elif short_width == 1:
                row += "-" + group.short_name
                row += ", " if long_width > 0 else " "
            else:
                raise ValueError("the short name should only be 1 ascii char long")

            if long_width > 0:
                row += ("-" if self._long_only else "--") + group.long_name + " "

            if group.hasarg is HasArg.YES:
                row += group.hint
            elif group.hasarg is HasArg.MAYBE:
                row += "[" + group.hint + "]"

            width = display_width(row)
            row += " " * (_DESC_INDENT - width) if width < _DESC_INDENT else _DESC_SEP
            row += _DESC_SEP.join(each_split_within(group.desc, _DESC_WIDTH))
            yield row