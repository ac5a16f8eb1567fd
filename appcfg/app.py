"""Fill an application configuration from the command line and a config file."""

from __future__ import annotations

import dataclasses
import sys
import time
from collections.abc import Callable, Iterator, Mapping, Sequence
from pathlib import Path
from typing import Any, TypeVar

from appcfg.config import Config, ConfigError
from appcfg.matches import Fail, Matches
from appcfg.options import Options

C_HELP = "help"
C_CONF_FILE = "conf-file"

_METADATA_KEY = "appcfg"

A = TypeVar("A", bound="AppConfig")


class AppCfgError(Exception):
    """Parsing the application configuration failed."""

    def __init__(self, msg: str, source: BaseException) -> None:
        super().__init__(f"{msg}: {source}")
        self.msg = msg
        self.source = source


@dataclasses.dataclass(frozen=True)
class _OptionSpec:
    short: str
    long: str
    hint: str
    desc: str

    @property
    def lookup_name(self) -> str:
        """Name under which the option is found in parsed matches."""
        return self.long or self.short


def option(short: str, long: str, hint: str, desc: str) -> Mapping[str, Any]:
    """Return field metadata declaring a command-line option.

    Use it as ``field(default=..., metadata=option("L", "log-level", "LogLevel", "..."))``
    on a dataclass deriving from :class:`AppConfig`.
    """
    return {_METADATA_KEY: _OptionSpec(short, long, hint, desc)}


class AppConfig:
    """Base for dataclasses whose fields are declared with :func:`option`.

    Fields holding a ``bool`` become flags; every other field takes a string argument.
    """

    def _option_fields(self) -> Iterator[tuple[str, _OptionSpec]]:
        for fld in dataclasses.fields(self):  # type: ignore[arg-type]
            spec = fld.metadata.get(_METADATA_KEY)
            if spec is not None:
                yield fld.name, spec

    def to_opts(self) -> Options:
        """Return the options that describe this configuration."""
        opts = Options()
        for name, spec in self._option_fields():
            value = getattr(self, name)
            if isinstance(value, bool):
                opts.optflag(spec.short, spec.long, spec.desc)
            else:
                text = str(value)
                desc = format_opt_desc(spec.desc, text) if text else spec.desc
                opts.optopt(spec.short, spec.long, desc, spec.hint)
        return opts

    def set_from_getopts(self, matches: Matches) -> None:
        """Overwrite fields with the values given on the command line."""
        for name, spec in self._option_fields():
            if spec.long in (C_HELP, C_CONF_FILE):
                continue
            if isinstance(getattr(self, name), bool):
                if matches.opt_present(spec.lookup_name):
                    setattr(self, name, True)
            else:
                value = matches.opt_str(spec.lookup_name)
                if value is not None:
                    setattr(self, name, value)

    def set_from_cfg(self, cfg: Config) -> None:
        """Overwrite fields with the values found in a configuration file."""
        for name, spec in self._option_fields():
            if spec.long == C_CONF_FILE:
                continue
            try:
                value = cfg.get_str(spec.long)
            except ConfigError:
                continue
            if value is None:
                continue
            if isinstance(getattr(self, name), bool):
                setattr(self, name, value == "true")
            else:
                setattr(self, name, value)


def _lines(text: str) -> list[str]:
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def print_banner(banner: str, use_color: bool) -> None:
    """Print ``banner``, colouring each line in turn when ``use_color`` is set."""
    if not banner:
        return
    if not use_color:
        print(banner)
        return

    colour = time.time_ns() // 1_000_000 % 7 + 1
    parts = []
    for line in _lines(banner):
        parts.append(f"\x1b[3{colour}m{line}\n")
        colour = colour + 1 if colour < 7 else 1
    parts.append("\x1b[0m\n")
    print("".join(parts), end="")


def format_opt_desc(desc: str, val: Any) -> str:
    """Return an option description followed by its highlighted default value."""
    return f"{desc} (\x1b[34mdefault: \x1b[32m{val}\x1b[0m)"


def _print_usage(prog: str, version: str, opts: Options) -> None:
    if version:
        print(f"\n{version}")
    name = Path(prog).name
    brief = f"\nUsage: \x1b[36m{name} \x1b[33m[options]\x1b[0m"
    print(opts.usage(brief))


def _load_config_file(app_config: AppConfig, matches: Matches, prog: str) -> None:
    conf_file = matches.opt_str(C_CONF_FILE)
    explicit = conf_file is not None
    if conf_file is None:
        path = Path(prog)
        if not path.name:
            return
        conf_file = str(path.with_suffix(".conf"))

    try:
        cfg = Config.from_file(conf_file)
    except ConfigError as exc:
        if explicit:
            raise AppCfgError(f"can't load app config file {conf_file}", exc) from exc
        return
    app_config.set_from_cfg(cfg)


def parse_args(
    app_config: AppConfig, banner: str, argv: Sequence[str] | None = None
) -> bool:
    """Fill ``app_config`` from the command line and configuration file.

    Returns False when the program should stop (help was requested).
    """
    return parse_args_ext(app_config, banner, None, argv)


def parse_args_ext(
    app_config: A,
    version: str,
    check: Callable[[A], bool] | None = None,
    argv: Sequence[str] | None = None,
) -> bool:
    """Fill ``app_config`` from the command line and configuration file.

    ``argv`` is the full argument list including the program name and
    defaults to ``sys.argv``.  Values from the configuration file are applied
    first and command-line values override them.  ``check`` validates the
    result; when it returns False the usage is printed and False is returned.
    Returns False when the program should stop, True otherwise.
    """
    if argv is None:
        argv = sys.argv
    prog, *args = argv

    opts = app_config.to_opts()
    opts.optflag("h", C_HELP, "this help")
    opts.optopt("c", C_CONF_FILE, "set configuration file", "ConfigFile")

    try:
        matches = opts.parse(args)
    except Fail as exc:
        _print_usage(prog, version, opts)
        raise AppCfgError("parse cmdline args error", exc) from exc

    if matches.opt_present(C_HELP):
        _print_usage(prog, version, opts)
        return False

    _load_config_file(app_config, matches, prog)
    app_config.set_from_getopts(matches)

    if check is not None and not check(app_config):
        _print_usage(prog, version, opts)
        return False

    return True