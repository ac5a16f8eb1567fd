# appcfg

A small library for Unix style command line options and simple
`key = value` configuration files. It has no runtime dependencies.

## Installation

```
pip install appcfg
```

## Configuration files

`appcfg.config.Config` parses text made of `key = value` lines. A `#` starts
a comment, and a backslash at the end of a line carries the value on to the
next line. When a value is read, trailing whitespace is removed and the
escapes `\t`, `\r`, `\n`, `\s` (space) and `\\` are resolved.

```python
from appcfg.config import Config

cfg = Config("""
# server settings
listen = 0.0.0.0:8080
greeting = hello\\sworld \\
           again
port = 8080   # trailing comment
""")

cfg.get_str("listen")      # '0.0.0.0:8080'
cfg.get_str("greeting")    # 'hello world again'
cfg.get("port", int)       # 8080
cfg.get_str("missing")     # None
cfg.get_raw("listen")      # b'0.0.0.0:8080'
for key, raw in cfg:       # keys and undecoded values, in file order
    print(key, raw)
```

`Config` accepts `str` or `bytes`; `Config.from_file(path)` reads a file.
`get(key, type_)` converts the decoded value with `type_` (for `bool`, only
`true` and `false` are accepted).

Errors are all subclasses of `ConfigError`:

- `ConfigParseError` for malformed input (with `message` and `line`),
- `InvalidEscapeCharError` for an unknown escape,
- `ValueParseError` when a value cannot be converted.

Unreadable files and bytes that are not UTF-8 raise `ConfigError` itself.

## Command line options

`appcfg.options.Options` describes the options a program accepts:
`optflag`, `optflagmulti`, `optflagopt`, `optopt`, `optmulti`, `reqopt`, or
the general `opt` with a `HasArg` and an `Occur` from `appcfg.matches`.
`parsing_style(ParsingStyle.STOP_AT_FIRST_FREE)` stops option processing at
the first free argument, and `long_only(True)` lets `-name` stand for
`--name`. An argument of `--` ends option processing.

`parse(args)` takes the arguments without the program name and returns an
`appcfg.matches.Matches`, or raises a subclass of `appcfg.matches.Fail`.

```python
from appcfg.options import Options

opts = Options()
opts.optflag("v", "verbose", "print more output")
opts.optopt("o", "output", "write to FILE", "FILE")
opts.optmulti("I", "include", "add an include path", "DIR")

m = opts.parse(["-v", "--output=out.txt", "-I/usr/include", "input.txt"])
m.opt_present("verbose")   # True
m.opt_str("o")             # 'out.txt'
m.opt_strs("I")            # ['/usr/include']
m.free                     # ['input.txt']

print(opts.short_usage("tool"))
print(opts.usage("Usage: tool [options] FILE"))
```

`Matches` also offers `opt_defined`, `opt_count`, `opt_positions`,
`opts_present`, `opts_str`, `opt_strs_pos`, `opt_default`, `opt_get` and
`opt_get_default`. Asking about a name that was never declared raises
`KeyError` (except for `opt_defined` and `opts_present`).

Failures are `ArgumentMissing`, `UnrecognizedOption`, `OptionMissing`,
`OptionDuplicated` and `UnexpectedArgument`; each carries the option `name`.

## Application settings

`appcfg.app` ties the two together. Write a dataclass deriving from
`AppConfig` and give each setting `option(short, long, hint, desc)` as its
field metadata. Fields holding a `bool` become flags; other fields take a
string argument.

```python
from dataclasses import dataclass, field

from appcfg.app import AppConfig, option, parse_args


@dataclass
class Settings(AppConfig):
    log_level: str = field(
        default="info", metadata=option("L", "log-level", "LogLevel", "log level")
    )
    listen: str = field(
        default="0.0.0.0:8080", metadata=option("l", "", "Listen", "http service ip:port")
    )
    debug: bool = field(default=False, metadata=option("", "debug", "", "debug mode"))


settings = Settings()
if not parse_args(settings, "example application 1.0"):
    raise SystemExit(0)
```

`parse_args(app_config, banner, argv=None)` adds `-h/--help` and
`-c/--conf-file`, reads the configuration file, and then lets the command
line override it. `argv` is the full argument list including the program
name and defaults to `sys.argv`. Configuration file keys are the options'
long names; a boolean is set when its value is `true`.

It returns `False` when the program should stop (after `--help`, once the
usage text is printed) and `True` otherwise. It prints the usage and raises
`AppCfgError` when the command line cannot be parsed, and raises
`AppCfgError` when a file named with `-c` cannot be loaded. Without `-c`, a
file named after the program with a `.conf` extension is read if it can be.

`parse_args_ext(app_config, version, check=None, argv=None)` also takes a
check function; if it returns false, the usage text is printed and `False`
is returned.

`format_opt_desc(desc, val)` builds the coloured "default:" suffix shown in
the help for non-empty string defaults, and `print_banner(banner, use_color)`
prints a banner, optionally colouring each line in turn.

## What it does not do

appcfg is a library only: it installs no command of its own, and its help
and messages are in English only.