from dataclasses import dataclass, field

import pytest

from appcfg.app import (
    AppCfgError,
    AppConfig,
    format_opt_desc,
    option,
    parse_args,
    parse_args_ext,
    print_banner,
)
from appcfg.config import ConfigError
from appcfg.matches import UnrecognizedOption


@dataclass
class AppConf(AppConfig):
    log_level: str = field(
        default="info", metadata=option("L", "log-level", "LogLevel", "log level")
    )
    log_file: str = field(
        default="", metadata=option("F", "log-file", "LogFile", "log filename")
    )
    listen: str = field(
        default="0.0.0.0:8080", metadata=option("l", "", "Listen", "http service ip:port")
    )
    debug: bool = field(default=False, metadata=option("", "debug", "", "debug mode"))


@pytest.fixture
def prog(tmp_path):
    return str(tmp_path / "app")


def test_format_opt_desc_pins_format():
    assert (
        format_opt_desc("log level", "info")
        == "log level (\x1b[34mdefault: \x1b[32minfo\x1b[0m)"
    )


def test_to_opts_describes_defaults():
    usage = AppConf().to_opts().usage("brief")
    assert format_opt_desc("log level", "info") in usage
    assert "log filename" in usage
    assert format_opt_desc("log filename", "") not in usage
    assert "--debug" in usage


def test_to_opts_parses_declared_options():
    opts = AppConfig.to_opts(AppConf())
    matches = opts.parse(["-L", "debug", "--debug", "-l", "1.2.3.4:80"])
    assert matches.opt_str("log-level") == "debug"
    assert matches.opt_present("debug")
    assert matches.opt_str("l") == "1.2.3.4:80"


def test_parse_args_sets_fields(prog):
    conf = AppConf()
    ok = parse_args(conf, "", [prog, "--log-level", "warn", "--debug", "-l", "host:1"])
    assert ok is True
    assert conf.log_level == "warn"
    assert conf.debug is True
    assert conf.listen == "host:1"
    assert conf.log_file == ""


def test_parse_args_keeps_defaults_without_arguments(prog):
    conf = AppConf()
    assert parse_args(conf, "", [prog]) is True
    assert conf == AppConf()


def test_help_returns_false_and_prints_usage(prog, capsys):
    conf = AppConf()
    assert parse_args(conf, "demo 1.0", [prog, "-h"]) is False
    out = capsys.readouterr().out
    assert "demo 1.0" in out
    assert "Usage:" in out
    assert "this help" in out
    assert "set configuration file" in out


def test_unknown_option_raises(prog, capsys):
    with pytest.raises(AppCfgError) as info:
        parse_args(AppConf(), "", [prog, "--nope"])
    assert info.value.msg == "parse cmdline args error"
    assert info.value.source == UnrecognizedOption("nope")
    assert "Usage:" in capsys.readouterr().out


def test_explicit_config_file_is_loaded(tmp_path, prog):
    conf_path = tmp_path / "custom.conf"
    conf_path.write_text("log-level = trace\nlog-file = /var/log/a.log\ndebug = true\n")
    conf = AppConf()
    assert parse_args(conf, "", [prog, "-c", str(conf_path)]) is True
    assert conf.log_level == "trace"
    assert conf.log_file == "/var/log/a.log"
    assert conf.debug is True


def test_command_line_overrides_config_file(tmp_path, prog):
    conf_path = tmp_path / "custom.conf"
    conf_path.write_text("log-level = trace\n")
    conf = AppConf()
    parse_args(conf, "", [prog, "--conf-file", str(conf_path), "-L", "error"])
    assert conf.log_level == "error"


def test_default_config_file_next_to_program(tmp_path, prog):
    (tmp_path / "app.conf").write_text("log-file = out.log\ndebug = false\n")
    conf = AppConf()
    assert parse_args(conf, "", [prog]) is True
    assert conf.log_file == "out.log"
    assert conf.debug is False


def test_missing_explicit_config_file_raises(tmp_path, prog):
    missing = str(tmp_path / "missing.conf")
    with pytest.raises(AppCfgError) as info:
        parse_args(AppConf(), "", [prog, "-c", missing])
    assert info.value.msg == f"can't load app config file {missing}"
    assert isinstance(info.value.source, ConfigError)


def test_malformed_explicit_config_file_raises(tmp_path, prog):
    bad = tmp_path / "bad.conf"
    bad.write_text("= value\n")
    with pytest.raises(AppCfgError):
        parse_args(AppConf(), "", [prog, "-c", str(bad)])


def test_check_failure_returns_false(prog, capsys):
    conf = AppConf()
    result = parse_args_ext(conf, "", lambda c: c.log_file != "", [prog])
    assert result is False
    assert "Usage:" in capsys.readouterr().out


def test_check_success_returns_true(prog):
    conf = AppConf()
    result = parse_args_ext(conf, "", lambda c: c.log_file != "", [prog, "-F", "x.log"])
    assert result is True
    assert conf.log_file == "x.log"


def test_app_cfg_error_message():
    err = AppCfgError("loading failed", ValueError("boom"))
    assert str(err) == "loading failed: boom"


def test_print_banner_plain(capsys):
    print_banner("hello\nworld", False)
    assert capsys.readouterr().out == "hello\nworld\n"


def test_print_banner_empty(capsys):
    print_banner("", True)
    assert capsys.readouterr().out == ""


def test_print_banner_colour(capsys):
    print_banner("one\ntwo", True)
    out = capsys.readouterr().out
    assert out.endswith("\x1b[0m\n")
    lines = out.split("\n")
    assert lines[0].startswith("\x1b[3") and lines[0].endswith("mone")
    assert lines[1].startswith("\x1b[3") and lines[1].endswith("mtwo")
    first = int(lines[0][3])
    second = int(lines[1][3])
    assert 1 <= first <= 7
    assert second == (first + 1 if first < 7 else 1)