import pytest

from appcfg.matches import (
    ArgumentMissing,
    Fail,
    HasArg,
    Matches,
    Occur,
    Opt,
    OptionDuplicated,
    OptionMissing,
    UnexpectedArgument,
    UnrecognizedOption,
    display_width,
    find_opt,
)


def _opts():
    return [
        Opt("verbose", HasArg.NO, Occur.MULTI, [Opt("v", HasArg.NO, Occur.MULTI)]),
        Opt("output", HasArg.YES, Occur.OPTIONAL, [Opt("o", HasArg.YES, Occur.OPTIONAL)]),
        Opt("n", HasArg.MAYBE, Occur.OPTIONAL),
        Opt("include", HasArg.YES, Occur.MULTI),
        Opt("quiet", HasArg.NO, Occur.OPTIONAL),
    ]


@pytest.fixture
def matches():
    return Matches(
        opts=_opts(),
        vals=[
            [(0, None), (2, None)],
            [(1, "out.txt")],
            [(3, None)],
            [(4, "a"), (5, "b")],
            [],
        ],
        free=["x", "y"],
    )


def test_display_width_ascii_and_wide():
    assert display_width("abc") == 3
    assert display_width("中文") == 4


def test_display_width_ignores_colour_codes():
    assert display_width("\x1b[0m") == 0
    assert display_width("\x1b[34mab\x1b[0m") == display_width("ab")


def test_find_opt_main_and_alias():
    opts = _opts()
    assert find_opt(opts, "verbose") == 0
    assert find_opt(opts, "v") == 0
    assert find_opt(opts, "o") == 1
    assert find_opt(opts, "n") == 2
    assert find_opt(opts, "missing") is None


def test_opt_defined(matches):
    assert matches.opt_defined("output")
    assert matches.opt_defined("o")
    assert not matches.opt_defined("z")


def test_opt_present_and_count(matches):
    assert matches.opt_present("v")
    assert matches.opt_count("verbose") == 2
    assert matches.opt_count("v") == 2
    assert not matches.opt_present("quiet")
    assert matches.opt_count("quiet") == 0


def test_opt_positions(matches):
    assert matches.opt_positions("verbose") == [0, 2]
    assert matches.opt_positions("include") == [4, 5]


def test_opt_str(matches):
    assert matches.opt_str("o") == "out.txt"
    assert matches.opt_str("output") == "out.txt"
    assert matches.opt_str("verbose") is None
    assert matches.opt_str("quiet") is None


def test_opt_strs_and_positions(matches):
    assert matches.opt_strs("include") == ["a", "b"]
    assert matches.opt_strs("verbose") == []
    assert matches.opt_strs_pos("include") == [(4, "a"), (5, "b")]


def test_opts_present(matches):
    assert matches.opts_present(["quiet", "undeclared", "o"])
    assert not matches.opts_present(["quiet", "undeclared"])


def test_opts_str(matches):
    assert matches.opts_str(["verbose", "output"]) == "out.txt"
    assert matches.opts_str(["verbose", "quiet"]) is None


def test_opt_default(matches):
    assert matches.opt_default("n", "def") == "def"
    assert matches.opt_default("output", "def") == "out.txt"
    assert matches.opt_default("quiet", "def") is None


def test_opt_get(matches):
    num = Matches(
        opts=[Opt("count", HasArg.YES, Occur.OPTIONAL)], vals=[[(0, "42")]], free=[]
    )
    assert num.opt_get("count", int) == 42
    assert matches.opt_get("n", int) is None
    assert matches.opt_get("quiet", int) is None


def test_opt_get_bad_value_raises():
    num = Matches(
        opts=[Opt("count", HasArg.YES, Occur.OPTIONAL)], vals=[[(0, "abc")]], free=[]
    )
    with pytest.raises(ValueError):
        num.opt_get("count", int)


def test_opt_get_default(matches):
    num = Matches(
        opts=[Opt("count", HasArg.YES, Occur.OPTIONAL)], vals=[[(0, "7")]], free=[]
    )
    assert num.opt_get_default("count", 1) == 7
    assert num.opt_get_default("count", 1, int) == 7
    assert matches.opt_get_default("n", 5) == 5
    assert matches.opt_get_default("quiet", 5, int) == 5


def test_undefined_option_raises(matches):
    with pytest.raises(KeyError):
        matches.opt_present("undeclared")
    with pytest.raises(KeyError):
        matches.opt_str("zz")


def test_free_arguments(matches):
    assert matches.free == ["x", "y"]
    assert list(matches) == ["x", "y"]


@pytest.mark.parametrize(
    "cls, message",
    [
        (ArgumentMissing, "Argument to option 'o' missing"),
        (UnrecognizedOption, "Unrecognized option: 'o'"),
        (OptionMissing, "Required option 'o' missing"),
        (OptionDuplicated, "Option 'o' given more than once"),
        (UnexpectedArgument, "Option 'o' does not take an argument"),
    ],
)
def test_fail_messages(cls, message):
    err = cls("o")
    assert str(err) == message
    assert err.name == "o"
    assert isinstance(err, Fail)


def test_fail_descriptions_and_equality():
    assert ArgumentMissing("a").description == "missing argument"
    assert OptionDuplicated("a").description == "duplicated option"
    assert ArgumentMissing("a") == ArgumentMissing("a")
    assert not (ArgumentMissing("a") == OptionMissing("a"))


def test_unrecognized_option_carries_name_and_description():
    err = UnrecognizedOption("zz")
    assert err.name == "zz"
    assert err.description == "unrecognized option"
    assert str(err) == "Unrecognized option: 'zz'"
    with pytest.raises(Fail) as info:
        raise err
    assert info.value.name == "zz"