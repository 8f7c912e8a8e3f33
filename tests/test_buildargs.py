import pytest

from dockerstep.base import ImageConfig
from dockerstep.buildargs import (
    ArgCommand,
    BuildArgs,
    parse_arg,
    resolve_environment_replacement,
    resolve_environment_replacement_list,
    update_config_env,
)
from dockerstep.instructions import ArgInstruction, KeyValuePair


def _build_args():
    ba = BuildArgs(["buildArg1=foo", "buildArg2=foo2"])
    ba.add_arg("buildArg1", None)
    ba.add_arg("buildArg2", "default")
    return ba


def test_options_override_defaults():
    ba = _build_args()
    assert ba.all_allowed() == {"buildArg1": "foo", "buildArg2": "foo2"}
    assert ba.all_meta() == {}


def test_undeclared_options_not_allowed():
    ba = BuildArgs(["x=1"])
    assert "x" not in ba.all_allowed()
    ba.add_arg("x", None)
    assert ba.all_allowed()["x"] == "1"


def test_replacement_envs_keeps_env_first_and_skips_duplicates():
    ba = _build_args()
    envs = ba.replacement_envs(["buildArg1=env"])
    assert envs[0] == "buildArg1=env"
    assert envs[1:] == ["buildArg2=foo2"]


def test_resolve_variables():
    envs = ["a=x", "b=y"]
    assert resolve_environment_replacement("$a/${b}", envs, False) == "x/y"
    assert resolve_environment_replacement("$missing", envs, False) == ""
    assert resolve_environment_replacement("${missing:-def}", envs, False) == "def"
    assert resolve_environment_replacement("'$a'", envs, False) == "$a"


def test_resolve_escapes():
    assert resolve_environment_replacement("lots\\ of\\ words", [], False) == "lots of words"
    assert resolve_environment_replacement("lots\\\\ of\\\\ words", [], False) == "lots\\ of\\ words"


def test_resolve_filepath_cleans_and_keeps_trailing_slash():
    assert resolve_environment_replacement("/a//b/../$d/", ["d=c"], True) == "/a/c/"


def test_unterminated_quote_raises():
    with pytest.raises(ValueError):
        resolve_environment_replacement('"abc', [], False)


def test_resolve_list():
    assert resolve_environment_replacement_list(["$a", "b"], ["a=1"], False) == ["1", "b"]


def test_update_config_env_preserves_order():
    cfg = ImageConfig(env=["path=/usr/", "home=/root"])
    pairs = [KeyValuePair("path", "/some/path"), KeyValuePair("HOME", "$home")]
    update_config_env(pairs, cfg, cfg.env)
    assert cfg.env == ["path=/some/path", "home=/root", "HOME=/root"]


def test_parse_arg_uses_allowed_value_when_unset():
    ba = _build_args()
    assert parse_arg("buildArg2", None, [], ba) == ("buildArg2", "foo2")
    assert parse_arg("other", None, [], ba) == ("other", None)


def test_arg_command_registers_args():
    ba = BuildArgs(["version=1.20"])
    cmd = ArgCommand(ArgInstruction(args=[KeyValuePair("version", "latest")], code="ARG version=latest"))
    cmd.execute(ImageConfig(), ba)
    assert ba.all_allowed()["version"] == "1.20"
    assert str(cmd) == "ARG version=latest"