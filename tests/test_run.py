import os
import stat
import subprocess

import pytest

from dockerstep.base import ImageConfig
from dockerstep.buildargs import BuildArgs
from dockerstep.instructions import RunInstruction
from dockerstep.run import (
    RunCommand,
    add_default_home,
    run_command_in_exec,
    set_work_dir_if_exists,
)


def _never(user):
    raise AssertionError("lookup must not be called")


@pytest.mark.parametrize(
    "user, home, initial, expected",
    [
        ("", None, ["HOME=/something", "PATH=/something/else"],
         ["HOME=/something", "PATH=/something/else"]),
        ("", None, ["PATH=/something/else"], ["PATH=/something/else", "HOME=/root"]),
        ("www-add", "/home/some-other", ["PATH=/something/else"],
         ["PATH=/something/else", "HOME=/home/some-other"]),
        ("1000", "/", ["PATH=/something/else"], ["PATH=/something/else", "HOME=/"]),
        ("root", None, ["PATH=/something/else"], ["PATH=/something/else", "HOME=/root"]),
    ],
)
def test_add_default_home(user, home, initial, expected):
    lookup = (lambda name: home) if home is not None else _never
    assert add_default_home(user, initial, lookup) == expected


def test_add_default_home_lookup_failure():
    def failing(name):
        raise KeyError(name)

    with pytest.raises(LookupError, match="lookup user nobody-here"):
        add_default_home("nobody-here", ["PATH=/bin"], failing)


def test_set_work_dir_if_exists(tmp_path):
    assert set_work_dir_if_exists(str(tmp_path)) == str(tmp_path)
    assert set_work_dir_if_exists("doesnot-exists") == ""


def test_run_shell_form_writes_in_working_dir(tmp_path):
    config = ImageConfig(env=["PATH=/usr/bin:/bin"], working_dir=str(tmp_path))
    ins = RunInstruction(cmd_line=["echo", "hello", ">", "out.txt"], prepend_shell=True)
    RunCommand(ins).execute(config, BuildArgs())
    assert (tmp_path / "out.txt").read_text() == "hello\n"


def test_run_sets_default_home(tmp_path):
    config = ImageConfig(env=["PATH=/usr/bin:/bin"], working_dir=str(tmp_path))
    ins = RunInstruction(cmd_line=['echo "$HOME" > home.txt'], prepend_shell=True)
    run_command_in_exec(config, BuildArgs(), ins)
    assert (tmp_path / "home.txt").read_text() == "/root\n"


def test_run_exec_form_resolves_from_path(tmp_path):
    bindir = tmp_path / "bin"
    bindir.mkdir()
    script = bindir / "myscript"
    script.write_text("#!/bin/sh\necho ran > ran.txt\n")
    script.chmod(script.stat().st_mode | stat.S_IEXEC)
    config = ImageConfig(env=[f"PATH={bindir}:/usr/bin:/bin"], working_dir=str(tmp_path))
    ins = RunInstruction(cmd_line=["myscript"], prepend_shell=False)
    RunCommand(ins).execute(config, BuildArgs())
    assert (tmp_path / "ran.txt").read_text() == "ran\n"
    assert ins.cmd_line == ["myscript"]


def test_run_failure_raises(tmp_path):
    config = ImageConfig(env=["PATH=/usr/bin:/bin"], working_dir=str(tmp_path))
    ins = RunInstruction(cmd_line=["exit", "3"], prepend_shell=True)
    with pytest.raises(subprocess.CalledProcessError) as info:
        RunCommand(ins).execute(config, BuildArgs())
    assert info.value.returncode == 3


def test_run_uses_config_shell(tmp_path):
    config = ImageConfig(
        env=["PATH=/usr/bin:/bin"], working_dir=str(tmp_path), shell=["/bin/sh", "-c"]
    )
    ins = RunInstruction(cmd_line=["echo", "$FOO", ">", "foo.txt"], prepend_shell=True)
    config.env.append("FOO=bar")
    RunCommand(ins).execute(config, BuildArgs())
    assert (tmp_path / "foo.txt").read_text() == "bar\n"


def test_run_command_properties():
    ins = RunInstruction(cmd_line=["true"], code="RUN true")
    cmd = RunCommand(ins, should_cache=True)
    assert cmd.files_to_snapshot() is None
    assert cmd.provides_files_to_snapshot() is False
    assert cmd.metadata_only() is False
    assert cmd.requires_unpacked_fs() is True
    assert cmd.should_cache_output() is True
    assert cmd.is_args_envs_required_in_cache() is True
    assert str(cmd) == "RUN true"
    assert RunCommand(ins).should_cache_output() is False