"""The RUN command: executes a command line inside the build filesystem."""

from __future__ import annotations

import logging
import os
import shutil
import signal
import subprocess
from typing import Callable

from .base import BaseCommand, ImageConfig
from .buildargs import BuildArgs, resolve_environment_replacement
from .constants import DEFAULT_HOME_VALUE, HOME, ROOT_USER
from .instructions import RunInstruction

log = logging.getLogger(__name__)

_DEFAULT_SHELL = ("/bin/sh", "-c")

HomeLookup = Callable[[str], str]


def _lookup_home(user: str) -> str:
    """Home directory of a user given by name or uid; a bare unknown uid gets /."""
    import pwd

    try:
        return pwd.getpwnam(user).pw_dir
    except KeyError:
        pass
    if user.isdigit():
        try:
            return pwd.getpwuid(int(user)).pw_dir
        except KeyError:
            return "/"
    raise LookupError(f"unknown user {user}")


def _credentials(user: str) -> tuple[int, int, list[int]]:
    """Resolve a user name or uid to uid, primary gid and supplementary groups."""
    import pwd

    if user.isdigit():
        uid = int(user)
        try:
            entry = pwd.getpwuid(uid)
        except KeyError:
            return uid, uid, []
    else:
        try:
            entry = pwd.getpwnam(user)
        except KeyError:
            raise LookupError(f"unknown user {user}") from None
        uid = entry.pw_uid
    gid = entry.pw_gid
    try:
        groups = os.getgrouplist(entry.pw_name, gid)
    except OSError:
        groups = [gid]
    return uid, gid, groups


def add_default_home(
    user: str, envs: list[str], lookup: HomeLookup | None = None
) -> list[str]:
    """Return envs with HOME added when it is not already set."""
    if any(env.split("=", 1)[0] == HOME for env in envs):
        return envs
    if user in ("", ROOT_USER):
        return envs + [f"{HOME}={DEFAULT_HOME_VALUE}"]
    lookup = lookup or _lookup_home
    try:
        home = lookup(user)
    except LookupError as exc:
        raise LookupError(f"lookup user {user}: {exc}") from exc
    return envs + [f"{HOME}={home}"]


def set_work_dir_if_exists(workdir: str) -> str:
    """The working directory if it exists, otherwise an empty string."""
    return workdir if workdir and os.path.lexists(workdir) else ""


def _env_dict(envs: list[str]) -> dict[str, str]:
    result: dict[str, str] = {}
    for env in envs:
        key, _, value = env.partition("=")
        result[key] = value
    return result


def run_command_in_exec(
    config: ImageConfig, build_args: BuildArgs, instruction: RunInstruction
) -> None:
    """Run the instruction's command line and wait for it; raise if it fails."""
    envs = build_args.replacement_envs(config.env)
    if instruction.prepend_shell:
        shell = list(config.shell) if config.shell else list(_DEFAULT_SHELL)
        command = shell + [" ".join(instruction.cmd_line)]
    else:
        command = list(instruction.cmd_line)
        for env in envs:
            key, _, value = env.partition("=")
            if key != "PATH":
                continue
            found = shutil.which(command[0], path=value)
            if found:
                command[0] = found

    log.info("Cmd: %s", command[0])
    log.info("Args: %s", command[1:])

    user_part = config.user.split(":")[0]
    try:
        user = resolve_environment_replacement(user_part, envs, False)
    except ValueError as exc:
        raise ValueError(f"resolving user {user_part}: {exc}") from exc

    popen_kwargs: dict = {}
    if user:
        try:
            uid, gid, groups = _credentials(user)
        except LookupError as exc:
            raise LookupError(f"credentials: {exc}") from exc
        popen_kwargs.update(user=uid, group=gid, extra_groups=groups)

    try:
        env = add_default_home(user, envs)
    except LookupError as exc:
        raise LookupError(f"adding default HOME variable: {exc}") from exc

    log.info("Running: %s", command)
    try:
        process = subprocess.Popen(
            command,
            cwd=set_work_dir_if_exists(config.working_dir) or None,
            env=_env_dict(env),
            start_new_session=True,
            **popen_kwargs,
        )
    except OSError as exc:
        raise OSError(f"starting command: {exc}") from exc

    try:
        pgid = os.getpgid(process.pid)
    except OSError as exc:
        process.wait()
        raise OSError(f"getting group id for process: {exc}") from exc

    returncode = process.wait()
    if returncode != 0:
        raise subprocess.CalledProcessError(returncode, command)

    try:
        os.killpg(pgid, signal.SIGKILL)
    except ProcessLookupError:
        pass


class RunCommand(BaseCommand):
    """RUN: executes a command and lets the snapshotter find the changes."""

    def __init__(self, instruction: RunInstruction, should_cache: bool = False) -> None:
        self.instruction = instruction
        self._should_cache = should_cache

    def execute(self, config: ImageConfig, build_args: BuildArgs) -> None:
        run_command_in_exec(config, build_args, self.instruction)

    def is_args_envs_required_in_cache(self) -> bool:
        return True

    def files_to_snapshot(self) -> list[str] | None:
        return None

    def provides_files_to_snapshot(self) -> bool:
        return False

    def metadata_only(self) -> bool:
        return False

    def requires_unpacked_fs(self) -> bool:
        return True

    def should_cache_output(self) -> bool:
        return self._should_cache

    def __str__(self) -> str:
        return str(self.instruction)