"""Commands that set the image's command line, shell, triggers, health check, stop signal and user."""

from __future__ import annotations

import logging
import re
import signal as _signal

from .base import BaseCommand, HealthConfig, ImageConfig
from .buildargs import (
    BuildArgs,
    resolve_environment_replacement,
    resolve_environment_replacement_list,
)
from .instructions import (
    CmdInstruction,
    EntrypointInstruction,
    HealthCheckInstruction,
    OnbuildInstruction,
    ShellInstruction,
    StopSignalInstruction,
    UserInstruction,
)

log = logging.getLogger(__name__)

_DEFAULT_SHELL = ("/bin/sh", "-c")
_NUMBER = re.compile(r"[+-]?\d+")


def _signal_map() -> dict[str, int]:
    names: dict[str, int] = {}
    for sig in _signal.Signals:
        name = sig.name
        if name.startswith("SIG") and not name.startswith("SIG_"):
            names[name[3:]] = int(sig)
    return names


_SIGNALS = _signal_map()


def parse_signal(value: str) -> int:
    """Return the number of a signal given by number or by name, with or without SIG."""
    if _NUMBER.fullmatch(value):
        number = int(value)
        if number == 0:
            raise ValueError(f"Invalid signal: {value}")
        return number
    name = value.upper()
    if name.startswith("SIG"):
        name = name[3:]
    try:
        return _SIGNALS[name]
    except KeyError:
        raise ValueError(f"Invalid signal: {value}") from None


def _command_line(config: ImageConfig, cmd_line: list[str], prepend_shell: bool) -> list[str]:
    if not prepend_shell:
        return list(cmd_line)
    shell = list(config.shell) if config.shell else list(_DEFAULT_SHELL)
    return shell + [" ".join(cmd_line)]


class CmdCommand(BaseCommand):
    """CMD: sets the default command of the image."""

    def __init__(self, instruction: CmdInstruction) -> None:
        self.instruction = instruction

    def execute(self, config: ImageConfig, build_args: BuildArgs | None) -> None:
        config.cmd = _command_line(
            config, self.instruction.cmd_line, self.instruction.prepend_shell
        )
        config.args_escaped = False

    def __str__(self) -> str:
        return str(self.instruction)


class EntrypointCommand(BaseCommand):
    """ENTRYPOINT: sets the entrypoint of the image."""

    def __init__(self, instruction: EntrypointInstruction) -> None:
        self.instruction = instruction

    def execute(self, config: ImageConfig, build_args: BuildArgs | None) -> None:
        config.entrypoint = _command_line(
            config, self.instruction.cmd_line, self.instruction.prepend_shell
        )

    def __str__(self) -> str:
        return str(self.instruction)


class ShellCommand(BaseCommand):
    """SHELL: sets the shell used for shell-form commands."""

    def __init__(self, instruction: ShellInstruction) -> None:
        self.instruction = instruction

    def execute(self, config: ImageConfig, build_args: BuildArgs | None) -> None:
        config.shell = list(self.instruction.shell)

    def __str__(self) -> str:
        return str(self.instruction)


class OnBuildCommand(BaseCommand):
    """ONBUILD: appends a trigger expression to the config."""

    def __init__(self, instruction: OnbuildInstruction) -> None:
        self.instruction = instruction

    def execute(self, config: ImageConfig, build_args: BuildArgs | None) -> None:
        log.info("Cmd: ONBUILD")
        log.info("Args: %s", self.instruction.expression)
        if config.on_build is None:
            config.on_build = [self.instruction.expression]
        else:
            config.on_build.append(self.instruction.expression)

    def __str__(self) -> str:
        return str(self.instruction)


class HealthCheckCommand(BaseCommand):
    """HEALTHCHECK: sets the container health check."""

    def __init__(self, instruction: HealthCheckInstruction) -> None:
        self.instruction = instruction

    def execute(self, config: ImageConfig, build_args: BuildArgs | None) -> None:
        ins = self.instruction
        config.healthcheck = HealthConfig(
            test=list(ins.test),
            interval=ins.interval,
            timeout=ins.timeout,
            start_period=ins.start_period,
            retries=ins.retries,
        )

    def __str__(self) -> str:
        return str(self.instruction)


class StopSignalCommand(BaseCommand):
    """STOPSIGNAL: sets the signal used to stop the container."""

    def __init__(self, instruction: StopSignalInstruction) -> None:
        self.instruction = instruction

    def execute(self, config: ImageConfig, build_args: BuildArgs) -> None:
        log.info("Cmd: STOPSIGNAL")
        envs = build_args.replacement_envs(config.env)
        stop_signal = resolve_environment_replacement_list(
            [self.instruction.signal], envs, False
        )[0]
        parse_signal(stop_signal)
        log.info("Replacing StopSignal in config with %s", stop_signal)
        config.stop_signal = stop_signal

    def __str__(self) -> str:
        return str(self.instruction)


class UserCommand(BaseCommand):
    """USER: sets the user (and optionally group) commands run as."""

    def __init__(self, instruction: UserInstruction) -> None:
        self.instruction = instruction

    def execute(self, config: ImageConfig, build_args: BuildArgs) -> None:
        log.info("Cmd: USER")
        parts = self.instruction.user.split(":")
        envs = build_args.replacement_envs(config.env)
        try:
            user = resolve_environment_replacement(parts[0], envs, False)
        except ValueError as exc:
            raise ValueError(f"resolving user {parts[0]}: {exc}") from exc
        if len(parts) > 1:
            try:
                group = resolve_environment_replacement(parts[1], envs, False)
            except ValueError as exc:
                raise ValueError(f"resolving group {parts[1]}: {exc}") from exc
            user = f"{user}:{group}"
        config.user = user

    def __str__(self) -> str:
        return str(self.instruction)