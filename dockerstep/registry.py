"""Maps parsed instructions to the commands that execute them."""

from __future__ import annotations

import logging

from .base import BaseCommand
from .buildargs import ArgCommand
from .command_line import (
    CmdCommand,
    EntrypointCommand,
    HealthCheckCommand,
    OnBuildCommand,
    ShellCommand,
    StopSignalCommand,
    UserCommand,
)
from .config_updates import (
    EnvCommand,
    ExposeCommand,
    LabelCommand,
    VolumeCommand,
    WorkdirCommand,
)
from .instructions import (
    ArgInstruction,
    CmdInstruction,
    EntrypointInstruction,
    EnvInstruction,
    ExposeInstruction,
    HealthCheckInstruction,
    LabelInstruction,
    MaintainerInstruction,
    OnbuildInstruction,
    RunInstruction,
    ShellInstruction,
    StopSignalInstruction,
    UserInstruction,
    VolumeInstruction,
    WorkdirInstruction,
)
from .run import RunCommand

log = logging.getLogger(__name__)


class UnsupportedCommandError(ValueError):
    """Raised for an instruction that has no command implementation."""


_COMMANDS = {
    ExposeInstruction: ExposeCommand,
    EnvInstruction: EnvCommand,
    WorkdirInstruction: WorkdirCommand,
    CmdInstruction: CmdCommand,
    EntrypointInstruction: EntrypointCommand,
    LabelInstruction: LabelCommand,
    UserInstruction: UserCommand,
    OnbuildInstruction: OnBuildCommand,
    VolumeInstruction: VolumeCommand,
    StopSignalInstruction: StopSignalCommand,
    ArgInstruction: ArgCommand,
    ShellInstruction: ShellCommand,
    HealthCheckInstruction: HealthCheckCommand,
}


def get_command(instruction, cache_run: bool = False) -> BaseCommand | None:
    """Return the command for an instruction; None for deprecated ones that are skipped."""
    if isinstance(instruction, RunInstruction):
        return RunCommand(instruction, should_cache=cache_run)
    if isinstance(instruction, MaintainerInstruction):
        log.warning("%s is deprecated, skipping", instruction.name)
        return None
    command = _COMMANDS.get(type(instruction))
    if command is not None:
        return command(instruction)
    name = getattr(instruction, "name", type(instruction).__name__)
    raise UnsupportedCommandError(f"{name} is not a supported command")