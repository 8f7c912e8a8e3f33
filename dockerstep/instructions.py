"""Parsed Dockerfile instructions handed to the command implementations."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar


@dataclass
class KeyValuePair:
    key: str
    value: str | None = None


@dataclass
class Instruction:
    """Common behaviour: a name and the original source text."""

    NAME: ClassVar[str] = ""
    code: str = field(default="", kw_only=True)

    @property
    def name(self) -> str:
        return self.NAME.lower()

    def __str__(self) -> str:
        return self.code


@dataclass
class _ShellDependant(Instruction):
    cmd_line: list[str] = field(default_factory=list)
    prepend_shell: bool = False


@dataclass
class RunInstruction(_ShellDependant):
    NAME: ClassVar[str] = "RUN"


@dataclass
class CmdInstruction(_ShellDependant):
    NAME: ClassVar[str] = "CMD"


@dataclass
class EntrypointInstruction(_ShellDependant):
    NAME: ClassVar[str] = "ENTRYPOINT"


@dataclass
class ShellInstruction(Instruction):
    NAME: ClassVar[str] = "SHELL"
    shell: list[str] = field(default_factory=list)


@dataclass
class OnbuildInstruction(Instruction):
    NAME: ClassVar[str] = "ONBUILD"
    expression: str = ""


@dataclass
class HealthCheckInstruction(Instruction):
    NAME: ClassVar[str] = "HEALTHCHECK"
    test: list[str] = field(default_factory=list)
    interval: float = 0.0
    timeout: float = 0.0
    start_period: float = 0.0
    retries: int = 0


@dataclass
class StopSignalInstruction(Instruction):
    NAME: ClassVar[str] = "STOPSIGNAL"
    signal: str = ""


@dataclass
class UserInstruction(Instruction):
    NAME: ClassVar[str] = "USER"
    user: str = ""


@dataclass
class ExposeInstruction(Instruction):
    NAME: ClassVar[str] = "EXPOSE"
    ports: list[str] = field(default_factory=list)


@dataclass
class LabelInstruction(Instruction):
    NAME: ClassVar[str] = "LABEL"
    labels: list[KeyValuePair] = field(default_factory=list)


@dataclass
class EnvInstruction(Instruction):
    NAME: ClassVar[str] = "ENV"
    env: list[KeyValuePair] = field(default_factory=list)


@dataclass
class VolumeInstruction(Instruction):
    NAME: ClassVar[str] = "VOLUME"
    volumes: list[str] = field(default_factory=list)


@dataclass
class WorkdirInstruction(Instruction):
    NAME: ClassVar[str] = "WORKDIR"
    path: str = ""


@dataclass
class ArgInstruction(Instruction):
    NAME: ClassVar[str] = "ARG"
    args: list[KeyValuePair] = field(default_factory=list)


@dataclass
class MaintainerInstruction(Instruction):
    NAME: ClassVar[str] = "MAINTAINER"
    maintainer: str = ""