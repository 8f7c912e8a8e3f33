"""Commands that update ports, labels, environment, volumes and the working directory."""

from __future__ import annotations

import logging
import os
import posixpath
from typing import Callable, Iterable

from .base import BaseCommand, ImageConfig
from .buildargs import (
    BuildArgs,
    resolve_environment_replacement,
    resolve_environment_replacement_list,
    update_config_env,
)
from .instructions import (
    EnvInstruction,
    ExposeInstruction,
    KeyValuePair,
    LabelInstruction,
    VolumeInstruction,
    WorkdirInstruction,
)

log = logging.getLogger(__name__)

_VALID_PROTOCOLS = ("tcp", "udp")

_volume_paths: list[str] = []

MkdirFunc = Callable[[str, int, int, int], None]


def valid_protocol(protocol: str) -> bool:
    """True for the protocols a port may be exposed with."""
    return protocol in _VALID_PROTOCOLS


def volume_ignore_list() -> list[str]:
    """Volume paths declared so far, which snapshots must ignore."""
    return list(_volume_paths)


def _add_volume_path_to_ignore_list(path: str) -> None:
    if path not in _volume_paths:
        _volume_paths.append(path)


def update_labels(
    labels: Iterable[KeyValuePair], config: ImageConfig, build_args: BuildArgs
) -> None:
    """Expand the label pairs and merge them into config.labels."""
    existing = dict(config.labels) if config.labels is not None else {}
    envs = build_args.replacement_envs(config.env)
    resolved = [
        (
            resolve_environment_replacement(kvp.key, envs, False),
            resolve_environment_replacement(kvp.value or "", envs, False),
        )
        for kvp in labels
    ]
    for key, value in resolved:
        log.info("Applying label %s=%s", key, value)
        existing[key] = value
    config.labels = existing


def _lookup_id(name: str, numeric: Callable[[int], object], by_name: Callable[[str], object]):
    if name.isdigit():
        return int(name), None
    return None, by_name(name)


def _user_group(user: str, envs: list[str]) -> tuple[int, int]:
    """Resolve a USER string (user[:group]) to a numeric uid and gid."""
    import grp
    import pwd

    user_part, sep, group_part = user.partition(":")
    user_part = resolve_environment_replacement(user_part, envs, False)
    group_part = resolve_environment_replacement(group_part, envs, False) if sep else ""

    entry = None
    if user_part.isdigit():
        uid = int(user_part)
        try:
            entry = pwd.getpwuid(uid)
        except KeyError:
            entry = None
    else:
        try:
            entry = pwd.getpwnam(user_part)
        except KeyError:
            raise LookupError(f"user {user_part!r} not found") from None
        uid = entry.pw_uid

    if group_part:
        if group_part.isdigit():
            gid = int(group_part)
        else:
            try:
                gid = grp.getgrnam(group_part).gr_gid
            except KeyError:
                raise LookupError(f"group {group_part!r} not found") from None
    elif entry is not None:
        gid = entry.pw_gid
    else:
        gid = uid
    return uid, gid


def _mkdir_all_with_permissions(path: str, mode: int, uid: int, gid: int) -> None:
    os.makedirs(path, mode, exist_ok=True)
    if uid != -1 or gid != -1:
        os.chown(path, uid, gid)
    os.chmod(path, mode)


class ExposeCommand(BaseCommand):
    """EXPOSE: adds ports to the image's exposed ports."""

    def __init__(self, instruction: ExposeInstruction) -> None:
        self.instruction = instruction

    def execute(self, config: ImageConfig, build_args: BuildArgs) -> None:
        log.info("Cmd: EXPOSE")
        ports = set(config.exposed_ports) if config.exposed_ports is not None else set()
        envs = build_args.replacement_envs(config.env)
        for raw in self.instruction.ports:
            port = resolve_environment_replacement(raw, envs, False)
            if "/" not in port:
                port += "/tcp"
            protocol = port.split("/")[1]
            if not valid_protocol(protocol):
                raise ValueError(f"invalid protocol: {protocol}")
            log.info("Adding exposed port: %s", port)
            ports.add(port)
        config.exposed_ports = ports

    def __str__(self) -> str:
        return str(self.instruction)


class LabelCommand(BaseCommand):
    """LABEL: sets image labels."""

    def __init__(self, instruction: LabelInstruction) -> None:
        self.instruction = instruction

    def execute(self, config: ImageConfig, build_args: BuildArgs) -> None:
        update_labels(self.instruction.labels, config, build_args)

    def __str__(self) -> str:
        return str(self.instruction)


class EnvCommand(BaseCommand):
    """ENV: sets environment variables in the image config."""

    def __init__(self, instruction: EnvInstruction) -> None:
        self.instruction = instruction

    def execute(self, config: ImageConfig, build_args: BuildArgs) -> None:
        envs = build_args.replacement_envs(config.env)
        update_config_env(self.instruction.env, config, envs)

    def __str__(self) -> str:
        return str(self.instruction)


class VolumeCommand(BaseCommand):
    """VOLUME: declares volumes and creates their directories."""

    def __init__(self, instruction: VolumeInstruction) -> None:
        self.instruction = instruction

    def execute(self, config: ImageConfig, build_args: BuildArgs) -> None:
        log.info("Cmd: VOLUME")
        envs = build_args.replacement_envs(config.env)
        resolved = resolve_environment_replacement_list(self.instruction.volumes, envs, True)
        volumes = set(config.volumes) if config.volumes is not None else set()
        for volume in resolved:
            volumes.add(volume)
            _add_volume_path_to_ignore_list(volume)
            if not os.path.lexists(volume):
                log.info("Creating directory %s", volume)
                try:
                    os.makedirs(volume, 0o755, exist_ok=True)
                except OSError as exc:
                    raise OSError(
                        f"could not create directory for volume {volume}: {exc}"
                    ) from exc
        config.volumes = volumes

    def files_to_snapshot(self) -> list[str]:
        return []

    def __str__(self) -> str:
        return str(self.instruction)


class WorkdirCommand(BaseCommand):
    """WORKDIR: changes the working directory, creating it when missing."""

    def __init__(self, instruction: WorkdirInstruction, mkdir: MkdirFunc | None = None) -> None:
        self.instruction = instruction
        self.snapshot_files: list[str] = []
        self._mkdir = mkdir or _mkdir_all_with_permissions

    def execute(self, config: ImageConfig, build_args: BuildArgs) -> None:
        log.info("Cmd: workdir")
        envs = build_args.replacement_envs(config.env)
        resolved = resolve_environment_replacement(self.instruction.path, envs, True)
        if posixpath.isabs(resolved):
            config.working_dir = resolved
        else:
            base = config.working_dir or "/"
            config.working_dir = posixpath.normpath(posixpath.join(base, resolved))
        log.info("Changed working directory to %s", config.working_dir)

        self.snapshot_files = []
        try:
            os.stat(config.working_dir)
            return
        except FileNotFoundError:
            pass
        except OSError:
            return

        uid, gid = -1, -1
        if config.user:
            log.debug("Fetching uid and gid for USER '%s'", config.user)
            try:
                uid, gid = _user_group(config.user, envs)
            except (LookupError, ValueError) as exc:
                raise LookupError(
                    f"identifying uid and gid for user {config.user}: {exc}"
                ) from exc

        log.info("Creating directory %s with uid %d and gid %d", config.working_dir, uid, gid)
        self.snapshot_files.append(config.working_dir)
        try:
            self._mkdir(config.working_dir, 0o755, uid, gid)
        except OSError as exc:
            raise OSError(f"creating workdir {config.working_dir}: {exc}") from exc

    def files_to_snapshot(self) -> list[str]:
        return self.snapshot_files

    def metadata_only(self) -> bool:
        return False

    def __str__(self) -> str:
        return str(self.instruction)