"""Image configuration and the defaults shared by every build command."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, ClassVar


@dataclass
class HealthConfig:
    test: list[str] = field(default_factory=list)
    interval: float = 0.0
    timeout: float = 0.0
    start_period: float = 0.0
    retries: int = 0


@dataclass
class ImageConfig:
    """The mutable runtime configuration of the image being built."""

    env: list[str] = field(default_factory=list)
    cmd: list[str] | None = None
    entrypoint: list[str] | None = None
    shell: list[str] | None = None
    working_dir: str = ""
    user: str = ""
    labels: dict[str, str] | None = None
    exposed_ports: set[str] | None = None
    volumes: set[str] | None = None
    on_build: list[str] | None = None
    healthcheck: HealthConfig | None = None
    stop_signal: str = ""
    args_escaped: bool = False


class BaseCommand:
    """Defaults for a metadata-only command that touches no files."""

    # A factory building the cache-aware form of a command from a cached
    # image and the command itself; metadata commands have none.
    cached_form: ClassVar[Callable[[Any, "BaseCommand"], "BaseCommand"] | None] = None
    # Paths, relative to the build context, that a command reads.
    context_sources: ClassVar[tuple[str, ...]] = ()

    def is_args_envs_required_in_cache(self) -> bool:
        return False

    def cache_command(self, image: Any) -> "BaseCommand | None":
        factory = type(self).cached_form
        if factory is None:
            return None
        return factory(image, self)

    def files_to_snapshot(self) -> list[str] | None:
        return []

    def provides_files_to_snapshot(self) -> bool:
        return True

    def files_used_from_context(self, config: ImageConfig, build_args: Any) -> list[str]:
        return list(type(self).context_sources)

    def metadata_only(self) -> bool:
        return True

    def requires_unpacked_fs(self) -> bool:
        return False

    def should_cache_output(self) -> bool:
        return False

    def should_detect_deleted_files(self) -> bool:
        return False


class Caching:
    """Holds the layer a cached command was restored from."""

    def __init__(self, layer: Any = None) -> None:
        self._layer = layer

    def layer(self) -> Any:
        return self._layer