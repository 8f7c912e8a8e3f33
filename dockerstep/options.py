"""Command-line option containers for the builder and the cache warmer."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import timedelta


class MultiArg(list):
    """A flag that may be given several times; each value is appended."""

    def set(self, value: str) -> None:
        self.append(value)

    def contains(self, value: str) -> bool:
        return value in self

    def __str__(self) -> str:
        return ",".join(self)


class KeyValueArg(dict):
    """A flag that collects key=value pairs."""

    def set(self, value: str) -> None:
        key, sep, val = value.partition("=")
        if not sep:
            raise ValueError(f"invalid argument value. expect key=value, got {value}")
        self[key] = val

    def __str__(self) -> str:
        return ",".join(f"{k}={v}" for k, v in self.items())


class InvalidGitFlagError(ValueError):
    """Raised when a git option is not in key=value form."""


_TRUE = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE = {"0", "f", "F", "FALSE", "false", "False"}


def _parse_bool(value: str) -> bool:
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(f"invalid boolean value: {value!r}")


@dataclass
class KanikoGitOptions:
    branch: str = ""
    single_branch: bool = False
    recurse_submodules: bool = False

    def set(self, value: str) -> None:
        key, sep, val = value.partition("=")
        if not sep:
            raise InvalidGitFlagError(
                f"invalid git flag, must be in the key=value format: {value}"
            )
        if key == "branch":
            self.branch = val
        elif key == "single-branch":
            self.single_branch = _parse_bool(val)
        elif key == "recurse-submodules":
            self.recurse_submodules = _parse_bool(val)

    def __str__(self) -> str:
        return (
            f"branch={self.branch},single-branch={str(self.single_branch).lower()},"
            f"recurse-submodules={str(self.recurse_submodules).lower()}"
        )


class Compression(str, enum.Enum):
    GZIP = "gzip"
    ZSTD = "zstd"

    @classmethod
    def parse(cls, value: str) -> "Compression":
        try:
            return cls(value)
        except ValueError:
            raise ValueError('must be either "gzip" or "zstd"') from None

    def __str__(self) -> str:
        return self.value


@dataclass
class CacheOptions:
    cache_dir: str = ""
    cache_ttl: timedelta = timedelta(0)


@dataclass
class RegistryOptions:
    registry_mirrors: MultiArg = field(default_factory=MultiArg)
    insecure_registries: MultiArg = field(default_factory=MultiArg)
    skip_tls_verify_registries: MultiArg = field(default_factory=MultiArg)
    registries_certificates: KeyValueArg = field(default_factory=KeyValueArg)
    registries_client_certificates: KeyValueArg = field(default_factory=KeyValueArg)
    skip_default_registry_fallback: bool = False
    insecure: bool = False
    skip_tls_verify: bool = False
    insecure_pull: bool = False
    skip_tls_verify_pull: bool = False
    push_retry: int = 0


@dataclass
class KanikoOptions(RegistryOptions, CacheOptions):
    destinations: MultiArg = field(default_factory=MultiArg)
    build_args: MultiArg = field(default_factory=MultiArg)
    labels: MultiArg = field(default_factory=MultiArg)
    git: KanikoGitOptions = field(default_factory=KanikoGitOptions)
    ignore_paths: MultiArg = field(default_factory=MultiArg)
    dockerfile_path: str = ""
    src_context: str = ""
    snapshot_mode: str = ""
    snapshot_mode_deprecated: str = ""
    custom_platform: str = ""
    custom_platform_deprecated: str = ""
    bucket: str = ""
    tar_path: str = ""
    tar_path_deprecated: str = ""
    kaniko_dir: str = ""
    target: str = ""
    cache_repo: str = ""
    digest_file: str = ""
    image_name_digest_file: str = ""
    image_name_tag_digest_file: str = ""
    oci_layout_path: str = ""
    compression: Compression | None = None
    compression_level: int = 0
    image_fs_extract_retry: int = 0
    single_snapshot: bool = False
    reproducible: bool = False
    no_push: bool = False
    no_push_cache: bool = False
    cache: bool = False
    cleanup: bool = False
    compressed_caching: bool = False
    ignore_var_run: bool = False
    skip_unused_stages: bool = False
    run_v2: bool = False
    cache_copy_layers: bool = False
    cache_run_layers: bool = False
    force_build_metadata: bool = False
    initial_fs_unpacked: bool = False


@dataclass
class WarmerOptions(RegistryOptions, CacheOptions):
    custom_platform: str = ""
    images: MultiArg = field(default_factory=MultiArg)
    force: bool = False
    dockerfile_path: str = ""
    build_args: MultiArg = field(default_factory=MultiArg)