"""Build arguments, shell-style variable expansion and the ARG command."""

from __future__ import annotations

import posixpath
from typing import Iterable

from .base import BaseCommand, ImageConfig
from .instructions import ArgInstruction, KeyValuePair

_BUILTIN_ALLOWED = (
    "HTTP_PROXY", "http_proxy", "HTTPS_PROXY", "https_proxy",
    "FTP_PROXY", "ftp_proxy", "NO_PROXY", "no_proxy",
    "ALL_PROXY", "all_proxy",
)


class BuildArgs:
    """Build arguments given on the command line and declared by ARG."""

    def __init__(self, args: Iterable[str] = ()) -> None:
        self._from_options: dict[str, str | None] = {}
        for arg in args:
            key, sep, val = arg.partition("=")
            self._from_options[key] = val if sep else None
        self._allowed: dict[str, str | None] = {}
        self._meta: dict[str, str | None] = {}

    def add_arg(self, key: str, value: str | None) -> None:
        self._allowed[key] = value

    def add_meta_arg(self, key: str, value: str | None) -> None:
        self._meta[key] = value

    def _lookup(self, key: str, mapping: dict[str, str | None]) -> str | None:
        override = self._from_options.get(key)
        if override is not None:
            return override
        return mapping.get(key)

    def _resolved(self, mapping: dict[str, str | None]) -> dict[str, str]:
        result = {}
        for key in mapping:
            value = self._lookup(key, mapping)
            if value is not None:
                result[key] = value
        return result

    def all_allowed(self) -> dict[str, str]:
        result = {
            key: value
            for key in _BUILTIN_ALLOWED
            if (value := self._from_options.get(key)) is not None
        }
        result.update(self._resolved(self._allowed))
        return result

    def all_meta(self) -> dict[str, str]:
        return self._resolved(self._meta)

    def replacement_envs(self, env: Iterable[str]) -> list[str]:
        """The config env followed by allowed build args not already set."""
        result = list(env)
        keys = {e.partition("=")[0] for e in result}
        extra = sorted(
            f"{k}={v}" for k, v in self.all_allowed().items() if k not in keys
        )
        return result + extra


def _lookup_env(name: str, envs: list[str]) -> str | None:
    for env in envs:
        key, sep, value = env.partition("=")
        if key == name:
            return value if sep else ""
    return None


def _is_name_char(ch: str) -> bool:
    return ch.isalnum() or ch == "_"


class _Lexer:
    def __init__(self, word: str, envs: list[str]) -> None:
        self.word = word
        self.envs = envs
        self.pos = 0

    def peek(self) -> str:
        return self.word[self.pos] if self.pos < len(self.word) else ""

    def next(self) -> str:
        ch = self.peek()
        self.pos += 1
        return ch

    def process(self, stop: str = "") -> str:
        out = []
        while self.pos < len(self.word):
            ch = self.peek()
            if stop and ch == stop:
                break
            self.pos += 1
            if ch == "\\":
                out.append(self.next() if self.pos < len(self.word) else "\\")
            elif ch == "'":
                out.append(self._single_quoted())
            elif ch == '"':
                out.append(self._double_quoted())
            elif ch == "$":
                out.append(self._dollar())
            else:
                out.append(ch)
        return "".join(out)

    def _single_quoted(self) -> str:
        end = self.word.find("'", self.pos)
        if end < 0:
            raise ValueError("unexpected end of statement while looking for matching single-quote")
        text = self.word[self.pos:end]
        self.pos = end + 1
        return text

    def _double_quoted(self) -> str:
        out = []
        while True:
            if self.pos >= len(self.word):
                raise ValueError("unexpected end of statement while looking for matching double-quote")
            ch = self.next()
            if ch == '"':
                return "".join(out)
            if ch == "$":
                out.append(self._dollar())
            elif ch == "\\" and self.peek() in ('"', "$", "\\"):
                out.append(self.next())
            else:
                out.append(ch)

    def _dollar(self) -> str:
        ch = self.peek()
        if ch == "{":
            self.pos += 1
            return self._braced()
        start = self.pos
        while _is_name_char(self.peek()):
            self.pos += 1
        name = self.word[start:self.pos]
        if not name:
            return "$"
        return _lookup_env(name, self.envs) or ""

    def _braced(self) -> str:
        start = self.pos
        while _is_name_char(self.peek()):
            self.pos += 1
        name = self.word[start:self.pos]
        if not name:
            raise ValueError(f"bad substitution in {self.word!r}")
        ch = self.next()
        if ch == "}":
            return _lookup_env(name, self.envs) or ""
        if ch == ":":
            modifier = self.next()
            word = self.process(stop="}")
            if self.next() != "}":
                raise ValueError(f"missing '}}' in {self.word!r}")
            value = _lookup_env(name, self.envs)
            if modifier == "-":
                return value if value else word
            if modifier == "+":
                return word if value else ""
            if modifier == "?":
                if not value:
                    raise ValueError(f"{name}: {word or 'is not allowed to be unset'}")
                return value
            raise ValueError(f"unsupported modifier ({modifier}) in substitution")
        raise ValueError(f"missing '}}' in {self.word!r}")


def _clean_path(path: str) -> str:
    if not path:
        return "."
    cleaned = posixpath.normpath(path)
    if cleaned.startswith("//"):
        cleaned = "/" + cleaned.lstrip("/")
    return cleaned


def resolve_environment_replacement(value: str, envs: list[str], is_filepath: bool) -> str:
    """Expand shell-style variables in value using envs (KEY=VALUE strings)."""
    result = _Lexer(value, list(envs)).process()
    if not is_filepath:
        return result
    is_dir = result.endswith("/")
    result = _clean_path(result)
    if is_dir and not result.endswith("/"):
        result += "/"
    return result


def resolve_environment_replacement_list(
    values: Iterable[str], envs: list[str], is_filepath: bool
) -> list[str]:
    return [resolve_environment_replacement(v, envs, is_filepath) for v in values]


def update_config_env(pairs: Iterable[KeyValuePair], config: ImageConfig, envs: list[str]) -> None:
    """Set the expanded pairs in config.env, keeping the existing order."""
    new_envs = [
        (
            resolve_environment_replacement(p.key, envs, False),
            resolve_environment_replacement(p.value or "", envs, False),
        )
        for p in pairs
    ]
    merged: dict[str, str] = {}
    for env in config.env:
        key, _, value = env.partition("=")
        merged.setdefault(key, value)
    for key, value in new_envs:
        merged[key] = value
    config.env = [f"{k}={v}" for k, v in merged.items()]


def parse_arg(
    key: str, value: str | None, env: list[str], build_args: BuildArgs
) -> tuple[str, str | None]:
    """Resolve an ARG declaration to its key and effective value."""
    envs = build_args.replacement_envs(env)
    resolved_key = resolve_environment_replacement(key, envs, False)
    if value is not None:
        return resolved_key, resolve_environment_replacement(value, envs, False)
    allowed = build_args.all_allowed()
    if resolved_key in allowed:
        return resolved_key, allowed[resolved_key]
    return resolved_key, build_args.all_meta().get(resolved_key)


class ArgCommand(BaseCommand):
    """ARG: records build arguments as seen."""

    def __init__(self, instruction: ArgInstruction) -> None:
        self.instruction = instruction

    def execute(self, config: ImageConfig, build_args: BuildArgs) -> None:
        for arg in self.instruction.args:
            key, value = parse_arg(arg.key, arg.value, config.env, build_args)
            build_args.add_arg(key, value)

    def __str__(self) -> str:
        return str(self.instruction)