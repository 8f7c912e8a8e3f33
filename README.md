# dockerstep

`dockerstep` takes Dockerfile instructions one at a time and applies each one to
an image configuration. It covers the steps that change the image's metadata,
and `RUN`: `ARG`, `ENV`, `LABEL`, `EXPOSE`, `USER`, `WORKDIR`, `VOLUME`, `CMD`,
`ENTRYPOINT`, `SHELL`, `ONBUILD`, `HEALTHCHECK`, `STOPSIGNAL` and `RUN`.
`MAINTAINER` is accepted and skipped as deprecated.

The package needs only the standard library and runs on Python 3.10 or later.

## Installation

```
pip install .
```

To run the test suite, install the `test` extra and run pytest:

```
pip install .[test]
pytest
```

## Modules

- `dockerstep.instructions`: the parsed instruction types. These are
  `RunInstruction`, `CmdInstruction`, `EntrypointInstruction`,
  `ShellInstruction`, `OnbuildInstruction`, `HealthCheckInstruction`,
  `StopSignalInstruction`, `UserInstruction`, `ExposeInstruction`,
  `LabelInstruction`, `EnvInstruction`, `VolumeInstruction`,
  `WorkdirInstruction`, `ArgInstruction` and `MaintainerInstruction`, and
  `KeyValuePair` for `ENV`, `LABEL` and `ARG`. Every instruction has an
  optional keyword `code`, its source text, which `str()` returns.
- `dockerstep.base`:
  - `ImageConfig` is the configuration that commands change: `env`, `cmd`,
    `entrypoint`, `shell`, `working_dir`, `user`, `labels`, `exposed_ports`,
    `volumes`, `on_build`, `healthcheck` (a `HealthConfig`), `stop_signal`
    and `args_escaped`.
  - `BaseCommand` gives the default answers every command inherits:
    `files_to_snapshot`, `metadata_only`, `requires_unpacked_fs`,
    `should_cache_output` and the rest.
  - `Caching` holds the layer a cached command was restored from.
- `dockerstep.buildargs`:
  - `BuildArgs` keeps the build arguments given up front and those declared by
    `ARG`. Its `replacement_envs(env)` returns the config environment followed
    by the allowed build arguments that it does not already set.
  - `resolve_environment_replacement(value, envs, is_filepath)` expands
    `$VAR`, `${VAR}`, `${VAR:-word}`, `${VAR:+word}` and `${VAR:?word}`, and
    handles quotes and backslash escapes. With `is_filepath` it also cleans
    the resulting path.
  - `resolve_environment_replacement_list` does the same for a list of values.
  - `update_config_env` merges expanded pairs into `ImageConfig.env`.
  - `parse_arg` and `ArgCommand` handle `ARG`.
- `dockerstep.command_line`: `CmdCommand`, `EntrypointCommand`,
  `ShellCommand`, `OnBuildCommand`, `HealthCheckCommand`, `StopSignalCommand`
  and `UserCommand`. `parse_signal(value)` accepts a signal number, or a name
  with or without the `SIG` prefix.
- `dockerstep.config_updates`: `ExposeCommand`, `LabelCommand`, `EnvCommand`,
  `VolumeCommand` and `WorkdirCommand`. Also `valid_protocol`,
  `update_labels`, and `volume_ignore_list`, which returns the volume paths
  declared so far.
  - `VolumeCommand` creates volume directories that do not exist.
  - `WorkdirCommand` creates a missing working directory with mode 0755. It
    gives the directory the uid and gid of the configured user. A different
    directory-creating function can be passed as `mkdir`.
- `dockerstep.run`: `RunCommand`, `run_command_in_exec`, `add_default_home`
  and `set_work_dir_if_exists`.
- `dockerstep.registry`: `get_command(instruction, cache_run=False)` returns
  the command for an instruction. It returns `None` for `MAINTAINER` and
  raises `UnsupportedCommandError` for anything else it does not know.
- `dockerstep.options`: the builder's option types.
  - `KanikoOptions`, `WarmerOptions`, `RegistryOptions` and `CacheOptions`.
  - The flag value types `MultiArg` (repeatable) and `KeyValueArg`
    (`key=value`).
  - `KanikoGitOptions`, set from `branch=`, `single-branch=` and
    `recurse-submodules=` strings.
  - The `Compression` enum (`gzip`, `zstd`).
- `dockerstep.errors`: the cache errors `AlreadyCachedError`, `NotFoundError`
  and `ExpiredError`, all subclasses of `CacheError`. The helpers
  `is_already_cached`, `is_not_found` and `is_expired` test for each one.
- `dockerstep.constants`: fixed names and paths. The working directory comes
  from `kaniko_dir()`; the `KANIKO_DIR` environment variable overrides its
  default `/kaniko`. `dockerfile_path()`, `build_context_dir()` and
  `intermediate_stages_dir()` return paths inside it.

## Example

```python
from dockerstep.base import ImageConfig
from dockerstep.buildargs import BuildArgs
from dockerstep.instructions import EnvInstruction, ExposeInstruction, KeyValuePair
from dockerstep.registry import get_command

config = ImageConfig(env=["num=8085"])
build_args = BuildArgs([])

get_command(EnvInstruction(env=[KeyValuePair("PORT", "$num")])).execute(config, build_args)
get_command(ExposeInstruction(ports=["$num", "9000/udp"])).execute(config, build_args)

print(config.env)                    # ['num=8085', 'PORT=8085']
print(sorted(config.exposed_ports))  # ['8085/tcp', '9000/udp']
```

## Errors

Cases the builder rejects raise exceptions:

- `EXPOSE` with a protocol other than `tcp` or `udp` raises `ValueError`.
- A `STOPSIGNAL` that is not a known signal raises `ValueError`.
- A flag value without `=` given to `KeyValueArg.set` raises `ValueError`.
- A flag value without `=` given to `KanikoGitOptions.set` raises
  `InvalidGitFlagError`.
- A bad boolean in a git option raises `ValueError`.
- A `RUN` command that exits with a non-zero status raises
  `subprocess.CalledProcessError`.

## Running commands

`RUN` starts its command line in a subprocess, in a new session, and waits for
it to finish.

- In shell form the command line goes to the configured shell, or to
  `/bin/sh -c` if none is set. In exec form the program is looked up on the
  build's `PATH`.
- The subprocess runs in the configured working directory, if that exists, and
  as the configured user.
- It gets the resolved environment, with `HOME` added if it is missing: `/root`
  for no user or `root`, otherwise that user's home directory.
- When the command has finished, any processes left in its process group are
  killed.

## What this package does not do

- It does not parse Dockerfiles. Instructions are built in code from the types
  in `dockerstep.instructions`.
- It has no `COPY` or `ADD`, and it does not take filesystem snapshots.
- It does not pull, build, cache or push images.
- The option types and cache errors are data and exception types only. Nothing
  in the package warms or reads an image cache.
- There is no command-line program.