"""
Build context: the capabilities the pipeline consumes from its host.

The context runs commands, answers filesystem questions, hands out scoped
temporary directories and layers, and collects the processes to launch.
Command execution goes through a pluggable runner so that the toolchain
can be replaced in tests.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, Iterator, List, Mapping, Optional, Sequence

import toml

from .errors import ExternalToolFailure

logger = logging.getLogger(__name__)

# Longest stderr excerpt embedded in a failure message
_STDERR_EXCERPT = 1000


class Attribution(Enum):
    """
    Opaque timing markers passed through to the host.

    The host decides how time spent in a tagged command is classified;
    the pipeline only tags.
    """

    NONE = "none"
    USER = "user"
    USER_TIMING = "user_timing"


@dataclass
class ExecResult:
    """Outcome of one command invocation."""

    argv: List[str]
    returncode: int
    stdout: str
    stderr: str
    attribution: Attribution = Attribution.NONE

    @property
    def ok(self) -> bool:
        return self.returncode == 0


CommandRunner = Callable[..., "subprocess.CompletedProcess[str]"]


def subprocess_runner(
    argv: Sequence[str],
    *,
    cwd: Path,
    env: Mapping[str, str],
) -> "subprocess.CompletedProcess[str]":
    """Run ``argv`` synchronously and capture its output as text."""
    return subprocess.run(
        list(argv),
        cwd=str(cwd),
        env=dict(env),
        capture_output=True,
        text=True,
        check=False,
    )


@dataclass
class Layer:
    """A layer directory plus the metadata the lifecycle reads back."""

    name: str
    path: Path
    build: bool = False
    launch: bool = False
    cache: bool = False
    build_environment: Dict[str, str] = field(default_factory=dict)
    launch_environment: Dict[str, str] = field(default_factory=dict)

    def override_build_env(self, key: str, value: str) -> None:
        self.build_environment[key] = value

    def default_launch_env(self, key: str, value: str) -> None:
        self.launch_environment[key] = value

    def write_metadata(self, layers_dir: Path) -> None:
        """Write ``<layers>/<name>.toml`` and the ``env.build`` and ``env.launch`` files."""
        metadata = {"types": {"build": self.build, "launch": self.launch, "cache": self.cache}}
        with open(layers_dir / f"{self.name}.toml", "w", encoding="utf-8") as f:
            toml.dump(metadata, f)
        _write_env_files(self.path / "env.build", self.build_environment, "override")
        _write_env_files(self.path / "env.launch", self.launch_environment, "default")


def _write_env_files(env_dir: Path, values: Mapping[str, str], suffix: str) -> None:
    if not values:
        return
    env_dir.mkdir(parents=True, exist_ok=True)
    for key, value in values.items():
        (env_dir / f"{key}.{suffix}").write_text(value, encoding="utf-8")


@dataclass
class Process:
    type: str
    command: List[str]


class BuildContext:
    """
    Capabilities for a single build.

    Args:
        application_root: Directory holding the application being built
        buildpack_root: Directory holding the buildpack's bundled assets
        layers_dir: Directory in which layers are created
        env: Base environment for commands (defaults to a copy of ``os.environ``)
        runner: Command runner (defaults to :func:`subprocess_runner`)
    """

    def __init__(
        self,
        application_root: Path,
        buildpack_root: Path,
        layers_dir: Path,
        *,
        env: Optional[Mapping[str, str]] = None,
        runner: Optional[CommandRunner] = None,
    ):
        self.application_root = Path(application_root)
        self.buildpack_root = Path(buildpack_root)
        self.layers_dir = Path(layers_dir)
        self.env: Dict[str, str] = dict(os.environ if env is None else env)
        self.runner = runner or subprocess_runner
        self.layers: Dict[str, Layer] = {}
        self.processes: List[Process] = []
        self.warnings: List[str] = []

    # Commands

    def exec_with_err(
        self,
        argv: Sequence[str],
        *,
        cwd: Optional[Path] = None,
        env: Optional[Mapping[str, str]] = None,
        attribution: Attribution = Attribution.NONE,
    ) -> ExecResult:
        """
        Run a command and return its result whatever the exit code.

        Raises:
            ExternalToolFailure: If the command cannot be started at all
        """
        run_env = dict(self.env)
        if env:
            run_env.update(env)
        workdir = Path(cwd) if cwd is not None else self.application_root
        logger.debug(f"Running {' '.join(argv)} (cwd={workdir}, attribution={attribution.value})")
        try:
            completed = self.runner(list(argv), cwd=workdir, env=run_env)
        except OSError as e:
            # Missing binary or working directory
            raise ExternalToolFailure(f"running {list(argv)!r} failed: {e}", argv=argv) from e
        return ExecResult(
            argv=list(argv),
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
            attribution=attribution,
        )

    def exec(
        self,
        argv: Sequence[str],
        *,
        cwd: Optional[Path] = None,
        env: Optional[Mapping[str, str]] = None,
        attribution: Attribution = Attribution.NONE,
    ) -> ExecResult:
        """
        Run a command, raising on a non-zero exit code.

        Raises:
            ExternalToolFailure: If the command cannot be started or exits non-zero
        """
        result = self.exec_with_err(argv, cwd=cwd, env=env, attribution=attribution)
        if not result.ok:
            raise failure_from_result(result)
        return result

    def setenv(self, key: str, value: str) -> None:
        """Set a variable in the environment of subsequent commands."""
        self.env[key] = value

    # Filesystem

    def file_exists(self, *parts: str | Path) -> bool:
        return Path(*parts).exists()

    @contextmanager
    def temp_dir(self, prefix: str) -> Iterator[Path]:
        """Yield a fresh directory that is removed on every exit path."""
        path = Path(tempfile.mkdtemp(prefix=f"{prefix}-"))
        try:
            yield path
        finally:
            shutil.rmtree(path, ignore_errors=True)

    # Layers and processes

    def layer(self, name: str) -> Layer:
        """Return the named layer, creating its directory on first use."""
        if name not in self.layers:
            path = self.layers_dir / name
            path.mkdir(parents=True, exist_ok=True)
            self.layers[name] = Layer(name=name, path=path)
        return self.layers[name]

    def add_web_process(self, command: Sequence[str]) -> None:
        self.processes.append(Process(type="web", command=list(command)))

    def write_metadata(self) -> None:
        """Persist layer metadata and ``launch.toml`` into the layers directory."""
        self.layers_dir.mkdir(parents=True, exist_ok=True)
        for layer in self.layers.values():
            layer.write_metadata(self.layers_dir)
        if self.processes:
            launch = {"processes": [{"type": p.type, "command": list(p.command)} for p in self.processes]}
            with open(self.layers_dir / "launch.toml", "w", encoding="utf-8") as f:
                toml.dump(launch, f)

    # Messages

    def log(self, message: str) -> None:
        logger.info(message)

    def warn(self, message: str) -> None:
        self.warnings.append(message)
        logger.warning(message)


def failure_from_result(result: ExecResult) -> ExternalToolFailure:
    """Build an ExternalToolFailure describing a failed command."""
    stderr = result.stderr.strip()
    if len(stderr) > _STDERR_EXCERPT:
        stderr = f"{stderr[:_STDERR_EXCERPT - 3]}..."
    message = f"running {' '.join(result.argv)!r} failed with exit code {result.returncode}"
    if stderr:
        message = f"{message}: {stderr}"
    return ExternalToolFailure(
        message,
        argv=result.argv,
        returncode=result.returncode,
        stdout=result.stdout,
        stderr=result.stderr,
    )


__all__ = [
    "Attribution",
    "BuildContext",
    "CommandRunner",
    "ExecResult",
    "Layer",
    "Process",
    "failure_from_result",
    "subprocess_runner",
]
