"""Shared fixtures: a scripted go/git toolchain and a function workspace."""

import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

import pytest

from gofn_buildpack.config import BuildConfig
from gofn_buildpack.context import BuildContext

UNKNOWN_FRAMEWORK_STDERR = (
    "go: module github.com/GoogleCloudPlatform/functions-framework-go: not a known dependency\n"
)


@dataclass
class Call:
    argv: List[str]
    cwd: Path
    env: Dict[str, str]


@dataclass
class Response:
    returncode: int = 0
    stdout: str = ""
    stderr: str = ""
    action: Optional[Callable[[Call], None]] = None


class FakeToolchain:
    """
    Command runner that answers from a table of argv prefixes.

    The longest registered prefix matching a command wins; unmatched
    commands succeed with empty output. Every call is recorded.
    """

    def __init__(self):
        self.calls: List[Call] = []
        self.responses: Dict[Tuple[str, ...], Response] = {}

    def on(self, *prefix: str, returncode=0, stdout="", stderr="", action=None) -> None:
        self.responses[tuple(prefix)] = Response(returncode, stdout, stderr, action)

    def __call__(self, argv, *, cwd, env):
        call = Call(argv=list(argv), cwd=Path(cwd), env=dict(env))
        self.calls.append(call)
        response = Response()
        best = -1
        for prefix, candidate in self.responses.items():
            if tuple(argv[: len(prefix)]) == prefix and len(prefix) > best:
                response, best = candidate, len(prefix)
        if response.action is not None:
            response.action(call)
        return subprocess.CompletedProcess(list(argv), response.returncode, response.stdout, response.stderr)

    def commands(self, *prefix: str) -> List[Call]:
        return [c for c in self.calls if tuple(c.argv[: len(prefix)]) == prefix]


@pytest.fixture
def toolchain():
    """A Go 1.16 toolchain with a go.mod function in module example.com/fn."""
    fake = FakeToolchain()
    fake.on("go", "version", stdout="go version go1.16.4 linux/amd64\n")
    fake.on("go", "run", "main", stdout="hello\n")
    fake.on("go", "list", "-m", stdout="example.com/fn\n")
    fake.on("go", "list", "-m", "-f", returncode=1, stderr=UNKNOWN_FRAMEWORK_STDERR)
    return fake


@pytest.fixture
def app_root(tmp_path):
    """An application root holding a bare function with a go.mod."""
    root = tmp_path / "workspace"
    root.mkdir()
    (root / "go.mod").write_text("module example.com/fn\n\ngo 1.16\n")
    (root / "fn.go").write_text("package hello\n\nfunc HelloWorld() {}\n")
    return root


@pytest.fixture
def make_context(tmp_path, toolchain):
    def _make(root: Path) -> BuildContext:
        return BuildContext(
            root,
            buildpack_root=tmp_path / "buildpack",
            layers_dir=tmp_path / "layers",
            env={"PATH": "/usr/local/go/bin:/usr/bin"},
            runner=toolchain,
        )
    return _make


@pytest.fixture
def config_for(tmp_path):
    def _config(root: Path, target: Optional[str] = "HelloWorld") -> BuildConfig:
        return BuildConfig(
            application_root=root,
            buildpack_root=tmp_path / "buildpack",
            layers_dir=tmp_path / "layers",
            function_target=target,
        )
    return _config


@pytest.fixture
def fn_source(tmp_path):
    """A function source directory, as found after relocation."""
    source = tmp_path / "workspace" / "serverless_function_source_code"
    source.mkdir(parents=True)
    (source / "fn.go").write_text("package hello\n")
    return source
