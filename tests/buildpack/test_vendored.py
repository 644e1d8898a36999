"""Tests for the GOPATH layout used by vendored functions without go.mod."""

from pathlib import Path

import pytest

from gofn_buildpack.config import FRAMEWORK_MODULE, FRAMEWORK_PACKAGE, FRAMEWORK_VERSION
from gofn_buildpack.context import Layer
from gofn_buildpack.errors import ExternalToolFailure, UserConfigurationError
from gofn_buildpack.models import FunctionInfo
from gofn_buildpack.strategy import Strategy
from gofn_buildpack.vendored import create_main_vendored


@pytest.fixture
def ctx(make_context, fn_source):
    return make_context(fn_source.parent)


@pytest.fixture
def layer(tmp_path):
    path = tmp_path / "layers" / "functions-framework"
    path.mkdir(parents=True)
    return Layer(name="functions-framework", path=path)


@pytest.fixture
def fn(fn_source):
    (fn_source / "vendor" / "github.com" / "pkg" / "errors").mkdir(parents=True)
    (fn_source / "vendor" / "github.com" / "pkg" / "errors" / "errors.go").write_text("package errors\n")
    return FunctionInfo(source=fn_source, target="HelloWorld", package="hello")


def vendor_framework(source: Path) -> None:
    framework = source / "vendor" / FRAMEWORK_PACKAGE
    framework.mkdir(parents=True)
    (framework / "framework.go").write_text("package funcframework\n")


class TestWorkspaceLayout:
    """Test the GOPATH workspace built at the application root."""

    def test_function_moved_into_gopath(self, ctx, layer, fn):
        original = fn.source
        result = create_main_vendored(ctx, layer, fn)

        relocated = ctx.application_root / "src" / "hello"
        assert not original.exists()
        assert (relocated / "fn.go").exists()
        assert result.function.source == relocated
        assert result.function.package == "hello"
        assert result.strategy is Strategy.VENDORED_LEGACY

    def test_main_generated_in_app_directory(self, ctx, layer, fn):
        result = create_main_vendored(ctx, layer, fn)

        expected = ctx.application_root / "src" / "serverless_function_app" / "main" / "main.go"
        assert result.main_path == expected
        text = expected.read_text()
        assert 'userfunction "hello"' in text
        assert "userfunction.HelloWorld" in text

    def test_layer_build_environment(self, ctx, layer, fn):
        create_main_vendored(ctx, layer, fn)

        assert layer.build is True
        assert layer.build_environment == {
            "GOPATH": str(ctx.application_root),
            "GOOGLE_BUILDABLE": "serverless_function_app/main",
        }

    def test_package_named_like_app_directory_rejected(self, ctx, layer, fn_source, toolchain):
        fn = FunctionInfo(source=fn_source, target="HelloWorld", package="serverless_function_app")
        with pytest.raises(UserConfigurationError, match="already exists"):
            create_main_vendored(ctx, layer, fn)

        assert (fn_source / "fn.go").exists()
        assert not (ctx.application_root / "src" / "serverless_function_app" / fn_source.name).exists()
        assert toolchain.commands("go", "get") == []

    def test_existing_package_directory_rejected(self, ctx, layer, fn):
        existing = ctx.application_root / "src" / "hello"
        existing.mkdir(parents=True)
        (existing / "other.go").write_text("package hello\n")

        with pytest.raises(UserConfigurationError):
            create_main_vendored(ctx, layer, fn)

        assert (fn.source / "fn.go").exists()
        assert sorted(p.name for p in existing.iterdir()) == ["other.go"]


class TestFrameworkVendored:
    """Test functions that vendor the framework themselves."""

    def test_no_fetch_or_checkout(self, ctx, layer, fn, toolchain):
        vendor_framework(fn.source)
        create_main_vendored(ctx, layer, fn)

        assert toolchain.commands("go", "get") == []
        assert toolchain.commands("git") == []

    def test_vendor_copied_to_app(self, ctx, layer, fn):
        vendor_framework(fn.source)
        create_main_vendored(ctx, layer, fn)

        app_vendor = ctx.application_root / "src" / "serverless_function_app" / "main" / "vendor"
        assert (app_vendor / FRAMEWORK_PACKAGE / "framework.go").exists()
        assert (app_vendor / "github.com" / "pkg" / "errors" / "errors.go").exists()

    def test_unknown_version_selects_v0(self, ctx, layer, fn):
        vendor_framework(fn.source)
        result = create_main_vendored(ctx, layer, fn)

        assert result.framework_version == "v0.0.0"
        assert result.variant == "V0"
        assert ctx.warnings == []


class TestFrameworkFetched:
    """Test functions whose vendor directory lacks the framework."""

    def test_one_fetch_then_one_checkout(self, ctx, layer, fn, toolchain):
        create_main_vendored(ctx, layer, fn)

        tool_calls = [c for c in toolchain.calls if c.argv[:2] in (["go", "get"], ["git", "checkout"])]
        assert [c.argv for c in tool_calls] == [
            ["go", "get", FRAMEWORK_PACKAGE],
            ["git", "checkout", FRAMEWORK_VERSION],
        ]
        assert tool_calls[1].cwd == ctx.application_root / "src" / FRAMEWORK_MODULE

    def test_fetch_uses_workspace_gopath(self, ctx, layer, fn, toolchain):
        create_main_vendored(ctx, layer, fn)

        fetch = toolchain.commands("go", "get")[0]
        assert fetch.env["GOPATH"] == str(ctx.application_root)
        assert fetch.env["GOCACHE"]

    def test_fetch_cache_removed(self, ctx, layer, fn, toolchain):
        seen = []

        def check_cache(call):
            cache = Path(call.env["GOCACHE"])
            assert cache.is_dir()
            seen.append(cache)

        toolchain.on("go", "get", action=check_cache)
        create_main_vendored(ctx, layer, fn)

        assert len(seen) == 1
        assert not seen[0].exists()

    def test_fetch_cache_removed_on_failure(self, ctx, layer, fn, toolchain):
        seen = []
        toolchain.on(
            "go", "get",
            returncode=1,
            stderr="package github.com/GoogleCloudPlatform/functions-framework-go/funcframework: unrecognized import path\n",
            action=lambda call: seen.append(Path(call.env["GOCACHE"])),
        )
        with pytest.raises(ExternalToolFailure):
            create_main_vendored(ctx, layer, fn)

        assert toolchain.commands("git") == []
        assert not seen[0].exists()

    def test_warns_and_pins_version(self, ctx, layer, fn):
        result = create_main_vendored(ctx, layer, fn)

        assert len(ctx.warnings) == 1
        assert FRAMEWORK_PACKAGE in ctx.warnings[0]
        assert result.framework_version == FRAMEWORK_VERSION
        assert result.variant == "V1_1"

    def test_relocation_not_restored_after_failure(self, ctx, layer, fn, toolchain):
        toolchain.on("git", "checkout", returncode=1, stderr="error: pathspec 'v1.1.0' did not match\n")
        original = fn.source
        with pytest.raises(ExternalToolFailure):
            create_main_vendored(ctx, layer, fn)

        assert not original.exists()
        assert (ctx.application_root / "src" / "hello" / "fn.go").exists()
