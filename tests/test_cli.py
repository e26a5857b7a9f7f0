"""
Tests for the bucketpush CLI.

Uses typer's CliRunner against memory:// destinations and a patched push().
"""

from unittest.mock import AsyncMock, patch

from typer.testing import CliRunner

from bucketpush.cli.main import app, format_summary
from bucketpush.exceptions import ProviderError
from bucketpush.providers.memory import MemoryProvider
from bucketpush.types import PushResult

runner = CliRunner()


def empty_result(**overrides) -> PushResult:
    fields = {
        "elapsed_ms": 0,
        "uploaded_files": [],
        "uploaded_keys": [],
        "skipped_keys": [],
        "deleted_keys": [],
        "error_keys": [],
    }
    fields.update(overrides)
    return PushResult(**fields)


class RejectingProvider(MemoryProvider):
    async def upload(self, request):
        raise ProviderError("rejected", key=request.dest_file_name)


class TestVersion:
    """Tests for --version flag."""

    def test_version_flag(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "bucketpush version" in result.output

    def test_version_short_flag(self):
        result = runner.invoke(app, ["-v"])
        assert result.exit_code == 0
        assert "bucketpush version" in result.output


class TestFormatSummary:
    """Tests for the summary line."""

    def test_without_errors(self):
        result = empty_result(uploaded_keys=["a", "a.gz"], skipped_keys=["b"], deleted_keys=["c"])
        assert format_summary(result, 2.4) == "Finished in 2s. (Uploaded 2. Deleted 1. Skipped 1.)"

    def test_with_errors(self):
        result = empty_result(error_keys=["x"])
        assert format_summary(result, 0.2) == "Finished in 0s. (Uploaded 0. Deleted 0. Skipped 0.) Errors 1."


class TestPushCommand:
    """Tests for the push command end to end."""

    def test_push_to_memory(self, tmp_path):
        (tmp_path / "a.txt").write_text("hi")
        (tmp_path / "b.css").write_text("body{}")

        result = runner.invoke(app, ["*.txt,*.css", "memory://test", "--cwd", str(tmp_path)])

        assert result.exit_code == 0, result.output
        assert "Finished in 0s. (Uploaded 2. Deleted 0. Skipped 0.)" in result.output

    def test_dry_run(self, tmp_path):
        (tmp_path / "a.txt").write_text("hi")

        result = runner.invoke(app, ["*", "memory://test", "--cwd", str(tmp_path), "--dry-run", "--delete"])

        assert result.exit_code == 0, result.output
        assert "(Uploaded 1. Deleted 0. Skipped 0.)" in result.output

    def test_missing_arguments(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        result = runner.invoke(app, [])

        assert result.exit_code == 1
        assert "SOURCE and DESTINATION are required" in result.output

    def test_malformed_destination(self, tmp_path):
        result = runner.invoke(app, ["*", "my-bucket", "--cwd", str(tmp_path)])

        assert result.exit_code == 1
        assert "destination should be in the format" in result.output

    def test_unsupported_scheme(self, tmp_path):
        result = runner.invoke(app, ["*", "ftp://bucket", "--cwd", str(tmp_path)])

        assert result.exit_code == 1
        assert "ftp is not supported" in result.output

    def test_missing_working_directory(self, tmp_path):
        result = runner.invoke(app, ["*", "memory://test", "--cwd", str(tmp_path / "nope")])

        assert result.exit_code == 1
        assert "Working directory not found" in result.output

    def test_fail_on_error(self, tmp_path):
        (tmp_path / "a.txt").write_text("hi")

        with patch("bucketpush.cli.main.create_provider", return_value=RejectingProvider()):
            result = runner.invoke(app, ["*", "memory://test", "--cwd", str(tmp_path)])

        assert result.exit_code == 1
        assert "Errors 1." in result.output

    def test_no_fail_on_error(self, tmp_path):
        (tmp_path / "a.txt").write_text("hi")

        with patch("bucketpush.cli.main.create_provider", return_value=RejectingProvider()):
            result = runner.invoke(app, ["*", "memory://test", "--cwd", str(tmp_path), "--no-fail-on-error"])

        assert result.exit_code == 0
        assert "Errors 1." in result.output


class TestOptionMapping:
    """Tests that flags reach push() as the right options."""

    def test_defaults(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        mock_push = AsyncMock(return_value=empty_result())

        with patch("bucketpush.cli.main.push", mock_push):
            result = runner.invoke(app, ["dist/**/*", "memory://site"])

        assert result.exit_code == 0, result.output
        kwargs = mock_push.call_args.kwargs
        assert kwargs["files"] == ["dist/**/*"]
        assert kwargs["concurrency"] == 3
        assert kwargs["dest_path_prefix"] == ""
        assert kwargs["dry_run"] is False
        assert isinstance(kwargs["provider"], MemoryProvider)
        assert "only_upload_changes" not in kwargs
        assert "should_delete_extra_files" not in kwargs

    def test_flags(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        mock_push = AsyncMock(return_value=empty_result())

        with patch("bucketpush.cli.main.push", mock_push):
            result = runner.invoke(
                app,
                [
                    "a/*,b/*",
                    "memory://site/docs",
                    "-c",
                    "8",
                    "--prefix",
                    "v2/",
                    "--force",
                    "--delete",
                    "--public",
                    "--list-metadata",
                    "--cache-control",
                    "max-age=60",
                ],
            )

        assert result.exit_code == 0, result.output
        kwargs = mock_push.call_args.kwargs
        assert kwargs["files"] == ["a/*", "b/*"]
        assert kwargs["concurrency"] == 8
        assert kwargs["dest_path_prefix"] == "docs/v2/"
        assert kwargs["only_upload_changes"] is False
        assert kwargs["should_delete_extra_files"] is True
        assert kwargs["make_public"] is True
        assert kwargs["list_include_metadata"] is True
        assert kwargs["cache_control"] == "max-age=60"

    def test_azure_account_options(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        mock_push = AsyncMock(return_value=empty_result())

        with patch("bucketpush.cli.main.push", mock_push):
            result = runner.invoke(
                app, ["*", "azure://$web", "--account-name", "acct", "--account-key", "a2V5"]
            )

        assert result.exit_code == 0, result.output
        provider = mock_push.call_args.kwargs["provider"]
        assert provider.container_name == "$web"
        assert provider.account == "acct"

    def test_config_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("SITE_BUCKET", "from-env")
        (tmp_path / "bucketpush.yaml").write_text(
            "source: dist/**/*\n"
            "destination: memory://${SITE_BUCKET}\n"
            "prefix: site/\n"
            "concurrency: 5\n"
            "delete_extra_files: true\n"
            "tags:\n"
            "  team: web\n"
            "encoding:\n"
            "  fileExtensions: [js, css]\n"
        )
        mock_push = AsyncMock(return_value=empty_result())

        with patch("bucketpush.cli.main.push", mock_push):
            result = runner.invoke(app, ["--prefix", "override/"])

        assert result.exit_code == 0, result.output
        kwargs = mock_push.call_args.kwargs
        assert kwargs["files"] == ["dist/**/*"]
        assert kwargs["concurrency"] == 5
        assert kwargs["dest_path_prefix"] == "override/"
        assert kwargs["should_delete_extra_files"] is True
        assert kwargs["tags"] == {"team": "web"}
        assert kwargs["encoding"].file_extensions == ("js", "css")

    def test_explicit_config_missing(self, tmp_path):
        result = runner.invoke(app, ["--config", str(tmp_path / "missing.yaml")])

        assert result.exit_code == 1
        assert "Config file not found" in result.output

    def test_invalid_config(self, tmp_path):
        config = tmp_path / "custom.yaml"
        config.write_text("concurrency: many\n")

        result = runner.invoke(app, ["*", "memory://x", "--config", str(config)])

        assert result.exit_code == 1
        assert "concurrency" in result.output
