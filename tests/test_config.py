"""
Tests for configuration loading.
"""

import pytest

from bucketpush.config import Config, load_config, resolve_config
from bucketpush.core.encoding import EncodingOptions
from bucketpush.exceptions import ConfigurationError


class TestResolveConfig:
    """Tests for ${VAR} substitution."""

    def test_substitutes_nested_values(self, monkeypatch):
        monkeypatch.setenv("BUCKET", "site")
        monkeypatch.setenv("REGION", "eu-west-1")

        resolved = resolve_config(
            {"destination": "s3://${BUCKET}", "provider": {"region": "${REGION}"}, "source": ["${BUCKET}/*"]}
        )

        assert resolved == {"destination": "s3://site", "provider": {"region": "eu-west-1"}, "source": ["site/*"]}

    def test_unknown_variable_left_in_place(self, monkeypatch):
        monkeypatch.delenv("NOT_SET_ANYWHERE", raising=False)
        assert resolve_config({"prefix": "${NOT_SET_ANYWHERE}/"}) == {"prefix": "${NOT_SET_ANYWHERE}/"}

    def test_non_strings_untouched(self):
        assert resolve_config({"concurrency": 4, "make_public": True}) == {"concurrency": 4, "make_public": True}


class TestConfig:
    """Tests for the Config container."""

    def test_dot_notation(self):
        config = Config({"provider": {"region": "eu-west-1"}, "prefix": "site/"})
        assert config.get("provider.region") == "eu-west-1"
        assert config.get("provider.missing", "x") == "x"
        assert config.get("prefix.deeper") is None
        assert config["prefix"] == "site/"
        assert "prefix" in config
        assert list(config) == ["provider", "prefix"]

    def test_missing_key(self):
        with pytest.raises(KeyError, match="not found"):
            Config({})["prefix"]

    def test_push_options_mapping(self):
        config = Config(
            {
                "source": "dist/**/*",
                "destination": "s3://site",
                "prefix": "v1/",
                "cwd": "build",
                "concurrency": 4,
                "only_upload_changes": False,
                "delete_extra_files": True,
                "upload_new_files_first": False,
                "list_include_metadata": True,
                "cache_control": "max-age=60",
                "make_public": True,
                "metadata": {"a": "b"},
                "tags": {"c": "d"},
                "mime_types": {"text/plain": ["pub"]},
                "encoding": {"content_encodings": ["gzip"], "file_extensions": ["js"]},
            }
        )

        assert config.push_options() == {
            "dest_path_prefix": "v1/",
            "current_working_directory": "build",
            "concurrency": 4,
            "only_upload_changes": False,
            "should_delete_extra_files": True,
            "upload_new_files_first": False,
            "list_include_metadata": True,
            "cache_control": "max-age=60",
            "make_public": True,
            "metadata": {"a": "b"},
            "tags": {"c": "d"},
            "mime_types": {"text/plain": ["pub"]},
            "encoding": EncodingOptions(content_encodings=("gzip",), file_extensions=("js",)),
        }

    def test_provider_options(self):
        assert Config({"provider": {"region": "x"}}).provider_options() == {"region": "x"}
        assert Config({}).provider_options() == {}


class TestValidation:
    """Tests for Config.validate."""

    def test_unknown_key(self):
        with pytest.raises(ConfigurationError, match="Unknown configuration key 'bucket'"):
            Config({"bucket": "x"}).validate()

    def test_wrong_type(self):
        with pytest.raises(ConfigurationError, match="'tags' must be dict, got list"):
            Config({"tags": ["a"]}).validate()

    def test_bool_is_not_an_int(self):
        with pytest.raises(ConfigurationError, match="'concurrency' must be int, got bool"):
            Config({"concurrency": True}).validate()

    def test_concurrency_must_be_positive(self):
        with pytest.raises(ConfigurationError, match="must be >= 1"):
            Config({"concurrency": 0}).validate()

    def test_invalid_encoding_section(self):
        with pytest.raises(ConfigurationError, match="Configuration 'encoding'"):
            Config({"encoding": {"content_encodings": ["zstd"]}}).validate()

    def test_errors_are_collected(self):
        with pytest.raises(ConfigurationError) as exc_info:
            Config({"bucket": "x", "prefix": 1}).validate()
        assert "bucket" in str(exc_info.value)
        assert "prefix" in str(exc_info.value)


class TestLoadConfig:
    """Tests for load_config."""

    def test_default_file_is_optional(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        config = load_config()

        assert config.data == {}
        assert config.path is None

    def test_default_file_is_loaded(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "bucketpush.yaml").write_text("destination: s3://site\nconcurrency: 2\n")

        config = load_config()

        assert config.get("destination") == "s3://site"
        assert config.get("concurrency") == 2
        assert config.path == tmp_path / "bucketpush.yaml"

    def test_explicit_path_must_exist(self, tmp_path):
        with pytest.raises(ConfigurationError, match="Config file not found"):
            load_config(tmp_path / "missing.yaml")

    def test_required_default(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        with pytest.raises(ConfigurationError, match="Config file not found"):
            load_config(required=True)

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")

        assert load_config(path).data == {}

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("source: [unclosed\n")

        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            load_config(path)

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(ConfigurationError, match="must be a dictionary/mapping, got list"):
            load_config(path)

    def test_env_substitution(self, tmp_path, monkeypatch):
        monkeypatch.setenv("ACCOUNT_KEY", "secret")
        path = tmp_path / "azure.yaml"
        path.write_text("destination: azure://$web\nprovider:\n  account_name: acct\n  account_key: ${ACCOUNT_KEY}\n")

        config = load_config(path)

        assert config.get("provider.account_key") == "secret"
