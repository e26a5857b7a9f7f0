"""
Tests for the bucketpush exception hierarchy.
"""

import pytest

from bucketpush.exceptions import (
    BucketPushError,
    ConfigurationError,
    FingerprintError,
    ProviderError,
    ProviderNotFoundError,
)


class TestHierarchy:
    """Tests for exception inheritance."""

    @pytest.mark.parametrize("exc_type", [ConfigurationError, ProviderError, ProviderNotFoundError, FingerprintError])
    def test_all_are_bucketpush_errors(self, exc_type):
        assert issubclass(exc_type, BucketPushError)

    def test_provider_not_found_is_a_configuration_error(self):
        assert issubclass(ProviderNotFoundError, ConfigurationError)
        assert issubclass(ProviderNotFoundError, ProviderError)

    def test_fingerprint_error_is_an_os_error(self):
        assert issubclass(FingerprintError, OSError)


class TestAttributes:
    """Tests for exception messages and attributes."""

    def test_base_error(self):
        err = BucketPushError("boom", details={"a": 1})
        assert str(err) == "boom"
        assert err.message == "boom"
        assert err.details == {"a": 1}
        assert BucketPushError("x").details == {}

    def test_provider_error(self):
        cause = RuntimeError("denied")
        err = ProviderError("upload failed", key="a.txt", cause=cause)
        assert err.key == "a.txt"
        assert err.details == {"key": "a.txt"}
        assert err.__cause__ is cause

    def test_provider_not_found(self):
        err = ProviderNotFoundError("ftp")
        assert str(err) == "ftp is not supported"
        assert err.scheme == "ftp"
        assert err.details == {"scheme": "ftp"}
        assert err.key is None

    def test_fingerprint_error(self):
        cause = PermissionError("Permission denied")
        err = FingerprintError("dist/a.txt", cause=cause)
        assert str(err) == "Cannot fingerprint 'dist/a.txt': Permission denied"
        assert err.path == "dist/a.txt"
        assert err.__cause__ is cause

    def test_catch_with_base_class(self):
        with pytest.raises(BucketPushError):
            raise ProviderNotFoundError("ftp")
