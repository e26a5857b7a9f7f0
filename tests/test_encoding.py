"""
Tests for the encoding planner.
"""

import re

import pytest

from bucketpush.core.encoding import EncodingOptions, normalize_encoding, plan_encodings
from bucketpush.exceptions import ConfigurationError
from bucketpush.types import EncodingVariant


class TestEncodingOptions:
    """Tests for EncodingOptions construction and matching."""

    def test_defaults(self):
        options = EncodingOptions()
        assert options.content_encodings == ("gzip", "br")
        assert options.file_extensions == ()
        assert options.mime_types == ()
        assert options.min_file_size == 0

    def test_single_strings_become_tuples(self):
        options = EncodingOptions(content_encodings="gzip", file_extensions="js", mime_types="text/html")
        assert options.content_encodings == ("gzip",)
        assert options.file_extensions == ("js",)
        assert options.mime_types == ("text/html",)

    def test_unknown_encoding_rejected(self):
        with pytest.raises(ConfigurationError, match="Unsupported content encodings"):
            EncodingOptions(content_encodings=["zstd"])

    def test_negative_min_size_rejected(self):
        with pytest.raises(ConfigurationError, match="min_file_size"):
            EncodingOptions(min_file_size=-1)

    def test_extension_with_or_without_dot(self):
        options = EncodingOptions(file_extensions=["js", ".css", "d.ts"])
        assert options.matches_extension("app.js")
        assert options.matches_extension("site/main.css")
        assert options.matches_extension("types/index.d.ts")
        assert not options.matches_extension("x.ts")
        assert not options.matches_extension("appjs")

    def test_mime_type_exact_wildcard_and_regex(self):
        options = EncodingOptions(mime_types=["application/json", "text/*", re.compile(r"image/svg\+xml")])
        assert options.matches_mime_type("application/json")
        assert options.matches_mime_type("text/css")
        assert options.matches_mime_type("image/svg+xml")
        assert not options.matches_mime_type("image/png")
        assert not options.matches_mime_type(None)

    def test_from_dict_accepts_camel_case(self):
        options = EncodingOptions.from_dict(
            {"contentEncodings": ["br"], "fileExtensions": ["html"], "mimeTypes": ["text/css"], "minFileSize": 10}
        )
        assert options == EncodingOptions(
            content_encodings=("br",), file_extensions=("html",), mime_types=("text/css",), min_file_size=10
        )

    def test_from_dict_rejects_unknown_keys(self):
        with pytest.raises(ConfigurationError, match="Unknown encoding option: level"):
            EncodingOptions.from_dict({"level": 9})


class TestPlanEncodings:
    """Tests for plan_encodings."""

    def test_no_config_is_raw_only(self):
        assert plan_encodings("a.js", 100, "text/javascript") == [EncodingVariant("a.js", "raw")]

    def test_matching_file_gets_encoded_variants_then_raw(self):
        plan = plan_encodings("a.js", 100, "text/javascript", EncodingOptions(file_extensions=["js"]))
        assert plan == [
            EncodingVariant("a.js.gz", "gzip"),
            EncodingVariant("a.js.br", "br"),
            EncodingVariant("a.js", "raw"),
        ]

    def test_non_matching_file_is_raw_only(self):
        plan = plan_encodings("a.png", 100, "image/png", EncodingOptions(file_extensions=["js"]))
        assert plan == [EncodingVariant("a.png", "raw")]

    def test_below_min_size_is_raw_only(self):
        options = EncodingOptions(file_extensions=["js"], min_file_size=1024)
        assert plan_encodings("a.js", 1023, "text/javascript", options) == [EncodingVariant("a.js", "raw")]
        assert len(plan_encodings("a.js", 1024, "text/javascript", options)) == 3

    def test_raw_listed_in_encodings_is_not_duplicated(self):
        options = EncodingOptions(content_encodings=["raw", "gzip", "gzip"], file_extensions=["js"])
        plan = plan_encodings("a.js", 1, "text/javascript", options)
        assert plan == [EncodingVariant("a.js.gz", "gzip"), EncodingVariant("a.js", "raw")]

    def test_mapping_config(self):
        plan = plan_encodings("a.json", 1, "application/json", {"content_encodings": ["br"], "mime_types": ["*/json"]})
        assert [v.dest_file_name for v in plan] == ["a.json.br", "a.json"]

    def test_function_returning_none_is_raw_only(self):
        assert plan_encodings("a.js", 1, "text/javascript", lambda *args: None) == [EncodingVariant("a.js", "raw")]

    def test_function_variants_are_coerced(self):
        def encoding(dest_key, file_size, mime_type):
            return [
                EncodingVariant(dest_key + ".gz", "gzip"),
                {"destFileName": dest_key + ".br", "encoding": "br"},
                (dest_key, "raw"),
            ]

        plan = plan_encodings("a.js", 1, "text/javascript", encoding)
        assert plan == [
            EncodingVariant("a.js.gz", "gzip"),
            EncodingVariant("a.js.br", "br"),
            EncodingVariant("a.js", "raw"),
        ]

    def test_function_invalid_variant(self):
        with pytest.raises(ConfigurationError, match="invalid variant"):
            plan_encodings("a.js", 1, "text/javascript", lambda *args: ["a.js"])

    def test_function_missing_name(self):
        with pytest.raises(ConfigurationError, match="missing a destination name"):
            plan_encodings("a.js", 1, "text/javascript", lambda *args: [{"encoding": "gzip"}])

    def test_content_encoding_property(self):
        assert EncodingVariant("a", "raw").content_encoding is None
        assert EncodingVariant("a.gz", "gzip").content_encoding == "gzip"
        assert EncodingVariant("a.br", "br").content_encoding == "br"


class TestNormalizeEncoding:
    """Tests for normalize_encoding."""

    def test_passthrough(self):
        options = EncodingOptions()
        assert normalize_encoding(None) is None
        assert normalize_encoding(options) is options

    def test_invalid_type(self):
        with pytest.raises(ConfigurationError, match="Invalid encoding configuration"):
            normalize_encoding(42)
