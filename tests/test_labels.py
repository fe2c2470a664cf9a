"""Tests for label sanitization and canonical label strings."""

import pytest

from promtail_client.errors import EncodingError
from promtail_client.labels import canonicalize, format_labels, parse_labels, sanitize_key


class TestSanitizeKey:
    def test_valid_key_unchanged(self):
        assert sanitize_key("job_name_1") == "job_name_1"

    def test_invalid_characters_replaced(self):
        assert sanitize_key("app.name-v2/x") == "app_name_v2_x"

    def test_each_character_replaced(self):
        assert sanitize_key("a..b") == "a__b"
        assert sanitize_key("été") == "_t_"

    def test_stable_under_repetition(self):
        key = "k8s.io/app-name"
        once = sanitize_key(key)
        assert sanitize_key(once) == once


class TestFormatLabels:
    def test_canonical_form(self):
        assert format_labels({"job": "api", "env": "prod"}) == '{env="prod",job="api"}'

    def test_order_independent(self):
        assert format_labels({"b": "2", "a": "1"}) == format_labels({"a": "1", "b": "2"})

    def test_keys_sanitized(self):
        assert format_labels({"service.name": "x"}) == '{service_name="x"}'

    def test_values_escaped(self):
        assert format_labels({"msg": 'say "hi"\\'}) == '{msg="say \\"hi\\"\\\\"}'

    def test_empty(self):
        assert format_labels({}) == "{}"


class TestCanonicalize:
    def test_idempotent_on_canonical_string(self):
        canonical = format_labels({"job": "api", "host.name": "web-1", "q": 'a"b'})
        assert canonicalize(canonical) == canonical

    def test_reorders_and_sanitizes_string(self):
        assert canonicalize('{job="api", app-name="x"}') == '{app_name="x",job="api"}'

    def test_parse_round_trip(self):
        labels = {"job": "api", "note": 'quote " and \\ slash'}
        assert parse_labels(format_labels(labels)) == labels

    @pytest.mark.parametrize("text", [
        'job="api"',
        '{job=api}',
        '{job="api" env="x"}',
        '{="x"}',
    ])
    def test_malformed_strings_rejected(self, text):
        with pytest.raises(EncodingError):
            parse_labels(text)


class TestEmptyKeys:
    def test_empty_key_rejected(self):
        with pytest.raises(EncodingError):
            format_labels({"": "x", "job": "a"})

    def test_every_formatted_string_canonicalizes_to_itself(self):
        for labels in ({"job": "a"}, {"-": "dash", "a.b": "c"}, {"k": ""}):
            once = canonicalize(labels)
            assert canonicalize(once) == once
            assert canonicalize(canonicalize(once)) == once
