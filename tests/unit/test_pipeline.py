"""Unit tests for the end-to-end normalization pipeline."""

import json
import time

import pytest
from unittest.mock import patch

from contentlab.normalization import (
    ContentBundle,
    NormalizationContext,
    NormalizationPipeline,
    PayloadKind,
    normalize,
    unwrap,
)


def _serialize(bundles: list[ContentBundle]) -> str:
    return json.dumps([bundle.to_payload() for bundle in bundles])


class TestNormalizeScenarios:
    """Test the reference payload shapes."""

    def test_plain_structured_object(self):
        """A plain content object yields one bundle."""
        result = normalize('{"pillarContent":"Hello","socialMediaPosts":["Post A"]}')

        assert result.kind is PayloadKind.STRUCTURED
        assert len(result.bundles) == 1
        bundle = result.bundles[0]
        assert bundle.pillar_content == ["Hello"]
        assert bundle.social_media_posts == ["Post A"]
        assert bundle.support_content == []
        assert bundle.meta_tags == []
        assert bundle.email_series == []

    def test_n8n_wrapped_fenced_block(self):
        """A fenced JSON block inside an n8n output wrapper is unwrapped."""
        raw = r'[{"output":"```json\n{\"pillarContent\":\"Hi\"}\n```"}]'

        result = normalize(raw)

        assert result.kind is PayloadKind.STRUCTURED
        assert result.bundles[0].pillar_content == ["Hi"]

    def test_empty_array(self):
        """An empty array is EMPTY with no bundles."""
        result = normalize("[]")

        assert result.kind is PayloadKind.EMPTY
        assert result.bundles == []

    def test_error_object(self):
        """An error object is ERROR with its message surfaced."""
        result = normalize('{"error":"workflow failed"}')

        assert result.kind is PayloadKind.ERROR
        assert result.error_message == "workflow failed"
        assert result.display_text == "workflow failed"
        assert result.bundles == []

    def test_unstructured_string(self):
        """Plain text is RAW_TEXT and retained verbatim."""
        raw = "just some text, no json here"

        result = normalize(raw)

        assert result.kind is PayloadKind.RAW_STRING
        assert result.raw_text == raw
        assert result.display_text == raw

    def test_over_escaped_fenced_block(self):
        """Escaped quotes and newlines inside a fence are repaired."""
        raw = r'```json\n{\"pillarContent\":\"Hi\"}\n```'

        result = normalize(raw)

        assert result.kind is PayloadKind.STRUCTURED
        assert result.bundles[0].pillar_content == ["Hi"]


class TestNormalizeShapes:
    """Test other accepted input shapes."""

    def test_object_output_wrapper(self):
        """A single-key output object is unwrapped."""
        raw = json.dumps({"output": '{"supportPages": ["How-to"]}'})

        result = normalize(raw)

        assert result.bundles[0].support_content == ["How-to"]

    def test_array_of_bundles(self, sample_bundle_payload):
        """Each content object in an array becomes a bundle."""
        second = {"pillarContent": "Second"}

        result = normalize(json.dumps([sample_bundle_payload, {"note": 1}, second]))

        assert [b.pillar_content for b in result.bundles] == [
            ["The Complete Guide to Hybrid Office Management"],
            ["Second"],
        ]

    def test_parsed_value_accepted(self, sample_bundle_payload):
        """Already-parsed dictionaries are accepted."""
        result = normalize(sample_bundle_payload)

        bundle = result.bundles[0]
        assert bundle.topic_area == "Hybrid Work"
        assert bundle.title == "Hybrid Work"
        assert bundle.email_series[0].subject == "Welcome to hybrid"
        assert json.loads(result.raw_text) == sample_bundle_payload

    def test_bytes_accepted(self):
        """Bytes are decoded as UTF-8."""
        result = normalize('{"pillarContent":"Café"}'.encode("utf-8"))

        assert result.bundles[0].pillar_content == ["Café"]

    def test_workflow_error_string(self):
        """An n8n workflow error string is ERROR."""
        result = normalize('[{"output":"Error in workflow: node 3 failed"}]')

        assert result.kind is PayloadKind.ERROR
        assert result.error_message == "Error in workflow: node 3 failed"

    def test_non_content_json_is_raw(self):
        """JSON without content keys is RAW_TEXT with pretty display text."""
        result = normalize('{"status":"ok"}')

        assert result.kind is PayloadKind.RAW_TEXT
        assert result.display_text == json.dumps({"status": "ok"}, indent=2)

    def test_context_title(self):
        """Context supplies the title when the payload has none."""
        context = NormalizationContext(topic_area="SEO", title="SEO Basics")

        result = normalize('{"pillarContent":"x"}', context)

        assert result.title == "SEO Basics"
        assert result.bundles[0].topic_area == "SEO"

    def test_has_content(self):
        """has_content requires a non-empty content sequence."""
        assert normalize('{"pillarContent":"x"}').has_content is True
        assert normalize('{"reasoning":{"a":"b"}}').has_content is False


class TestUnwrap:
    """Test single-layer unwrapping."""

    def test_depth_limited(self):
        """Only one layer of wrapping is resolved."""
        inner = json.dumps([{"output": '{"pillarContent": "deep"}'}])
        outer = [{"output": inner}]

        assert unwrap(outer) == [{"output": '{"pillarContent": "deep"}'}]

    def test_non_wrapper_unchanged(self):
        """Values that are not wrappers pass through."""
        value = {"output": "x", "other": 1}

        assert unwrap(value) is value

    def test_plain_output_string_returned(self):
        """An unparseable output string is returned as text."""
        assert unwrap([{"output": "hello"}]) == "hello"


class TestNormalizeInvariants:
    """Test idempotence, totality and default-non-null."""

    @pytest.mark.parametrize(
        "raw",
        [
            '{"pillarContent":"Hello","socialMediaPosts":["Post A"]}',
            r'[{"output":"```json\n{\"pillarContent\":\"Hi\"}\n```"}]',
            '{"topicArea":"SEO","emailSeries":["Subject: Hi\\n\\nBody"],"reasoning":"why"}',
            '[{"supportPages":[{"title":"Page"}],"socialMedia":"One post"}]',
        ],
    )
    def test_idempotent(self, raw):
        """Re-normalizing serialized bundles yields equal bundles."""
        first = normalize(raw).bundles

        second = normalize(_serialize(first)).bundles

        assert second == first

    def test_bundle_input_idempotent(self, sample_bundle_payload):
        """Canonical bundles passed directly come back unchanged."""
        bundles = normalize(sample_bundle_payload).bundles

        assert normalize(bundles).bundles == bundles
        assert normalize(bundles[0]).bundles == bundles

    @pytest.mark.parametrize(
        "raw",
        [
            "",
            b"\xff\xfe\x00garbage\x80",
            "[" * 100000,
            '{"a":' * 5000 + "1" + "}" * 5000,
            "```json\n```",
            "null",
        ],
    )
    def test_total(self, raw):
        """normalize never raises for pathological input."""
        result = normalize(raw)

        assert result.kind in set(PayloadKind)

    def test_unclosed_fence_with_long_whitespace(self):
        """An unclosed fence before a long whitespace run stays fast."""
        raw = "```" + " " * 10000
        start = time.perf_counter()

        result = normalize(raw)

        assert time.perf_counter() - start < 1.0
        assert result.kind is PayloadKind.RAW_TEXT
        assert result.raw_text == raw

    def test_self_referential_value(self):
        """Cyclic structures degrade instead of raising."""
        value: dict = {"pillarContent": "x"}
        value["self"] = value

        result = normalize(value)

        assert result.kind is PayloadKind.STRUCTURED

    def test_unexpected_failure_degrades_to_raw_text(self):
        """An internal failure produces RAW_TEXT carrying the input."""
        with patch(
            "contentlab.normalization.pipeline.classify",
            side_effect=RuntimeError("boom"),
        ):
            result = normalize("some input")

        assert result.kind is PayloadKind.RAW_TEXT
        assert result.raw_text == "some input"

    def test_fields_never_null(self):
        """Every bundle field is present in the serialized payload."""
        result = normalize('{"emailSeries": null, "pillarContent": null, "reasoning": null}')

        payload = result.bundles[0].to_payload()
        for key in ("pillarContent", "supportContent", "metaTags", "socialMediaPosts", "emailSeries"):
            assert payload[key] == []
        assert payload["reasoning"] == {}


class TestNormalizationPipeline:
    """Test the context-bound pipeline class."""

    def test_uses_bound_context(self):
        """The bound context fills in missing fields."""
        pipeline = NormalizationPipeline(
            NormalizationContext(topic_area="Hybrid Work", title="Guide")
        )

        result = pipeline.normalize('{"pillarContent":"x"}')

        assert result.title == "Guide"
        assert result.bundles[0].topic_area == "Hybrid Work"

    def test_call_context_overrides(self):
        """A per-call context replaces the bound one."""
        pipeline = NormalizationPipeline(NormalizationContext(title="bound"))

        result = pipeline.normalize("[]", NormalizationContext(title="call"))

        assert result.title == "call"

    def test_records_metric(self):
        """Each call increments the outcome counter."""
        with patch("contentlab.normalization.pipeline.record_normalization") as record:
            NormalizationPipeline().normalize('{"error":"x"}')

        record.assert_called_once_with("error")
