"""Unit tests for payload shape classification."""

import pytest

from contentlab.normalization.classifier import (
    classify,
    extract_error_message,
    is_content_object,
)
from contentlab.normalization.schema import PayloadKind


class TestClassify:
    """Test classification order and outcomes."""

    @pytest.mark.parametrize("value", [[], {}, "", "   \n"])
    def test_empty_values(self, value):
        """Empty arrays, objects and blank strings are EMPTY."""
        assert classify(value) is PayloadKind.EMPTY

    def test_error_field(self):
        """A truthy error field marks an ERROR."""
        assert classify({"error": "workflow failed"}) is PayloadKind.ERROR

    def test_falsy_error_field_ignored(self):
        """An empty error field does not count as an error."""
        assert classify({"error": "", "pillarContent": "x"}) is PayloadKind.STRUCTURED

    def test_message_containing_error(self):
        """A message mentioning error, in any case, marks an ERROR."""
        assert classify({"message": "Internal ERROR occurred"}) is PayloadKind.ERROR

    def test_message_without_error_is_raw(self):
        """A plain message without the marker is not an error."""
        assert classify({"message": "Workflow was started"}) is PayloadKind.RAW_TEXT

    def test_error_checked_before_content(self):
        """A payload with both error and content keys is reported as ERROR."""
        value = {"error": "partial failure", "pillarContent": "Hello"}

        assert classify(value) is PayloadKind.ERROR

    def test_content_object(self):
        """An object with a content key is STRUCTURED."""
        assert classify({"socialMediaPosts": ["a"]}) is PayloadKind.STRUCTURED

    def test_array_of_content_objects(self):
        """An array whose first element is content is STRUCTURED."""
        assert classify([{"emailSeries": []}, {"x": 1}]) is PayloadKind.STRUCTURED

    def test_array_with_non_content_first_element(self):
        """Only the first array element is inspected."""
        assert classify([{"x": 1}, {"pillarContent": "a"}]) is PayloadKind.RAW_TEXT

    def test_workflow_error_string(self):
        """A string reporting a workflow error is ERROR."""
        assert classify("Error in workflow: node failed") is PayloadKind.ERROR

    def test_plain_string_is_raw(self):
        """Unrecognized strings fall back to RAW_TEXT."""
        assert classify("just some text") is PayloadKind.RAW_TEXT

    def test_scalar_is_raw(self):
        """Numbers are neither empty nor content."""
        assert classify(0) is PayloadKind.RAW_TEXT

    def test_raw_string_alias(self):
        """RAW_STRING is an alias of RAW_TEXT."""
        assert PayloadKind.RAW_STRING is PayloadKind.RAW_TEXT


class TestIsContentObject:
    """Test content key detection."""

    @pytest.mark.parametrize(
        "key",
        ["pillarContent", "supportPages", "socialPosts", "emailCampaign", "reasoning"],
    )
    def test_recognized_keys(self, key):
        """Each recognized key marks a content object."""
        assert is_content_object({key: None}) is True

    def test_unrelated_object(self):
        """Objects without content keys are rejected."""
        assert is_content_object({"title": "x"}) is False

    def test_non_object(self):
        """Lists and strings are never content objects."""
        assert is_content_object(["pillarContent"]) is False
        assert is_content_object("pillarContent") is False


class TestExtractErrorMessage:
    """Test error text extraction."""

    def test_string_error(self):
        """A string error field is returned as-is."""
        assert extract_error_message({"error": "workflow failed"}) == "workflow failed"

    def test_nested_error_message(self):
        """An error object's message is preferred."""
        value = {"error": {"message": "timeout", "code": 504}}

        assert extract_error_message(value) == "timeout"

    def test_error_object_without_message(self):
        """Other error objects are rendered as JSON."""
        assert extract_error_message({"error": {"code": 504}}) == '{"code": 504}'

    def test_message_field(self):
        """The message field is used when it carries the marker."""
        assert extract_error_message({"message": "Error: bad input"}) == "Error: bad input"

    def test_workflow_error_string(self):
        """Workflow error strings are returned trimmed."""
        assert extract_error_message("  Error in workflow  ") == "Error in workflow"

    def test_no_error(self):
        """Values without a marker yield None."""
        assert extract_error_message({"pillarContent": "x"}) is None
        assert extract_error_message(["error"]) is None
