"""Tests for studio.utils.validator."""

import pytest

from studio.state import Attachment, RequestDescription
from studio.utils.validator import validate_feedback, validate_request


class TestValidateRequest:
    def test_valid_goal_is_stripped(self):
        result = validate_request(RequestDescription(goal="  Build a todo app  "))
        assert result.goal == "Build a todo app"

    def test_input_request_untouched(self):
        request = RequestDescription(goal="  padded  ")
        validate_request(request)
        assert request.goal == "  padded  "

    def test_image_only_request_is_valid(self, image_only_request):
        result = validate_request(image_only_request)
        assert result.goal == ""
        assert len(result.attachments) == 1

    def test_empty_request_raises(self):
        with pytest.raises(ValueError, match="goal or at least one attached image"):
            validate_request(RequestDescription(goal=""))

    def test_whitespace_only_goal_raises(self):
        with pytest.raises(ValueError):
            validate_request(RequestDescription(goal="   \n\t  "))

    def test_unknown_tier_raises(self):
        with pytest.raises(ValueError, match="Unknown tier"):
            validate_request(RequestDescription(goal="x", tier="turbo"))

    def test_non_request_raises(self):
        with pytest.raises(ValueError, match="RequestDescription"):
            validate_request("Build a todo app")

    def test_asset_attachment_counts_as_image(self):
        request = RequestDescription(attachments=(Attachment(url="https://a/b.png", role="asset"),))
        assert validate_request(request).attachments[0].role == "asset"


class TestValidateFeedback:
    def test_returns_stripped_text(self):
        assert validate_feedback("  make it blue ") == "make it blue"

    def test_empty_returns_none(self):
        assert validate_feedback("") is None

    def test_whitespace_returns_none(self):
        assert validate_feedback("   ") is None

    def test_non_string_returns_none(self):
        assert validate_feedback(None) is None
