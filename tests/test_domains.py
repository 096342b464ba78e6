"""Tests for studio.domains."""

import pytest

from studio.domains import DOMAINS, compose_guided_goal, get_domain


class TestGetDomain:
    def test_known_domain(self, mock_config):
        assert get_domain("health").name == "health"

    def test_unknown_falls_back_to_default(self, mock_config):
        assert get_domain("astrology").name == "experiments"

    def test_none_falls_back_to_default(self, mock_config):
        mock_config["default_domain"] = "education"
        assert get_domain(None).name == "education"

    @pytest.mark.parametrize("name", sorted(DOMAINS))
    def test_every_domain_has_prompts_and_instructions(self, name):
        domain = DOMAINS[name]
        assert domain.instruction_template
        assert domain.example_prompts
        assert domain.title


class TestModelFor:
    def test_uses_config_tier_models(self, mock_config):
        assert get_domain("business").model_for("quality") == {
            "provider": "anthropic",
            "model": "claude-sonnet-4-5",
        }

    def test_unknown_tier_raises(self, mock_config):
        with pytest.raises(KeyError):
            get_domain("business").model_for("turbo")


class TestComposeGuidedGoal:
    def test_includes_every_field(self):
        goal = compose_guided_goal(
            "health application",
            purpose="Track water intake",
            theme="dark",
            device_focus="mobile",
            details="Daily goal ring",
            inspiration="Apple Health",
            extra="Metric units",
        )
        assert goal.startswith("Create a health application")
        assert "Purpose: Track water intake" in goal
        assert "Theme: dark" in goal
        assert "mobile-first design" in goal
        assert "Details: Daily goal ring" in goal
        assert "Inspiration: Apple Health" in goal
        assert "Additional Information: Metric units" in goal

    def test_unknown_device_focus_means_both(self):
        goal = compose_guided_goal("app", purpose="x", device_focus="watch")
        assert "responsive design for both mobile and desktop" in goal
