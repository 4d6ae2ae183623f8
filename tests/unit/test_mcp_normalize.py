"""Unit tests for tool argument normalization."""

import pytest

from foodieai.config import config
from foodieai.mcp.normalize import clamp_limit, normalize_arguments, normalize_unit


class TestNormalizeUnit:
    """Unit synonyms."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("гр", "g"),
            ("Гр.", "g"),
            ("grams", "g"),
            ("кг", "kg"),
            ("мл", "ml"),
            ("литр", "l"),
            ("шт", "pcs"),
            ("piece", "pcs"),
            ("tbsp", "tbsp"),
        ],
    )
    def test_synonyms(self, raw, expected):
        """Test localized and English spellings map to canonical codes."""
        assert normalize_unit(raw) == expected

    def test_blank_is_none(self):
        """Test empty units become None."""
        assert normalize_unit("  ") is None
        assert normalize_unit(None) is None


class TestNormalizeArguments:
    """Per-tool clean-up."""

    def test_add_ingredient(self):
        """Test unit and name clean-up without touching the input."""
        args = {"draftId": "d1", "ingredient": {"name": "  red   onion ", "unit": "ГР"}}

        result = normalize_arguments("recipeDraft.addIngredient", args)

        assert result["ingredient"] == {"name": "red onion", "unit": "g"}
        assert args["ingredient"]["unit"] == "ГР"

    def test_set_steps_trimmed(self):
        """Test steps are stripped."""
        result = normalize_arguments("recipeDraft.setSteps", {"draftId": "d1", "steps": [" Beat ", "Cook"]})

        assert result["steps"] == ["Beat", "Cook"]

    def test_search_limit_clamped(self, monkeypatch):
        """Test oversized limits are capped for search tools only."""
        monkeypatch.setattr(config, "SEARCH_MAX_LIMIT", 50)

        assert normalize_arguments("product.search", {"limit": 500})["limit"] == 50
        assert normalize_arguments("recipe.search", {"limit": 10})["limit"] == 10
        assert normalize_arguments("recipeDraft.get", {"limit": 500})["limit"] == 500

    def test_clamp_ignores_non_numbers(self):
        """Test None and bools are left alone."""
        assert clamp_limit(None) is None
        assert clamp_limit(True) is True
