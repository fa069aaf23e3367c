"""Tests for the prompts module."""

import pytest

from voice_identity.utils.prompts import (
    PROMPTS_DIR,
    clear_prompt_cache,
    format_prompt,
    list_prompts,
    load_prompt,
)


class TestLoadPrompt:
    """Tests for load_prompt function."""

    def test_load_existing_prompt(self):
        prompt = load_prompt("editor_line")
        assert prompt.startswith("You are a line editor")
        assert prompt == prompt.strip()

    def test_load_nonexistent_prompt_raises_error(self):
        with pytest.raises(FileNotFoundError):
            load_prompt("nonexistent_prompt_xyz")

    def test_prompt_caching(self):
        """Test that prompts are cached."""
        clear_prompt_cache()
        assert load_prompt("editor_copy") is load_prompt("editor_copy")

    def test_custom_directory(self, tmp_path):
        (tmp_path / "greeting.txt").write_text("  Hello {name}.  \n")
        assert load_prompt("greeting", tmp_path) == "Hello {name}."


class TestFormatPrompt:

    def test_format_with_variables(self):
        prompt = format_prompt("enforcement_drift", mode_rule="Fix only typos.")
        assert "Fix only typos." in prompt
        assert "{mode_rule}" not in prompt

    def test_missing_variable(self):
        with pytest.raises(KeyError):
            format_prompt("enforcement_drift")


class TestListPrompts:

    def test_lists_package_prompts(self):
        prompts = list_prompts()
        for name in ("editor_line", "editor_copy", "editor_developmental",
                     "enforcement_drift", "enforcement_failure"):
            assert name in prompts
            assert prompts[name].parent == PROMPTS_DIR

    def test_missing_directory(self, tmp_path):
        assert list_prompts(tmp_path / "nope") == {}
