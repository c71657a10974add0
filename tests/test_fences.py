"""Tests for code-fence cleanup."""

import pytest

from translate_md.translation.fences import remove_fence_lines, strip_code_fences


class TestStripCodeFences:
    @pytest.mark.parametrize(
        "text",
        [
            "```markdown\n# Titre\n\nBonjour\n```",
            "```md\n# Titre\n\nBonjour\n```",
            "```\n# Titre\n\nBonjour\n```",
            "  ```markdown\n# Titre\n\nBonjour\n```  \n",
        ],
    )
    def test_removes_wrapping_fence(self, text):
        assert strip_code_fences(text) == "# Titre\n\nBonjour"

    def test_removes_html_fence(self):
        assert strip_code_fences("```html\n<p>Salut</p>\n```") == "<p>Salut</p>"

    def test_leaves_unfenced_text(self):
        text = "# Titre\n\n```python\nprint(1)\n```\n\nFin"

        assert strip_code_fences(text) == text

    def test_requires_both_ends(self):
        assert strip_code_fences("```markdown\n# Titre") == "```markdown\n# Titre"

    def test_trims_whitespace(self):
        assert strip_code_fences("\n  Bonjour \n") == "Bonjour"

    def test_lone_fence_marker_is_kept(self):
        assert strip_code_fences("```") == "```"


class TestRemoveFenceLines:
    def test_drops_fence_only_lines(self):
        text = "```markdown\n# Title\n\nBody\n```\n"

        assert remove_fence_lines(text) == "# Title\n\nBody\n"

    def test_keeps_language_tagged_code_fences(self):
        text = "Intro\n```python\nx = 1\n```\nEnd"

        assert remove_fence_lines(text) == "Intro\n```python\nx = 1\nEnd"

    def test_unchanged_text(self):
        text = "# Title\n\nNo fences here."

        assert remove_fence_lines(text) == text
