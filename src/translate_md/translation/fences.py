"""
Removal of code fences added by the translation service.

Models often wrap the whole answer in a fenced block. Only a fixed set of
markers, at the very start and end of the text, is recognized.
"""

from __future__ import annotations

FENCE = "```"
# Longest first so "```markdown" is not consumed as "```"
OPENING_FENCES = ("```markdown", "```html", "```md", FENCE)
# Whole lines dropped by remove_fence_lines
FENCE_LINES = frozenset({"```markdown", FENCE})


def strip_code_fences(text: str) -> str:
    """
    Remove a fence pair wrapping the entire text.

    Nested fences that reuse the same delimiter are not detected; in that
    case inner content adjacent to the outer fences may be lost.
    """
    stripped = text.strip()
    for marker in OPENING_FENCES:
        if (
            stripped.startswith(marker)
            and stripped.endswith(FENCE)
            and len(stripped) >= len(marker) + len(FENCE)
        ):
            return stripped[len(marker) : len(stripped) - len(FENCE)].strip()
    return stripped


def remove_fence_lines(text: str) -> str:
    """Drop every line that consists solely of a fence marker."""
    lines = text.split("\n")
    return "\n".join(line for line in lines if line.strip() not in FENCE_LINES)
