"""Display sanitization.

Content is stored exactly as written; markup is stripped only when a comment
is prepared for display.
"""

import html
import re

_SCRIPT_RE = re.compile(r"<(script|style)\b[^>]*>.*?</\1\s*>", re.IGNORECASE | re.DOTALL)
_TAG_RE = re.compile(r"<[^>]*>")


def sanitize_text(content: str) -> str:
    """Reduce comment content to plain text.

    Drops script/style blocks with their bodies, removes every remaining tag
    and decodes entities.

    Args:
        content: Raw comment content

    Returns:
        Plain text safe to render as text
    """
    without_blocks = _SCRIPT_RE.sub("", content)
    return html.unescape(_TAG_RE.sub("", without_blocks))
