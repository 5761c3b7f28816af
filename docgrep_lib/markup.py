"""
Markup - Reduce HTML-like documents to searchable plain text.

Stripping is a fixed sequence of regular-expression passes, not a DOM parse:

1. <br> tags become newlines
2. blocks opened by each configured tag are deleted, up to the next </script>
3. all remaining tags are deleted, keeping their text
4. whitespace runs collapse to a single space
5. HTML entities are decoded

Entities are decoded last so decoded text (e.g. "&lt;b&gt;") is never
mistaken for a tag.
"""

import html
import re
from functools import lru_cache

# Tag blocks to delete, per markup extension
MARKUP_STRIP_RULES = {
    "html": ("head", "script"),
    "htm": ("head", "script"),
    "xrtm": ("head", "script", "scalable_block"),
}

# Used for markup extensions without an entry in MARKUP_STRIP_RULES
DEFAULT_STRIP_TAGS = ("head", "script")

# Every stripped block ends at the next </script>, whatever tag opened it.
BLOCK_CLOSE = r"<\/script>"

LINE_BREAK_RE = re.compile(r"<br[^>]*>")
TAG_RE = re.compile(r"<[^>]+>")
WHITESPACE_RE = re.compile(r"\s+")


@lru_cache(maxsize=32)
def _block_re(tag: str) -> re.Pattern:
    return re.compile(rf"<{re.escape(tag)}[^>]*>(.*?){BLOCK_CLOSE}")


def tags_for_extension(ext: str) -> tuple[str, ...]:
    """
    Return the tag blocks stripped for a markup extension.

    Args:
        ext: Extension with or without the leading dot, any case

    Returns:
        Tuple of tag names
    """
    return MARKUP_STRIP_RULES.get(ext.lower().lstrip("."), DEFAULT_STRIP_TAGS)


def strip_markup(markup: str, delete_tags=DEFAULT_STRIP_TAGS) -> str:
    """
    Convert markup to plain text.

    Args:
        markup: Raw document text
        delete_tags: Tag names whose whole block is removed

    Returns:
        Plain text with entities decoded and whitespace collapsed
    """
    text = LINE_BREAK_RE.sub("\n", markup)

    for tag in delete_tags:
        text = _block_re(tag).sub("", text)

    text = TAG_RE.sub("", text)
    text = WHITESPACE_RE.sub(" ", text)

    return html.unescape(text)
