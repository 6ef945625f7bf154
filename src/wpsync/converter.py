"""Markdown to HTML conversion for wpsync."""

import html
import re

from markdown_it import MarkdownIt
from mdit_py_plugins.footnote import footnote_plugin
from mdit_py_plugins.tasklists import tasklists_plugin

from wpsync.utils import get_logger

UNTITLED = "Untitled"

# optional closing sequence of an ATX heading, e.g. "## Title ##"
CLOSING_HASHES_RE = re.compile(r"(^|\s)#+\s*$")


def _build_renderer(options: dict) -> MarkdownIt:
    """Configure a CommonMark renderer from markdown options."""
    md = MarkdownIt("commonmark", {"html": options.get("html", True)})
    if options.get("tables", True):
        md.enable("table")
    if options.get("strikethrough", True):
        md.enable("strikethrough")
    if options.get("footnotes", False):
        md.use(footnote_plugin)
    if options.get("tasklists", False):
        md.use(tasklists_plugin, label=True)
    return md


def markdown_to_html(markdown: str, options: dict | None = None) -> str:
    """Convert Markdown to HTML.

    Rendering is best effort and never raises: malformed Markdown is
    rendered as far as the parser allows.

    Args:
        markdown: Markdown text.
        options: Rendering options:
            - html: Pass raw HTML through
            - tables: GFM tables
            - strikethrough: ~~text~~
            - footnotes: [^1] footnotes
            - tasklists: - [ ] checkboxes

    Returns:
        HTML string, empty for blank input.
    """
    logger = get_logger()

    if not markdown.strip():
        return ""

    try:
        return _build_renderer(options or {}).render(markdown)
    except Exception as e:
        logger.warning(f"Error during markdown conversion: {e}")
        # Fallback to escaped paragraphs
        paragraphs = [p.strip() for p in markdown.split("\n\n") if p.strip()]
        return "".join(f"<p>{html.escape(p)}</p>\n" for p in paragraphs)


def split_title_and_content(markdown: str, options: dict | None = None) -> tuple[str, str]:
    """Split a Markdown document into a title and rendered HTML body.

    The first line is the title with the leading heading marker and any
    closing "#" sequence stripped. A "#" that ends a word, as in "C#", is
    kept. Everything after it is rendered as the body.

    Examples:
        "# Hello World\\nBody text" -> ("Hello World", "<p>Body text</p>\\n")
        "# Title" -> ("Title", "")

    Args:
        markdown: Markdown document.
        options: Rendering options passed to markdown_to_html.

    Returns:
        Tuple of (title, content_html).
    """
    text = markdown.lstrip("\ufeff").replace("\r\n", "\n")
    first_line, _, body = text.partition("\n")

    title = first_line.strip().lstrip("#")
    title = CLOSING_HASHES_RE.sub("", title).strip() or UNTITLED

    return title, markdown_to_html(body, options)
