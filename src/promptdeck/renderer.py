"""Line-oriented markdown to HTML rendering for prompt bodies.

Only the constructs the prompt documents actually use are supported:
``## `` headings, paragraphs, ``- `` and ``1. `` lists, fenced code blocks,
and short ``Label:`` lines that must stay on their own line. Every piece of
document text is HTML-escaped before it is wrapped in markup.
"""

from __future__ import annotations

import html
import re
from dataclasses import dataclass

FENCE = "```"
ORDERED_ITEM = re.compile(r"^([0-9]+)\.\s+(.+)$")


@dataclass(frozen=True)
class RenderOptions:
    """Tunable rendering rules."""

    # Lines shorter than this that end with ":" become their own paragraph.
    # None turns the rule off.
    label_max_length: int | None = 100

    def is_label(self, stripped: str) -> bool:
        """Return whether a plain text line is a standalone ``Field:`` label."""
        if self.label_max_length is None:
            return False
        return stripped.endswith(":") and len(stripped) < self.label_max_length


DEFAULT_RENDER_OPTIONS = RenderOptions()


def escape_html(text: str) -> str:
    """Escape ``& < > " '`` for safe insertion into markup."""
    return html.escape(text, quote=True)


def render_markdown(text: str, options: RenderOptions = DEFAULT_RENDER_OPTIONS) -> str:
    """Render a prompt document to an HTML fragment.

    The leading ``# Title`` line is dropped because the caller shows the
    title separately. Rendering never fails: open paragraphs, lists, and
    fences are flushed at end of input.
    """
    output: list[str] = []
    paragraph: list[str] = []
    unordered: list[str] = []
    ordered: list[str] = []
    code: list[str] = []
    in_code = False

    def flush_paragraph() -> None:
        if paragraph:
            output.append(f"<p>{escape_html(' '.join(paragraph))}</p>")
            paragraph.clear()

    def flush_unordered() -> None:
        if unordered:
            output.append(f"<ul>{''.join(unordered)}</ul>")
            unordered.clear()

    def flush_ordered() -> None:
        if ordered:
            output.append(f"<ol>{''.join(ordered)}</ol>")
            ordered.clear()

    def flush_all() -> None:
        flush_paragraph()
        flush_unordered()
        flush_ordered()

    def flush_code() -> None:
        body = "\n".join(code)
        output.append(f"<pre><code>{escape_html(body)}</code></pre>")
        code.clear()

    lines = text.replace("\r\n", "\n").split("\n")
    for index, line in enumerate(lines):
        stripped = line.strip()

        if index == 0 and stripped.startswith("# "):
            continue

        if stripped.startswith(FENCE):
            if in_code:
                flush_code()
                in_code = False
            else:
                flush_all()
                in_code = True
            continue

        if in_code:
            code.append(line)
            continue

        if stripped.startswith("## "):
            flush_all()
            output.append(f"<h2>{escape_html(stripped[3:])}</h2>")
            continue

        if not stripped:
            flush_all()
            continue

        if stripped.startswith("- "):
            flush_paragraph()
            flush_ordered()
            unordered.append(f"<li>{escape_html(stripped[2:])}</li>")
            continue

        match = ORDERED_ITEM.match(stripped)
        if match:
            flush_paragraph()
            flush_unordered()
            ordered.append(f"<li>{escape_html(match.group(2))}</li>")
            continue

        # Plain text closes any open list.
        flush_unordered()
        flush_ordered()

        if options.is_label(stripped):
            flush_paragraph()
            output.append(f"<p>{escape_html(stripped)}</p>")
            continue

        paragraph.append(stripped)

    if in_code:
        flush_code()
    flush_all()
    return "".join(output)
