"""Terminal rendering of the landing page, lists, modal, and copy feedback."""

from __future__ import annotations

import textwrap
from collections.abc import Callable
from html.parser import HTMLParser

from .views import CategorySummary, ListPage, ModalContent

PrintFn = Callable[[str], None]

WRAP_WIDTH = 78
VIEWED_MARK = "✓"


class _HtmlTextFormatter(HTMLParser):
    """Turn renderer output back into readable plain text."""

    def __init__(self, width: int) -> None:
        super().__init__(convert_charrefs=True)
        self.width = width
        self.blocks: list[str] = []
        self._text: list[str] = []
        self._list_stack: list[list[int]] = []
        self._in_pre = False

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        if tag == "ul":
            self._list_stack.append([0, 0])
        elif tag == "ol":
            self._list_stack.append([1, 0])
        elif tag == "pre":
            self._in_pre = True
        self._text.clear()

    def handle_endtag(self, tag: str) -> None:
        text = "".join(self._text)
        self._text.clear()
        if tag == "h2":
            self.blocks.append(text.upper())
        elif tag == "p":
            self.blocks.append(textwrap.fill(text, self.width))
        elif tag == "li" and self._list_stack:
            ordered, count = self._list_stack[-1]
            self._list_stack[-1][1] = count + 1
            marker = f"{count + 1}. " if ordered else "- "
            item = textwrap.fill(text, self.width, initial_indent=marker, subsequent_indent=" " * len(marker))
            self.blocks.append(item)
        elif tag in ("ul", "ol") and self._list_stack:
            self._list_stack.pop()
        elif tag == "code" and self._in_pre:
            self.blocks.append(textwrap.indent(text, "    ", lambda line: True))
        elif tag == "pre":
            self._in_pre = False

    def handle_data(self, data: str) -> None:
        self._text.append(data)


def html_to_text(fragment: str, width: int = WRAP_WIDTH) -> str:
    """Format a rendered prompt body for the terminal."""
    formatter = _HtmlTextFormatter(width)
    formatter.feed(fragment)
    formatter.close()
    return "\n\n".join(block for block in formatter.blocks if block)


class TerminalLandingView:
    def __init__(self, print_fn: PrintFn = print) -> None:
        self._print = print_fn
        self.visible = False
        self.categories: list[CategorySummary] = []

    def render(self, categories: list[CategorySummary]) -> None:
        self.visible = True
        self.categories = list(categories)
        self._print("\n=== Prompt Library ===")
        for idx, summary in enumerate(self.categories, start=1):
            self._print(f"{idx}) {summary.label} ({summary.count})")
        self._print("q) Quit")

    def clear(self) -> None:
        self.visible = False

    def scroll_to_top(self) -> None:
        """Nothing to scroll in a terminal."""


class TerminalListView:
    def __init__(self, print_fn: PrintFn = print) -> None:
        self._print = print_fn
        self.visible = False
        self.page: ListPage | None = None

    def render(self, page: ListPage) -> None:
        self.visible = True
        self.page = page
        self._print(f"\n=== {page.label} ===")
        if not page.cards:
            self._print("No prompts in this category yet.")
        for idx, card in enumerate(page.cards, start=1):
            mark = f" {VIEWED_MARK}" if card.viewed else ""
            self._print(f"{idx:>2}) {card.title}{mark}")
            if card.description:
                self._print(f"    {card.description}")
        self._print("b) Back")
        self._print("q) Quit")

    def clear(self) -> None:
        self.visible = False

    def scroll_into_view(self) -> None:
        """Nothing to scroll in a terminal."""


class TerminalModalView:
    def __init__(self, print_fn: PrintFn = print, width: int = WRAP_WIDTH) -> None:
        self._print = print_fn
        self._width = width
        self.visible = False
        self.content: ModalContent | None = None

    def render(self, content: ModalContent) -> None:
        self.visible = True
        self.content = content
        self._print(f"\n=== {content.title} ===")
        self._print(f"[{content.theme}]")
        body = html_to_text(content.body_html, self._width)
        if body:
            self._print(body)
        self._print("")
        self._print("c) Copy prompt")
        self._print("x) Close")
        self._print("q) Quit")

    def clear(self) -> None:
        self.visible = False

    def reset_scroll(self) -> None:
        """Nothing to scroll in a terminal."""


class TerminalCopyFeedback:
    def __init__(self, print_fn: PrintFn = print) -> None:
        self._print = print_fn
        self.label = ""
        self.message = ""
        self.is_error = False

    def show_success(self, label: str, message: str) -> None:
        self.label = label
        self.message = message
        self.is_error = False
        self._print(f"{label} {message}")

    def show_error(self, message: str) -> None:
        self.message = message
        self.is_error = True
        self._print(message)

    def reset(self, label: str) -> None:
        self.label = label
        self.message = ""
        self.is_error = False
