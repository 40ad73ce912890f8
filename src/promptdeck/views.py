"""Presentation ports for each screen region, and the data they render."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol

from .models import CATEGORY_LABELS, Prompt
from .routing import list_fragment, prompt_fragment


@dataclass(frozen=True)
class CategorySummary:
    """One landing-page entry."""

    category: str
    label: str
    fragment: str
    count: int


@dataclass(frozen=True)
class PromptCard:
    """One list entry."""

    prompt_id: str
    title: str
    description: str
    fragment: str
    viewed: bool


@dataclass(frozen=True)
class ListPage:
    """Cards of one category, in stored order."""

    category: str
    label: str
    cards: tuple[PromptCard, ...]


@dataclass(frozen=True)
class ModalContent:
    """One opened prompt."""

    prompt_id: str
    title: str
    body_html: str
    theme: str


class LandingView(Protocol):
    def render(self, categories: list[CategorySummary]) -> None: ...

    def clear(self) -> None: ...

    def scroll_to_top(self) -> None: ...


class ListView(Protocol):
    def render(self, page: ListPage) -> None: ...

    def clear(self) -> None: ...

    def scroll_into_view(self) -> None: ...


class ModalView(Protocol):
    def render(self, content: ModalContent) -> None: ...

    def clear(self) -> None: ...

    def reset_scroll(self) -> None: ...


class CopyFeedbackView(Protocol):
    def show_success(self, label: str, message: str) -> None: ...

    def show_error(self, message: str) -> None: ...

    def reset(self, label: str) -> None: ...


@dataclass(frozen=True)
class Views:
    """All screen regions the state machine drives."""

    landing: LandingView
    list: ListView
    modal: ModalView
    feedback: CopyFeedbackView


def build_cards(prompts: Iterable[Prompt], viewed_ids: set[str]) -> tuple[PromptCard, ...]:
    """Build list cards, flagging the ones already viewed."""
    return tuple(
        PromptCard(
            prompt_id=prompt.id,
            title=prompt.title,
            description=prompt.description,
            fragment=prompt_fragment(prompt.id),
            viewed=prompt.id in viewed_ids,
        )
        for prompt in prompts
    )


def build_list_page(category: str, prompts: Iterable[Prompt], viewed_ids: set[str]) -> ListPage:
    return ListPage(category=category, label=CATEGORY_LABELS[category], cards=build_cards(prompts, viewed_ids))


def build_category_summaries(counts: dict[str, int], categories: Iterable[str]) -> list[CategorySummary]:
    return [
        CategorySummary(
            category=category,
            label=CATEGORY_LABELS[category],
            fragment=list_fragment(category),
            count=counts.get(category, 0),
        )
        for category in categories
    ]
