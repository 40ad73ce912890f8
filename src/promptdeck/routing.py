"""Fragment-based routes and the address-fragment model."""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass

from .models import ADVISOR, STUDENT, STUDENT_WELLNESS, STUDY_GUIDES

logger = logging.getLogger(__name__)

PROMPT_PREFIX = "prompt/"

LIST_FRAGMENTS: dict[str, str] = {
    STUDENT: "students",
    ADVISOR: "advisors",
    STUDY_GUIDES: "study-guides",
    STUDENT_WELLNESS: "student-wellness",
}
_CATEGORY_BY_FRAGMENT = {fragment: category for category, fragment in LIST_FRAGMENTS.items()}

# Checked in order: "student-wellness-" must win over "student-".
_ID_PREFIXES: tuple[tuple[str, str], ...] = (
    ("student-wellness-", STUDENT_WELLNESS),
    ("student-", STUDENT),
    ("advisor-", ADVISOR),
    ("study-guide-", STUDY_GUIDES),
)


@dataclass(frozen=True)
class LandingRoute:
    """Category picker."""


@dataclass(frozen=True)
class ListRoute:
    """Prompt cards of one category."""

    category: str


@dataclass(frozen=True)
class ModalRoute:
    """One prompt opened over its list."""

    prompt_id: str


Route = LandingRoute | ListRoute | ModalRoute


def normalize_fragment(fragment: str) -> str:
    """Drop the leading ``#``; ``#`` and empty both normalize to ``""``."""
    return fragment[1:] if fragment.startswith("#") else fragment


def parse_route(fragment: str) -> Route | None:
    """Parse an address fragment, returning None for anything unrecognised."""
    value = normalize_fragment(fragment)
    if not value:
        return LandingRoute()
    category = _CATEGORY_BY_FRAGMENT.get(value)
    if category is not None:
        return ListRoute(category)
    if value.startswith(PROMPT_PREFIX):
        prompt_id = value[len(PROMPT_PREFIX) :]
        if prompt_id:
            return ModalRoute(prompt_id)
    return None


def list_fragment(category: str) -> str:
    """Return the ``#fragment`` of a category list."""
    return f"#{LIST_FRAGMENTS[category]}"


def prompt_fragment(prompt_id: str) -> str:
    """Return the ``#fragment`` that opens one prompt."""
    return f"#{PROMPT_PREFIX}{prompt_id}"


def category_for_prompt_id(prompt_id: str) -> str | None:
    """Derive a category from the id prefix convention."""
    for prefix, category in _ID_PREFIXES:
        if prompt_id.startswith(prefix):
            return category
    return None


RouteListener = Callable[[], None]


class HashLocation:
    """Current address fragment plus its "route changed" listeners.

    Assigning a new fragment queues one notification. Notifications are
    delivered one at a time: a listener that navigates again only queues the
    next notification, which runs after the current listener returns.
    """

    def __init__(self, fragment: str = "") -> None:
        self._fragment = normalize_fragment(fragment)
        self._listeners: list[RouteListener] = []
        self._pending: deque[None] = deque()
        self._dispatching = False

    @property
    def fragment(self) -> str:
        """Return the fragment with its ``#``, or ``""`` for the landing page."""
        return f"#{self._fragment}" if self._fragment else ""

    def subscribe(self, listener: RouteListener) -> None:
        self._listeners.append(listener)

    def assign(self, fragment: str) -> None:
        """Navigate; assigning the current fragment again is a no-op."""
        value = normalize_fragment(fragment)
        if value == self._fragment:
            return
        logger.debug("Navigating from #%s to #%s", self._fragment, value)
        self._fragment = value
        self.notify()

    def notify(self) -> None:
        """Deliver a "route changed" signal, queueing it if one is in flight."""
        self._pending.append(None)
        if self._dispatching:
            return
        self._dispatching = True
        try:
            while self._pending:
                self._pending.popleft()
                for listener in list(self._listeners):
                    listener()
        finally:
            self._dispatching = False
            self._pending.clear()
