"""View state machine: route changes in, view renders out."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .clipboard import ClipboardExporter
from .models import CATEGORIES, CATEGORY_THEMES, Prompt, PromptCollection
from .renderer import DEFAULT_RENDER_OPTIONS, RenderOptions, render_markdown
from .routing import (
    HashLocation,
    LandingRoute,
    ListRoute,
    ModalRoute,
    Route,
    list_fragment,
    parse_route,
    prompt_fragment,
)
from .scheduler import Scheduler
from .viewed import ViewedTracker
from .views import ModalContent, Views, build_category_summaries, build_list_page

logger = logging.getLogger(__name__)

VIEW_LANDING = "landing"
VIEW_LIST = "list"
VIEW_MODAL = "modal"


@dataclass(frozen=True)
class AppState:
    """Which view is visible, and where it was reached from."""

    view: str = VIEW_LANDING
    category: str | None = None
    prompt_id: str | None = None
    previous_view: str | None = None


def next_state(state: AppState, route: Route | None, collection: PromptCollection) -> AppState | None:
    """Resolve a route against the collection; None means redirect to landing."""
    if isinstance(route, LandingRoute):
        return AppState(view=VIEW_LANDING, previous_view=state.view)
    if isinstance(route, ListRoute):
        return AppState(view=VIEW_LIST, category=route.category, previous_view=state.view)
    if isinstance(route, ModalRoute):
        prompt = collection.find(route.prompt_id)
        if prompt is None:
            return None
        return AppState(view=VIEW_MODAL, category=prompt.category, prompt_id=prompt.id, previous_view=state.view)
    return None


class PromptApp:
    """Owns the application state and drives the views from it."""

    def __init__(
        self,
        collection: PromptCollection,
        views: Views,
        tracker: ViewedTracker,
        exporter: ClipboardExporter,
        scheduler: Scheduler,
        location: HashLocation | None = None,
        render_options: RenderOptions = DEFAULT_RENDER_OPTIONS,
    ) -> None:
        self.collection = collection
        self.views = views
        self.tracker = tracker
        self.exporter = exporter
        self.scheduler = scheduler
        self.location = location if location is not None else HashLocation()
        self.render_options = render_options
        self.state = AppState()
        self.location.subscribe(self.handle_route)

    def start(self) -> None:
        """Handle the initial route."""
        logger.info(
            "Starting with %d prompts (%s mode) at '%s'",
            self.collection.metadata.total_count,
            self.collection.metadata.mode,
            self.location.fragment or "#",
        )
        self.handle_route()

    @property
    def current_prompt(self) -> Prompt | None:
        if self.state.view != VIEW_MODAL or self.state.prompt_id is None:
            return None
        return self.collection.find(self.state.prompt_id)

    def handle_route(self) -> None:
        """React to one "route changed" signal."""
        route = parse_route(self.location.fragment)
        new_state = next_state(self.state, route, self.collection)
        if new_state is None:
            if isinstance(route, ModalRoute):
                logger.warning("Prompt not found: %s", route.prompt_id)
            else:
                logger.warning("Unknown route '%s', redirecting to landing", self.location.fragment)
            self.navigate("#")
            return
        self._enter(new_state)

    def _enter(self, state: AppState) -> None:
        self._hide_all()
        self.state = state
        if state.view == VIEW_LANDING:
            self._show_landing()
        elif state.view == VIEW_LIST and state.category is not None:
            self._show_list(state.category, scroll=state.previous_view != VIEW_MODAL)
        elif state.view == VIEW_MODAL and state.prompt_id is not None:
            prompt = self.collection.find(state.prompt_id)
            if prompt is not None:
                self._show_modal(prompt)

    def _hide_all(self) -> None:
        self.views.landing.clear()
        self.views.list.clear()
        self.views.modal.clear()

    def _show_landing(self) -> None:
        counts = {category: len(self.collection.by_category(category)) for category in CATEGORIES}
        self.views.landing.render(build_category_summaries(counts, CATEGORIES))
        self.views.landing.scroll_to_top()

    def _show_list(self, category: str, *, scroll: bool) -> None:
        viewed = self.tracker.get_viewed()
        self.views.list.render(build_list_page(category, self.collection.by_category(category), viewed))
        # Returning from a modal keeps the reader's place in the list.
        if scroll:
            self.scheduler.defer(self.views.list.scroll_into_view)

    def _show_modal(self, prompt: Prompt) -> None:
        self.tracker.mark_viewed(prompt.id)
        content = ModalContent(
            prompt_id=prompt.id,
            title=prompt.title,
            body_html=render_markdown(prompt.content, self.render_options),
            theme=CATEGORY_THEMES[prompt.category],
        )
        self.exporter.reset()
        self.views.modal.render(content)
        self.scheduler.defer(self.views.modal.reset_scroll)

    def navigate(self, fragment: str) -> None:
        """Change the address fragment; the route handler does the rest."""
        self.location.assign(fragment)

    def go_home(self) -> None:
        self.navigate("#")

    def open_category(self, category: str) -> None:
        self.navigate(list_fragment(category))

    def open_prompt(self, prompt_id: str) -> None:
        self.navigate(prompt_fragment(prompt_id))

    def close_modal(self) -> None:
        """Close the modal by navigating to the list beneath it."""
        self.views.modal.clear()
        prompt = self.current_prompt
        self.navigate(list_fragment(prompt.category) if prompt is not None else "#")

    def press_escape(self) -> None:
        """Escape closes the modal and does nothing elsewhere."""
        if self.state.view == VIEW_MODAL:
            self.close_modal()

    def copy_current_prompt(self) -> bool:
        """Copy the open prompt's raw text; no-op when no modal is open."""
        prompt = self.current_prompt
        if prompt is None:
            return False
        return self.exporter.copy(prompt.content)
