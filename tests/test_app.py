from conftest import make_collection, make_prompt

from promptdeck.app import VIEW_LANDING, VIEW_LIST, VIEW_MODAL, AppState, PromptApp, next_state
from promptdeck.clipboard import COPIED_LABEL, IDLE_LABEL, ClipboardError, ClipboardExporter
from promptdeck.routing import HashLocation, ListRoute, ModalRoute
from promptdeck.scheduler import Scheduler
from promptdeck.storage import MemoryStorage
from promptdeck.viewed import ViewedTracker


class FakeClipboard:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.copied: list[str] = []

    def __call__(self, text: str) -> None:
        if self.fail:
            raise ClipboardError("denied")
        self.copied.append(text)


def _app(collection, views, clock, fragment: str = "", clipboard: FakeClipboard | None = None):
    scheduler = Scheduler(clock)
    writer = clipboard or FakeClipboard()
    exporter = ClipboardExporter(views.feedback, scheduler, writer, FakeClipboard())
    tracker = ViewedTracker(MemoryStorage())
    app = PromptApp(collection, views, tracker, exporter, scheduler, HashLocation(fragment))
    return app, scheduler, writer


def test_start_without_fragment_shows_landing(collection, views, clock) -> None:
    app, _, _ = _app(collection, views, clock)
    app.start()

    assert app.state.view == VIEW_LANDING
    assert views.landing.visible is True
    assert views.list.visible is False
    assert views.modal.visible is False
    summaries = views.landing.renders[-1]
    assert [(s.label, s.count, s.fragment) for s in summaries] == [
        ("Students", 2, "#students"),
        ("Advisors", 1, "#advisors"),
        ("Study Guides", 1, "#study-guides"),
        ("Student Wellness", 1, "#student-wellness"),
    ]
    assert views.landing.scrolls == 1


def test_deep_link_opens_modal_with_rendered_prompt(collection, views, clock) -> None:
    app, scheduler, _ = _app(collection, views, clock, "#prompt/student-wellness-1")
    app.start()

    assert app.state.view == VIEW_MODAL
    content = views.modal.renders[-1]
    assert content.title == "Mind Reset"
    assert content.body_html == "<p>Take 5 minutes to breathe.</p>"
    assert content.theme == "student-wellness-theme"
    assert "student-wellness-1" in app.tracker.get_viewed()
    assert views.landing.visible is False

    assert views.modal.scroll_resets == 0
    scheduler.run_due()
    assert views.modal.scroll_resets == 1


def test_unknown_prompt_redirects_to_landing(collection, views, clock) -> None:
    app, _, _ = _app(collection, views, clock, "#prompt/does-not-exist")
    app.start()

    assert app.state.view == VIEW_LANDING
    assert app.location.fragment == ""
    assert views.landing.visible is True
    assert views.modal.visible is False
    assert views.modal.renders == []


def test_unknown_fragment_redirects_to_landing(collection, views, clock) -> None:
    app, _, _ = _app(collection, views, clock)
    app.start()
    app.navigate("#nowhere")
    assert app.state.view == VIEW_LANDING
    assert app.location.fragment == ""


def test_list_shows_cards_with_viewed_markers(collection, views, clock) -> None:
    app, _, _ = _app(collection, views, clock)
    app.tracker.mark_viewed("student-2")
    app.start()
    app.open_category("student")

    page = views.list.renders[-1]
    assert page.label == "Students"
    assert [(card.prompt_id, card.viewed) for card in page.cards] == [("student-1", False), ("student-2", True)]
    assert page.cards[0].fragment == "#prompt/student-1"
    assert app.tracker.get_viewed() == {"student-2"}


def test_empty_category_renders_empty_list(views, clock) -> None:
    collection = make_collection([make_prompt("student-1", "student")])
    app, _, _ = _app(collection, views, clock, "#advisors")
    app.start()
    assert app.state.view == VIEW_LIST
    assert views.list.renders[-1].cards == ()


def test_list_scroll_is_deferred_but_skipped_after_modal(collection, views, clock) -> None:
    app, scheduler, _ = _app(collection, views, clock)
    app.start()

    app.open_category("student")
    assert views.list.scrolls == 0
    scheduler.run_due()
    assert views.list.scrolls == 1

    app.open_prompt("student-1")
    scheduler.run_due()
    app.close_modal()
    scheduler.run_due()
    assert app.state.view == VIEW_LIST
    assert views.list.scrolls == 1


def test_only_one_view_visible_at_a_time(collection, views, clock) -> None:
    app, _, _ = _app(collection, views, clock)
    app.start()
    for fragment in ("#students", "#prompt/advisor-1", "#", "#study-guides"):
        app.navigate(fragment)
        visible = [views.landing.visible, views.list.visible, views.modal.visible]
        assert visible.count(True) == 1


def test_close_modal_returns_to_prompt_category(collection, views, clock) -> None:
    app, _, _ = _app(collection, views, clock, "#prompt/advisor-1")
    app.start()
    app.close_modal()

    assert app.location.fragment == "#advisors"
    assert app.state == AppState(view=VIEW_LIST, category="advisor", previous_view=VIEW_MODAL)
    assert views.modal.visible is False
    assert views.list.visible is True


def test_escape_only_acts_in_modal(collection, views, clock) -> None:
    app, _, _ = _app(collection, views, clock, "#students")
    app.start()
    app.press_escape()
    assert app.state.view == VIEW_LIST
    assert app.location.fragment == "#students"

    app.open_prompt("student-2")
    app.press_escape()
    assert app.state.view == VIEW_LIST
    assert app.state.category == "student"


def test_copy_sends_raw_markdown(collection, views, clock) -> None:
    app, scheduler, clipboard = _app(collection, views, clock, "#prompt/student-wellness-1")
    app.start()

    assert app.copy_current_prompt() is True
    assert clipboard.copied == ["# Mind Reset\n\nTake 5 minutes to breathe.\n"]
    assert views.feedback.label == COPIED_LABEL

    clock.advance(5.0)
    scheduler.run_due()
    assert views.feedback.state == "idle"
    assert views.feedback.label == IDLE_LABEL


def test_copy_failure_shows_error(collection, views, clock) -> None:
    app, _, _ = _app(collection, views, clock, "#prompt/student-1", clipboard=FakeClipboard(fail=True))
    app.start()
    assert app.copy_current_prompt() is False
    assert views.feedback.state == "error"


def test_copy_outside_modal_is_noop(collection, views, clock) -> None:
    app, _, clipboard = _app(collection, views, clock, "#students")
    app.start()
    assert app.copy_current_prompt() is False
    assert clipboard.copied == []
    assert "success" not in views.feedback.events


def test_opening_modal_resets_copy_feedback(collection, views, clock) -> None:
    app, scheduler, _ = _app(collection, views, clock, "#prompt/student-1")
    app.start()
    app.copy_current_prompt()
    assert views.feedback.state == "success"

    app.open_prompt("student-2")
    assert views.feedback.state == "idle"
    assert views.feedback.label == IDLE_LABEL
    clock.advance(10.0)
    scheduler.run_due()
    assert views.feedback.events[-1] == "reset"
    assert views.feedback.events.count("success") == 1


def test_next_state_resolves_routes(collection) -> None:
    state = AppState()
    assert next_state(state, ListRoute("advisor"), collection) == AppState(
        view=VIEW_LIST, category="advisor", previous_view=VIEW_LANDING
    )
    assert next_state(state, ModalRoute("missing"), collection) is None
    assert next_state(state, None, collection) is None
    modal = next_state(state, ModalRoute("study-guide-1"), collection)
    assert modal is not None
    assert modal.category == "study-guides"
