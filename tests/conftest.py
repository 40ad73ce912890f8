from __future__ import annotations

import shutil
import sys
from collections.abc import Iterator
from pathlib import Path
from uuid import uuid4

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from promptdeck.models import CATEGORIES, CollectionMetadata, Prompt, PromptCollection  # noqa: E402
from promptdeck.views import CategorySummary, ListPage, ModalContent, Views  # noqa: E402


def _tmp_path_fixture() -> Iterator[Path]:
    """Per-test scratch directory kept under the project at ``.tmp_pytest/``."""
    base = ROOT / ".tmp_pytest"
    base.mkdir(parents=True, exist_ok=True)
    path = base / str(uuid4())
    path.mkdir(parents=True, exist_ok=False)
    try:
        yield path
    finally:
        shutil.rmtree(path, ignore_errors=True)
        try:
            next(base.iterdir())
        except StopIteration:
            base.rmdir()
        except FileNotFoundError:
            pass


tmp_path = pytest.fixture(name="tmp_path")(_tmp_path_fixture)


def make_prompt(prompt_id: str, category: str, content: str = "# Title\n\nBody.", **overrides: str) -> Prompt:
    values = {
        "id": prompt_id,
        "filename": f"{prompt_id}.md",
        "title": "Title",
        "description": "",
        "category": category,
        "content": content,
    }
    values.update(overrides)
    return Prompt(**values)


def make_collection(prompts: list[Prompt]) -> PromptCollection:
    grouped = {category: tuple(p for p in prompts if p.category == category) for category in CATEGORIES}
    counts = {category: len(items) for category, items in grouped.items()}
    metadata = CollectionMetadata(
        total_count=len(prompts), category_counts=counts, generated_at="2025-10-01T00:00:00+00:00"
    )
    return PromptCollection(prompts=grouped, metadata=metadata)


@pytest.fixture
def collection() -> PromptCollection:
    return make_collection(
        [
            make_prompt("student-1", "student", "# Study Plan\n\nPlan your week.", title="Study Plan"),
            make_prompt("student-2", "student", "# Resume Help\n\n- one\n- two", title="Resume Help"),
            make_prompt("advisor-1", "advisor", "# Advising\n\nPrepare.", title="Advising"),
            make_prompt("study-guide-1", "study-guides", "# Guide\n\nRead.", title="Guide"),
            make_prompt(
                "student-wellness-1",
                "student-wellness",
                "# Mind Reset\n\nTake 5 minutes to breathe.\n",
                title="Mind Reset",
            ),
        ]
    )


class RecordingLanding:
    def __init__(self) -> None:
        self.visible = False
        self.renders: list[list[CategorySummary]] = []
        self.scrolls = 0

    def render(self, categories: list[CategorySummary]) -> None:
        self.visible = True
        self.renders.append(categories)

    def clear(self) -> None:
        self.visible = False

    def scroll_to_top(self) -> None:
        self.scrolls += 1


class RecordingList:
    def __init__(self) -> None:
        self.visible = False
        self.renders: list[ListPage] = []
        self.scrolls = 0

    def render(self, page: ListPage) -> None:
        self.visible = True
        self.renders.append(page)

    def clear(self) -> None:
        self.visible = False

    def scroll_into_view(self) -> None:
        self.scrolls += 1


class RecordingModal:
    def __init__(self) -> None:
        self.visible = False
        self.renders: list[ModalContent] = []
        self.scroll_resets = 0

    def render(self, content: ModalContent) -> None:
        self.visible = True
        self.renders.append(content)

    def clear(self) -> None:
        self.visible = False

    def reset_scroll(self) -> None:
        self.scroll_resets += 1


class RecordingFeedback:
    def __init__(self) -> None:
        self.state = "idle"
        self.label = "Copy Prompt"
        self.message = ""
        self.events: list[str] = []

    def show_success(self, label: str, message: str) -> None:
        self.state = "success"
        self.label = label
        self.message = message
        self.events.append("success")

    def show_error(self, message: str) -> None:
        self.state = "error"
        self.message = message
        self.events.append("error")

    def reset(self, label: str) -> None:
        self.state = "idle"
        self.label = label
        self.message = ""
        self.events.append("reset")


class FakeClock:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def views() -> Views:
    return Views(landing=RecordingLanding(), list=RecordingList(), modal=RecordingModal(), feedback=RecordingFeedback())
