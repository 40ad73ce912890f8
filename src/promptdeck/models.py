"""Core domain models for the prompt collection."""

from __future__ import annotations

from dataclasses import dataclass, field

STUDENT = "student"
ADVISOR = "advisor"
STUDY_GUIDES = "study-guides"
STUDENT_WELLNESS = "student-wellness"

# Display order on the landing page.
CATEGORIES: tuple[str, ...] = (STUDENT, ADVISOR, STUDY_GUIDES, STUDENT_WELLNESS)

CATEGORY_LABELS: dict[str, str] = {
    STUDENT: "Students",
    ADVISOR: "Advisors",
    STUDY_GUIDES: "Study Guides",
    STUDENT_WELLNESS: "Student Wellness",
}

CATEGORY_THEMES: dict[str, str] = {
    STUDENT: "student-theme",
    ADVISOR: "advisor-theme",
    STUDY_GUIDES: "study-guides-theme",
    STUDENT_WELLNESS: "student-wellness-theme",
}

# Keys of the per-category counts in the aggregate document's metadata block.
CATEGORY_COUNT_KEYS: dict[str, str] = {
    STUDENT: "studentCount",
    ADVISOR: "advisorCount",
    STUDY_GUIDES: "studyGuidesCount",
    STUDENT_WELLNESS: "studentWellnessCount",
}


@dataclass(frozen=True)
class Prompt:
    """One curated prompt document."""

    id: str
    filename: str
    title: str
    description: str
    category: str
    content: str


@dataclass(frozen=True)
class CollectionMetadata:
    """Summary emitted alongside the prompt records."""

    total_count: int
    category_counts: dict[str, int]
    generated_at: str
    mode: str = "production"


@dataclass(frozen=True)
class PromptCollection:
    """All prompts keyed by category, in display order."""

    prompts: dict[str, tuple[Prompt, ...]]
    metadata: CollectionMetadata
    _index: dict[str, Prompt] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        index = {prompt.id: prompt for prompts in self.prompts.values() for prompt in prompts}
        object.__setattr__(self, "_index", index)

    def by_category(self, category: str) -> tuple[Prompt, ...]:
        """Return prompts for one category, empty for unknown categories."""
        return self.prompts.get(category, ())

    def find(self, prompt_id: str) -> Prompt | None:
        """Look up a prompt anywhere in the collection."""
        return self._index.get(prompt_id)

    def all_prompts(self) -> list[Prompt]:
        """Return every prompt, category by category."""
        return [prompt for category in CATEGORIES for prompt in self.by_category(category)]
