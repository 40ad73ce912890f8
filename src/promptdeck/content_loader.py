"""Load the prompt collection, and build it from markdown sources."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from .models import CATEGORIES, CATEGORY_COUNT_KEYS, CollectionMetadata, Prompt, PromptCollection
from .routing import category_for_prompt_id

logger = logging.getLogger(__name__)

DATA_FILENAME = "prompts-data.json"
MANIFEST_FILENAME = "prompts-manifest.json"
SOURCE_SUBDIR = "begin"
RESULT_SUFFIX = "-result.md"
UNTITLED = "Untitled Prompt"


class ContentLoadError(ValueError):
    """Raised when the prompt collection is unreachable or malformed."""


@dataclass
class BuildReport:
    """Outcome of validating a freshly built collection."""

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def extract_title(content: str, filename: str = "") -> str:
    """Return the H1 title, or a readable fallback."""
    lines = [line for line in content.split("\n") if line.strip()]
    if not lines:
        return filename.replace(".md", "", 1).replace("-", " ") if filename else UNTITLED

    first = lines[0].strip()
    if first.startswith("# "):
        return first[2:].strip()

    if filename:
        stem = filename.replace(".md", "", 1)
        stem = re.sub(r"student-prompt-|advisor-prompt-", "", stem, flags=re.IGNORECASE)
        return re.sub(r"\b\w", lambda match: match.group(0).upper(), stem.replace("-", " "))
    return lines[0][:50] + "..."


def extract_description(content: str) -> str:
    """Return the first non-blank line after the H1 title."""
    found_title = False
    for raw in content.split("\n"):
        line = raw.strip()
        if not found_title:
            found_title = line.startswith("# ")
            continue
        if line:
            return line
    return ""


def _read_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8-sig"))
    except OSError as exc:
        raise ContentLoadError(f"Could not read {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ContentLoadError(f"Invalid JSON in {path}: {exc}") from exc


def _prompt_from_dict(category: str, raw: Any) -> Prompt:
    """Build a prompt from one aggregate-document record."""
    if not isinstance(raw, dict):
        raise ContentLoadError(f"Prompt record in '{category}' must be an object.")
    prompt_id = str(raw.get("id", "")).strip()
    if not prompt_id:
        raise ContentLoadError(f"Prompt record in '{category}' has no id.")
    if "content" not in raw:
        raise ContentLoadError(f"Prompt '{prompt_id}' has no content.")
    content = str(raw["content"])
    filename = str(raw.get("filename") or f"{prompt_id}.md")
    title = str(raw.get("title") or "").strip() or extract_title(content, filename)
    return Prompt(
        id=prompt_id,
        filename=filename,
        title=title,
        description=str(raw.get("description") or ""),
        category=category,
        content=content,
    )


def _category_records(document: dict[str, Any], category: str) -> list[Any]:
    records = document.get(category)
    if records is None:
        raise ContentLoadError(f"Missing category '{category}'.")
    if not isinstance(records, list):
        raise ContentLoadError(f"Category '{category}' must be a list.")
    return records


def _computed_metadata(prompts: dict[str, tuple[Prompt, ...]], mode: str) -> CollectionMetadata:
    counts = {category: len(prompts.get(category, ())) for category in CATEGORIES}
    return CollectionMetadata(
        total_count=sum(counts.values()),
        category_counts=counts,
        generated_at=datetime.now(UTC).isoformat(),
        mode=mode,
    )


def _metadata_from_dict(raw: Any, prompts: dict[str, tuple[Prompt, ...]]) -> CollectionMetadata:
    if not isinstance(raw, dict):
        return _computed_metadata(prompts, mode="production")
    try:
        counts = {
            category: int(raw.get(CATEGORY_COUNT_KEYS[category], len(prompts[category]))) for category in CATEGORIES
        }
        total = int(raw.get("totalPrompts", sum(counts.values())))
    except (TypeError, ValueError) as exc:
        raise ContentLoadError(f"Invalid metadata counts: {exc}") from exc
    return CollectionMetadata(
        total_count=total,
        category_counts=counts,
        generated_at=str(raw.get("generatedAt", "")),
        mode=str(raw.get("mode", "production")),
    )


def _validate_unique_prompt_ids(prompts: dict[str, tuple[Prompt, ...]]) -> None:
    """Validate that prompt ids are globally unique across categories."""
    seen: dict[str, str] = {}
    for category, items in prompts.items():
        for prompt in items:
            previous = seen.get(prompt.id)
            if previous is not None:
                raise ContentLoadError(f"Duplicate prompt id: {prompt.id} (in {previous} and {category})")
            seen[prompt.id] = category


def load_collection(path: Path) -> PromptCollection:
    """Load the pre-built aggregate document."""
    document = _read_json(path)
    if not isinstance(document, dict):
        raise ContentLoadError(f"{path} root must be a JSON object.")
    prompts: dict[str, tuple[Prompt, ...]] = {}
    for category in CATEGORIES:
        records = _category_records(document, category)
        prompts[category] = tuple(_prompt_from_dict(category, item) for item in records)
    _validate_unique_prompt_ids(prompts)
    metadata = _metadata_from_dict(document.get("metadata"), prompts)
    logger.info("Loaded %d prompts from %s", metadata.total_count, path)
    return PromptCollection(prompts=prompts, metadata=metadata)


def load_collection_from_manifest(manifest_path: Path, prompts_root: Path) -> PromptCollection:
    """Load prompts straight from markdown sources listed in a manifest."""
    manifest = _read_json(manifest_path)
    if not isinstance(manifest, dict):
        raise ContentLoadError(f"{manifest_path} root must be a JSON object.")
    prompts: dict[str, tuple[Prompt, ...]] = {}
    for category in CATEGORIES:
        items: list[Prompt] = []
        for entry in _category_records(manifest, category):
            if not isinstance(entry, dict) or not entry.get("id") or not entry.get("filename"):
                raise ContentLoadError(f"Manifest entry in '{category}' needs an id and a filename.")
            filename = str(entry["filename"])
            source = prompts_root / category / SOURCE_SUBDIR / filename
            try:
                content = source.read_text(encoding="utf-8")
            except OSError as exc:
                raise ContentLoadError(f"Could not read {source}: {exc}") from exc
            items.append(
                Prompt(
                    id=str(entry["id"]),
                    filename=filename,
                    title=extract_title(content, filename),
                    description=str(entry.get("description") or ""),
                    category=category,
                    content=content.strip(),
                )
            )
        prompts[category] = tuple(items)
    _validate_unique_prompt_ids(prompts)
    metadata = _computed_metadata(prompts, mode="development")
    logger.info("Loaded %d prompts from markdown sources under %s", metadata.total_count, prompts_root)
    return PromptCollection(prompts=prompts, metadata=metadata)


def _read_category_sources(prompts_root: Path, category: str, descriptions: dict[str, str]) -> tuple[Prompt, ...]:
    directory = prompts_root / category / SOURCE_SUBDIR
    if not directory.is_dir():
        logger.warning("No source directory for '%s' at %s", category, directory)
        return ()
    items: list[Prompt] = []
    for path in sorted(directory.glob("*.md"), key=lambda item: item.name):
        if path.name.endswith(RESULT_SUFFIX):
            continue
        content = path.read_text(encoding="utf-8")
        prompt_id = path.name.replace(".md", "", 1)
        items.append(
            Prompt(
                id=prompt_id,
                filename=path.name,
                title=extract_title(content, path.name),
                description=descriptions.get(prompt_id) or extract_description(content),
                category=category,
                content=content.strip(),
            )
        )
    return tuple(items)


def build_collection(prompts_root: Path, descriptions: dict[str, str] | None = None) -> PromptCollection:
    """Scan ``<root>/<category>/begin/*.md`` into a collection, sorted by filename."""
    descriptions = descriptions or {}
    prompts = {category: _read_category_sources(prompts_root, category, descriptions) for category in CATEGORIES}
    return PromptCollection(prompts=prompts, metadata=_computed_metadata(prompts, mode="production"))


def load_descriptions(path: Path) -> dict[str, str]:
    """Load the ``{prompt_id: description}`` map used by the build."""
    raw = _read_json(path)
    if not isinstance(raw, dict):
        raise ContentLoadError(f"{path} root must be a JSON object.")
    return {str(key): str(value) for key, value in raw.items()}


def validate_collection(collection: PromptCollection, expected_total: int | None = None) -> BuildReport:
    """Check a built collection before it is written out."""
    report = BuildReport()
    all_prompts = collection.all_prompts()

    if expected_total is not None and len(all_prompts) != expected_total:
        report.errors.append(f"Expected {expected_total} prompts, found {len(all_prompts)}")

    seen: set[str] = set()
    duplicates: list[str] = []
    for prompt in all_prompts:
        if prompt.id in seen and prompt.id not in duplicates:
            duplicates.append(prompt.id)
        seen.add(prompt.id)
    if duplicates:
        report.errors.append(f"Duplicate prompt IDs found: {', '.join(duplicates)}")

    for prompt in all_prompts:
        if not prompt.description.strip():
            report.warnings.append(f"Missing description: {prompt.id} ({prompt.filename})")
        if not prompt.content.strip().startswith("# "):
            report.warnings.append(f"Missing H1 title: {prompt.id} ({prompt.filename})")
        prefix_category = category_for_prompt_id(prompt.id)
        if prefix_category is not None and prefix_category != prompt.category:
            report.warnings.append(f"Id prefix suggests '{prefix_category}': {prompt.id} is in '{prompt.category}'")
    return report


def _prompt_to_dict(prompt: Prompt) -> dict[str, str]:
    return {
        "id": prompt.id,
        "filename": prompt.filename,
        "title": prompt.title,
        "description": prompt.description,
        "category": prompt.category,
        "content": prompt.content,
    }


def collection_to_dict(collection: PromptCollection) -> dict[str, Any]:
    """Serialize a collection to the aggregate document shape."""
    payload: dict[str, Any] = {
        category: [_prompt_to_dict(prompt) for prompt in collection.by_category(category)]
        for category in CATEGORIES
    }
    metadata: dict[str, Any] = {"totalPrompts": collection.metadata.total_count}
    for category in CATEGORIES:
        metadata[CATEGORY_COUNT_KEYS[category]] = collection.metadata.category_counts.get(category, 0)
    metadata["generatedAt"] = collection.metadata.generated_at
    payload["metadata"] = metadata
    return payload


def manifest_to_dict(collection: PromptCollection) -> dict[str, list[dict[str, str]]]:
    """Serialize the lightweight manifest used in development mode."""
    manifest: dict[str, list[dict[str, str]]] = {}
    for category in CATEGORIES:
        entries: list[dict[str, str]] = []
        for prompt in collection.by_category(category):
            entry = {"id": prompt.id, "filename": prompt.filename}
            if prompt.description:
                entry["description"] = prompt.description
            entries.append(entry)
        manifest[category] = entries
    return manifest


def write_build_outputs(collection: PromptCollection, output_dir: Path) -> tuple[Path, Path]:
    """Write the aggregate document and the manifest; return both paths."""
    output_dir.mkdir(parents=True, exist_ok=True)
    data_path = output_dir / DATA_FILENAME
    manifest_path = output_dir / MANIFEST_FILENAME
    data_path.write_text(json.dumps(collection_to_dict(collection), indent=2), encoding="utf-8")
    manifest_path.write_text(json.dumps(manifest_to_dict(collection), indent=2), encoding="utf-8")
    return data_path, manifest_path
