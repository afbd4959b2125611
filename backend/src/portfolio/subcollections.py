"""Add, edit, delete and reorder projects and skills inside a document.

Every operation works on a copy and returns the new document, so a failed
edit leaves the caller's document untouched.
"""

from __future__ import annotations

import secrets
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from portfolio.document import (
    DEFAULT_PROJECT_LINK,
    SKILL_LEVEL_MAX,
    SKILL_LEVEL_MIN,
    PortfolioDocument,
    Project,
    Skill,
)
from portfolio.errors import NotFoundError, ValidationError

IdFactory = Callable[[], int]

# Ids must stay exact once the editor parses them as JavaScript numbers.
_MAX_ID = 2**53 - 1


def random_id() -> int:
    return secrets.randbelow(_MAX_ID) + 1


def new_entry_id(existing: Iterable[int], id_factory: Optional[IdFactory] = None) -> int:
    """Return an id not present in ``existing``."""
    factory = id_factory or random_id
    taken = set(existing)
    candidate = factory()
    while candidate in taken:
        candidate = factory()
    return candidate


def _require_text(value: Any, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field.capitalize()} is required", field=field)
    return value.strip()


def clean_link(link: Optional[str]) -> str:
    if link is None or not str(link).strip():
        return DEFAULT_PROJECT_LINK
    return str(link).strip()


def clean_tags(tags: Union[None, str, Iterable[str]]) -> List[str]:
    if tags is None:
        return []
    if isinstance(tags, str):
        tags = tags.split(",")
    return [tag.strip() for tag in tags if isinstance(tag, str) and tag.strip()]


def _check_level(level: Any) -> int:
    if isinstance(level, bool) or not isinstance(level, int):
        raise ValidationError("Skill level must be a whole number", field="level")
    if not SKILL_LEVEL_MIN <= level <= SKILL_LEVEL_MAX:
        raise ValidationError(
            f"Skill level must be between {SKILL_LEVEL_MIN} and {SKILL_LEVEL_MAX}",
            field="level",
        )
    return level


def _index_of(entries: List[Any], entry_id: int) -> Optional[int]:
    for index, entry in enumerate(entries):
        if entry.id == entry_id:
            return index
    return None


def _move(entries: List[Any], entry_id: int, new_index: int, kind: str) -> None:
    index = _index_of(entries, entry_id)
    if index is None:
        raise NotFoundError(f"{kind} {entry_id} not found")
    entry = entries.pop(index)
    new_index = max(0, min(new_index, len(entries)))
    entries.insert(new_index, entry)


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------


def add_project(
    doc: PortfolioDocument,
    title: str,
    description: str,
    link: Optional[str] = None,
    tags: Union[None, str, Iterable[str]] = None,
    *,
    id_factory: Optional[IdFactory] = None,
) -> PortfolioDocument:
    """Append a new project and return the updated document."""
    project = Project(
        id=new_entry_id((p.id for p in doc.projects), id_factory),
        title=_require_text(title, "title"),
        description=_require_text(description, "description"),
        link=clean_link(link),
        tags=clean_tags(tags),
    )
    updated = doc.model_copy(deep=True)
    updated.projects.append(project)
    return updated


def update_project(
    doc: PortfolioDocument,
    project_id: int,
    fields: Mapping[str, Any],
) -> PortfolioDocument:
    """Replace project ``project_id`` with its fields merged with ``fields``.

    The id and the position in the list are kept.
    """
    index = _index_of(doc.projects, project_id)
    if index is None:
        raise NotFoundError(f"Project {project_id} not found")

    current = doc.projects[index].model_dump(by_alias=True)
    changes: Dict[str, Any] = {k: v for k, v in fields.items() if k != "id"}
    if "title" in changes:
        changes["title"] = _require_text(changes["title"], "title")
    if "description" in changes:
        changes["description"] = _require_text(changes["description"], "description")
    if "link" in changes:
        changes["link"] = clean_link(changes["link"])
    if "tags" in changes:
        changes["tags"] = clean_tags(changes["tags"])

    try:
        replacement = Project.model_validate({**current, **changes})
    except PydanticValidationError as exc:
        raise ValidationError(f"Invalid project fields: {exc.errors()[0]['msg']}") from exc

    updated = doc.model_copy(deep=True)
    updated.projects[index] = replacement
    return updated


def remove_project(doc: PortfolioDocument, project_id: int) -> PortfolioDocument:
    """Drop project ``project_id``; an unknown id leaves the document as is."""
    updated = doc.model_copy(deep=True)
    updated.projects = [p for p in updated.projects if p.id != project_id]
    return updated


def move_project(doc: PortfolioDocument, project_id: int, new_index: int) -> PortfolioDocument:
    updated = doc.model_copy(deep=True)
    _move(updated.projects, project_id, new_index, "Project")
    return updated


# ---------------------------------------------------------------------------
# Skills
# ---------------------------------------------------------------------------


def add_skill(
    doc: PortfolioDocument,
    name: str,
    level: int,
    *,
    id_factory: Optional[IdFactory] = None,
) -> PortfolioDocument:
    """Append a new skill. Levels outside 0..10 are rejected, not clamped."""
    skill = Skill(
        id=new_entry_id((s.id for s in doc.skills), id_factory),
        name=_require_text(name, "name"),
        level=_check_level(level),
    )
    updated = doc.model_copy(deep=True)
    updated.skills.append(skill)
    return updated


def update_skill(
    doc: PortfolioDocument,
    skill_id: int,
    fields: Mapping[str, Any],
) -> PortfolioDocument:
    index = _index_of(doc.skills, skill_id)
    if index is None:
        raise NotFoundError(f"Skill {skill_id} not found")

    current = doc.skills[index].model_dump(by_alias=True)
    changes: Dict[str, Any] = {k: v for k, v in fields.items() if k != "id"}
    if "name" in changes:
        changes["name"] = _require_text(changes["name"], "name")
    if "level" in changes:
        changes["level"] = _check_level(changes["level"])

    try:
        replacement = Skill.model_validate({**current, **changes})
    except PydanticValidationError as exc:
        raise ValidationError(f"Invalid skill fields: {exc.errors()[0]['msg']}") from exc

    updated = doc.model_copy(deep=True)
    updated.skills[index] = replacement
    return updated


def remove_skill(doc: PortfolioDocument, skill_id: int) -> PortfolioDocument:
    updated = doc.model_copy(deep=True)
    updated.skills = [s for s in updated.skills if s.id != skill_id]
    return updated


def move_skill(doc: PortfolioDocument, skill_id: int, new_index: int) -> PortfolioDocument:
    updated = doc.model_copy(deep=True)
    _move(updated.skills, skill_id, new_index, "Skill")
    return updated
