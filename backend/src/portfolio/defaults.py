"""Fill a partial or imported portfolio document with defaults.

Documents come back from storage written by older editors, and users import
files edited by hand, so nothing here may fail the whole document. A field
with an unusable value falls back to its default and is reported as a
:class:`FormatError`; everything else is kept as given.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from portfolio.document import (
    Content,
    DocumentSection,
    Effects,
    Fonts,
    Layout,
    PortfolioDocument,
    Project,
    Skill,
    TextEffects,
)
from portfolio.errors import FormatError
from portfolio.subcollections import clean_link, clean_tags

logger = logging.getLogger(__name__)

SectionT = TypeVar("SectionT", bound=DocumentSection)
EntryT = TypeVar("EntryT", Project, Skill)

_SECTIONS: Dict[str, Type[DocumentSection]] = {
    "fonts": Fonts,
    "content": Content,
    "effects": Effects,
    "text_effects": TextEffects,
    "layout": Layout,
}
_ENTRIES: Dict[str, Type[DocumentSection]] = {
    "projects": Project,
    "skills": Skill,
}


def default_document(name: Optional[str] = None) -> PortfolioDocument:
    """Return the document a new account starts with.

    ``name`` seeds ``content.name`` with the account holder's name.
    """
    if name and name.strip():
        return PortfolioDocument(content=Content(name=name.strip()))
    return PortfolioDocument()


def apply_defaults(partial: Any) -> PortfolioDocument:
    """Complete ``partial`` into a renderable document. Never raises."""
    document, _ = apply_defaults_with_report(partial)
    return document


def apply_defaults_with_report(partial: Any) -> Tuple[PortfolioDocument, List[FormatError]]:
    """Like :func:`apply_defaults`, also returning the fields that were reset."""
    problems: List[FormatError] = []
    if partial is None:
        partial = {}
    if not isinstance(partial, dict):
        problems.append(
            FormatError(
                f"Portfolio must be a JSON object, got {type(partial).__name__}",
                field="$",
            )
        )
        partial = {}

    known = _known_keys(PortfolioDocument)
    values: Dict[str, Any] = {}
    for name, field in PortfolioDocument.model_fields.items():
        alias = field.alias or name
        raw = partial.get(alias, partial.get(name))
        if name in _SECTIONS:
            values[name] = _merge_section(_SECTIONS[name], raw, alias, problems)
        elif name in _ENTRIES:
            values[name] = _merge_entries(_ENTRIES[name], raw, alias, problems)
        elif name == "colors":
            values[name] = _merge_colors(raw, problems)

    extras = {key: value for key, value in partial.items() if key not in known}
    document = PortfolioDocument(**values, **extras)

    for problem in problems:
        logger.warning("Portfolio field %s reset to default: %s", problem.field, problem.message)
    return document, problems


def _known_keys(model_cls: Type[BaseModel]) -> set:
    keys = set()
    for name, field in model_cls.model_fields.items():
        keys.add(name)
        if field.alias:
            keys.add(field.alias)
    return keys


def _describe(value: Any) -> str:
    return type(value).__name__


def _merge_section(
    model_cls: Type[SectionT],
    value: Any,
    path: str,
    problems: List[FormatError],
) -> SectionT:
    if value is None:
        return model_cls()
    if not isinstance(value, dict):
        problems.append(FormatError(f"expected an object, got {_describe(value)}", field=path))
        return model_cls()

    accepted: Dict[str, Any] = {}
    for key, item in value.items():
        try:
            # Validate one key at a time so a bad key only loses itself.
            model_cls.model_validate({key: item})
        except PydanticValidationError:
            problems.append(FormatError(f"unusable value {item!r}", field=f"{path}.{key}"))
            continue
        accepted[key] = item
    return model_cls.model_validate(accepted)


def _merge_colors(value: Any, problems: List[FormatError]) -> Dict[str, str]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        problems.append(FormatError(f"expected an object, got {_describe(value)}", field="colors"))
        return {}
    colors: Dict[str, str] = {}
    for slot, color in value.items():
        if isinstance(color, str):
            colors[slot] = color
        else:
            problems.append(FormatError(f"color must be a string, got {_describe(color)}", field=f"colors.{slot}"))
    return colors


def _merge_entries(
    model_cls: Type[EntryT],
    value: Any,
    path: str,
    problems: List[FormatError],
) -> List[EntryT]:
    if value is None:
        return []
    if not isinstance(value, list):
        problems.append(FormatError(f"expected a list, got {_describe(value)}", field=path))
        return []

    entries: List[EntryT] = []
    for index, item in enumerate(value):
        entry_path = f"{path}[{index}]"
        if model_cls is Project and isinstance(item, dict):
            item = _clean_project_fields(item, entry_path, problems)
        try:
            entries.append(model_cls.model_validate(item))
        except PydanticValidationError as exc:
            problems.append(FormatError(f"dropped invalid entry ({exc.error_count()} errors)", field=entry_path))

    # Ids must stay unique; later duplicates get fresh ids above the current max.
    seen = set()
    next_id = max((entry.id for entry in entries), default=0) + 1
    for index, entry in enumerate(entries):
        if entry.id in seen:
            problems.append(
                FormatError(f"duplicate id {entry.id} reassigned to {next_id}", field=f"{path}[{index}].id")
            )
            entry.id = next_id
            next_id += 1
        seen.add(entry.id)
    return entries


def _clean_project_fields(item: Dict[str, Any], path: str, problems: List[FormatError]) -> Dict[str, Any]:
    """Normalise ``link`` and ``tags`` the way the editor does.

    A value that cannot be normalised is reset on its own; the project is kept.
    """
    entry = dict(item)
    if "link" in entry:
        link = entry["link"]
        if link is None or isinstance(link, str):
            entry["link"] = clean_link(link)
        else:
            problems.append(FormatError(f"unusable value {link!r}", field=f"{path}.link"))
            del entry["link"]
    if "tags" in entry:
        tags = entry["tags"]
        if tags is None or isinstance(tags, (str, list)):
            entry["tags"] = clean_tags(tags)
        else:
            problems.append(FormatError(f"unusable value {tags!r}", field=f"{path}.tags"))
            del entry["tags"]
    return entry
