"""Portfolio document model and its JSON text form.

The document is stored and exchanged as one JSON object with camelCase keys
(``textEffects``, ``boxShadow``...). The models expose snake_case attributes
and keep any keys they do not recognise, so documents written by newer
editors survive a load/save cycle unchanged.
"""

from __future__ import annotations

import json
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator
from pydantic.alias_generators import to_camel

from portfolio.errors import ParseError

DEFAULT_NAME = "Your Name"
DEFAULT_TITLE = "Creative Developer"
DEFAULT_PROJECT_LINK = "#"

SKILL_LEVEL_MIN = 0
SKILL_LEVEL_MAX = 10

TextShadow = Literal["none", "soft", "hard", "glow", "neon"]
TextAnimation = Literal["none", "fadeIn", "slideUp", "bounce", "pulse", "typewriter"]

RequiredText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class DocumentSection(BaseModel):
    """Shared config: camelCase JSON keys, unknown keys kept."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )


class Fonts(DocumentSection):
    heading: str = "Poppins"
    body: str = "Roboto"
    size: str = "16px"


class Content(DocumentSection):
    name: str = DEFAULT_NAME
    title: str = DEFAULT_TITLE
    about: str = ""
    contact: str = ""


class Effects(DocumentSection):
    box_shadow: bool = True
    border_radius: str = "8px"
    hover_effects: bool = True


class TextEffects(DocumentSection):
    shadow: TextShadow = "none"
    animation: TextAnimation = "none"
    gradient: bool = False


def _number_to_text(value: Any) -> Any:
    # Older editors sent layout values as numbers.
    if isinstance(value, bool):
        return value
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (int, float)):
        return str(value)
    return value


class Layout(DocumentSection):
    hero_height: str = Field("100", pattern=r"^\d+(\.\d+)?$", description="Hero height in vh")
    projects_grid_cols: str = Field("auto", pattern=r"^(auto|[1-9]\d*)$")

    @field_validator("hero_height", "projects_grid_cols", mode="before")
    @classmethod
    def _accept_numbers(cls, value: Any) -> Any:
        return _number_to_text(value)


class Project(DocumentSection):
    id: int
    title: RequiredText
    description: RequiredText
    link: str = DEFAULT_PROJECT_LINK
    tags: List[str] = Field(default_factory=list)


class Skill(DocumentSection):
    id: int
    name: RequiredText
    level: int = Field(..., ge=SKILL_LEVEL_MIN, le=SKILL_LEVEL_MAX)


class PortfolioDocument(DocumentSection):
    """The complete portfolio record owned by one user."""

    fonts: Fonts = Field(default_factory=Fonts)
    colors: Dict[str, str] = Field(default_factory=dict)
    content: Content = Field(default_factory=Content)
    effects: Effects = Field(default_factory=Effects)
    text_effects: TextEffects = Field(default_factory=TextEffects)
    layout: Layout = Field(default_factory=Layout)
    projects: List[Project] = Field(default_factory=list)
    skills: List[Skill] = Field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Return the JSON-ready mapping with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)


def parse(raw: Union[str, bytes, bytearray]) -> Any:
    """Decode a stored or uploaded document blob.

    Only JSON syntax is checked here; shape is handled by
    :func:`portfolio.defaults.apply_defaults`.
    """
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = bytes(raw).decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise ParseError(f"Portfolio data is not UTF-8 text: {exc}") from exc
    try:
        return json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise ParseError(f"Invalid JSON for portfolio: {exc}") from exc
    except RecursionError as exc:
        raise ParseError("Portfolio JSON is nested too deeply") from exc


def serialize(doc: PortfolioDocument, *, indent: Optional[int] = None) -> str:
    """Encode ``doc`` as deterministic JSON text (sorted keys)."""
    separators = None if indent else (",", ":")
    return json.dumps(
        doc.to_dict(),
        sort_keys=True,
        ensure_ascii=False,
        indent=indent,
        separators=separators,
    )
