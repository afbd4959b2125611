from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field


class SavePortfolioRequest(BaseModel):
    portfolio: Union[Dict[str, Any], str] = Field(
        ...,
        description="Whole portfolio document, as an object or as JSON text",
    )


class FormatWarning(BaseModel):
    field: Optional[str] = None
    message: str


class PortfolioResponse(BaseModel):
    portfolio: Dict[str, Any]
    warnings: List[FormatWarning] = Field(default_factory=list)


class ProjectCreate(BaseModel):
    title: str
    description: str
    link: Optional[str] = None
    tags: Union[List[str], str, None] = Field(None, description="List or comma-separated string")


class ProjectUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    link: Optional[str] = None
    tags: Union[List[str], str, None] = None


class SkillCreate(BaseModel):
    name: str
    level: int


class SkillUpdate(BaseModel):
    name: Optional[str] = None
    level: Optional[int] = None


class MoveRequest(BaseModel):
    index: int = Field(..., ge=0, description="New zero-based position")
