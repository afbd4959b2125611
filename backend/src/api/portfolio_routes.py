"""
Portfolio API routes
Load, save, import/export and project/skill editing for the caller's document
"""

import logging
import re
from typing import Callable, Iterable, List

from fastapi import APIRouter, Depends, File, HTTPException, Response, UploadFile, status

from api.dependencies import AuthContext, get_auth_context, get_portfolio_gateway
from api.models.portfolio_models import (
    FormatWarning,
    MoveRequest,
    PortfolioResponse,
    ProjectCreate,
    ProjectUpdate,
    SavePortfolioRequest,
    SkillCreate,
    SkillUpdate,
)
from portfolio import subcollections
from portfolio.defaults import apply_defaults_with_report
from portfolio.document import PortfolioDocument, parse
from portfolio.errors import FormatError, PortfolioError, StorageError
from services.portfolio_gateway import PortfolioGateway

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/portfolio", tags=["Portfolio"])
users_router = APIRouter(prefix="/api/users", tags=["Portfolio"])

_MAX_IMPORT_BYTES = 1024 * 1024  # 1 MB

_ERROR_RESPONSES = {
    400: {"description": "Invalid portfolio data"},
    401: {"description": "Unauthorized"},
    404: {"description": "Portfolio, project or skill not found"},
    500: {"description": "Storage failure"},
}


def _http_error(exc: PortfolioError) -> HTTPException:
    if isinstance(exc, StorageError):
        logger.exception("Portfolio storage failure: %s", exc)
    return HTTPException(status_code=exc.status_code, detail=exc.to_detail())


def _warnings(problems: Iterable[FormatError]) -> List[FormatWarning]:
    return [FormatWarning(field=p.field, message=p.message) for p in problems]


def _document_from_payload(payload: SavePortfolioRequest):
    data = payload.portfolio
    if isinstance(data, str):
        data = parse(data)
        if not isinstance(data, dict):
            raise FormatError("Portfolio must be a JSON object", field="portfolio")
    return apply_defaults_with_report(data)


def _save_payload(
    auth: AuthContext,
    user_id: str,
    payload: SavePortfolioRequest,
    gateway: PortfolioGateway,
) -> PortfolioResponse:
    try:
        document, problems = _document_from_payload(payload)
        gateway.save(auth, user_id, document)
    except PortfolioError as exc:
        raise _http_error(exc)
    return PortfolioResponse(portfolio=document.to_dict(), warnings=_warnings(problems))


def _edit(
    auth: AuthContext,
    gateway: PortfolioGateway,
    edit: Callable[[PortfolioDocument], PortfolioDocument],
) -> PortfolioResponse:
    """Load the caller's document, apply ``edit`` and save the result."""
    try:
        document = gateway.load(auth, auth.user_id)
        updated = edit(document)
        gateway.save(auth, auth.user_id, updated)
    except PortfolioError as exc:
        raise _http_error(exc)
    return PortfolioResponse(portfolio=updated.to_dict())


def _export_filename(name: str) -> str:
    slug = re.sub(r"\s+", "-", name.strip()).lower()
    slug = re.sub(r"[^a-z0-9._-]", "", slug)
    return f"{slug or 'portfolio'}-portfolio.json"


# ============================================================================
# Whole document
# ============================================================================

@router.get("", response_model=PortfolioResponse, responses=_ERROR_RESPONSES)
def get_portfolio(
    auth: AuthContext = Depends(get_auth_context),
    gateway: PortfolioGateway = Depends(get_portfolio_gateway),
) -> PortfolioResponse:
    """Return the caller's portfolio with defaults filled in."""
    try:
        document = gateway.load(auth, auth.user_id)
    except PortfolioError as exc:
        raise _http_error(exc)
    return PortfolioResponse(portfolio=document.to_dict())


@router.put("", response_model=PortfolioResponse, responses=_ERROR_RESPONSES)
def save_portfolio(
    payload: SavePortfolioRequest,
    auth: AuthContext = Depends(get_auth_context),
    gateway: PortfolioGateway = Depends(get_portfolio_gateway),
) -> PortfolioResponse:
    """
    Replace the caller's whole portfolio.

    Unusable fields are reset to defaults and listed in ``warnings``.
    """
    return _save_payload(auth, auth.user_id, payload, gateway)


@router.get("/export", responses=_ERROR_RESPONSES)
def export_portfolio(
    auth: AuthContext = Depends(get_auth_context),
    gateway: PortfolioGateway = Depends(get_portfolio_gateway),
) -> Response:
    """Download the stored portfolio as a JSON file."""
    try:
        content = gateway.export_document(auth, auth.user_id)
    except PortfolioError as exc:
        raise _http_error(exc)

    filename = _export_filename(auth.name or "portfolio")
    return Response(
        content=content,
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/import", response_model=PortfolioResponse, responses=_ERROR_RESPONSES)
def import_portfolio(
    file: UploadFile = File(...),
    auth: AuthContext = Depends(get_auth_context),
    gateway: PortfolioGateway = Depends(get_portfolio_gateway),
) -> PortfolioResponse:
    """Replace the caller's portfolio with an exported JSON file."""
    contents = file.file.read(_MAX_IMPORT_BYTES + 1)
    if len(contents) > _MAX_IMPORT_BYTES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"code": "file_too_large", "message": "Portfolio file must be under 1 MB"},
        )

    try:
        document, problems = gateway.import_document(auth, auth.user_id, contents)
    except PortfolioError as exc:
        raise _http_error(exc)
    return PortfolioResponse(portfolio=document.to_dict(), warnings=_warnings(problems))


# ============================================================================
# Projects
# ============================================================================

@router.post("/projects", response_model=PortfolioResponse, status_code=status.HTTP_201_CREATED, responses=_ERROR_RESPONSES)
def create_project(
    payload: ProjectCreate,
    auth: AuthContext = Depends(get_auth_context),
    gateway: PortfolioGateway = Depends(get_portfolio_gateway),
) -> PortfolioResponse:
    return _edit(
        auth,
        gateway,
        lambda doc: subcollections.add_project(
            doc, payload.title, payload.description, payload.link, payload.tags
        ),
    )


@router.patch("/projects/{project_id}", response_model=PortfolioResponse, responses=_ERROR_RESPONSES)
def update_project(
    project_id: int,
    payload: ProjectUpdate,
    auth: AuthContext = Depends(get_auth_context),
    gateway: PortfolioGateway = Depends(get_portfolio_gateway),
) -> PortfolioResponse:
    fields = payload.model_dump(exclude_unset=True)
    return _edit(auth, gateway, lambda doc: subcollections.update_project(doc, project_id, fields))


@router.delete("/projects/{project_id}", response_model=PortfolioResponse, responses=_ERROR_RESPONSES)
def delete_project(
    project_id: int,
    auth: AuthContext = Depends(get_auth_context),
    gateway: PortfolioGateway = Depends(get_portfolio_gateway),
) -> PortfolioResponse:
    return _edit(auth, gateway, lambda doc: subcollections.remove_project(doc, project_id))


@router.post("/projects/{project_id}/move", response_model=PortfolioResponse, responses=_ERROR_RESPONSES)
def move_project(
    project_id: int,
    payload: MoveRequest,
    auth: AuthContext = Depends(get_auth_context),
    gateway: PortfolioGateway = Depends(get_portfolio_gateway),
) -> PortfolioResponse:
    return _edit(auth, gateway, lambda doc: subcollections.move_project(doc, project_id, payload.index))


# ============================================================================
# Skills
# ============================================================================

@router.post("/skills", response_model=PortfolioResponse, status_code=status.HTTP_201_CREATED, responses=_ERROR_RESPONSES)
def create_skill(
    payload: SkillCreate,
    auth: AuthContext = Depends(get_auth_context),
    gateway: PortfolioGateway = Depends(get_portfolio_gateway),
) -> PortfolioResponse:
    return _edit(auth, gateway, lambda doc: subcollections.add_skill(doc, payload.name, payload.level))


@router.patch("/skills/{skill_id}", response_model=PortfolioResponse, responses=_ERROR_RESPONSES)
def update_skill(
    skill_id: int,
    payload: SkillUpdate,
    auth: AuthContext = Depends(get_auth_context),
    gateway: PortfolioGateway = Depends(get_portfolio_gateway),
) -> PortfolioResponse:
    fields = payload.model_dump(exclude_unset=True)
    return _edit(auth, gateway, lambda doc: subcollections.update_skill(doc, skill_id, fields))


@router.delete("/skills/{skill_id}", response_model=PortfolioResponse, responses=_ERROR_RESPONSES)
def delete_skill(
    skill_id: int,
    auth: AuthContext = Depends(get_auth_context),
    gateway: PortfolioGateway = Depends(get_portfolio_gateway),
) -> PortfolioResponse:
    return _edit(auth, gateway, lambda doc: subcollections.remove_skill(doc, skill_id))


@router.post("/skills/{skill_id}/move", response_model=PortfolioResponse, responses=_ERROR_RESPONSES)
def move_skill(
    skill_id: int,
    payload: MoveRequest,
    auth: AuthContext = Depends(get_auth_context),
    gateway: PortfolioGateway = Depends(get_portfolio_gateway),
) -> PortfolioResponse:
    return _edit(auth, gateway, lambda doc: subcollections.move_skill(doc, skill_id, payload.index))


# ============================================================================
# Owner-addressed document
# ============================================================================

@users_router.get("/{user_id}/portfolio", response_model=PortfolioResponse, responses=_ERROR_RESPONSES)
def get_user_portfolio(
    user_id: str,
    auth: AuthContext = Depends(get_auth_context),
    gateway: PortfolioGateway = Depends(get_portfolio_gateway),
) -> PortfolioResponse:
    """Return ``user_id``'s portfolio; only its owner may read it."""
    try:
        document = gateway.load(auth, user_id)
    except PortfolioError as exc:
        raise _http_error(exc)
    return PortfolioResponse(portfolio=document.to_dict())


@users_router.put("/{user_id}/portfolio", response_model=PortfolioResponse, responses=_ERROR_RESPONSES)
def save_user_portfolio(
    user_id: str,
    payload: SavePortfolioRequest,
    auth: AuthContext = Depends(get_auth_context),
    gateway: PortfolioGateway = Depends(get_portfolio_gateway),
) -> PortfolioResponse:
    return _save_payload(auth, user_id, payload, gateway)
