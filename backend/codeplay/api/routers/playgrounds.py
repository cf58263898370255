import copy
import logging
import math
from typing import Any, Dict, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from codeplay.api.dependencies import get_current_principal
from codeplay.api.schemas import (
    ClonePlaygroundRequest,
    CreatePlaygroundRequest,
    MessageResponse,
    PaginationResponse,
    PlaygroundListResponse,
    PlaygroundResponse,
    PlaygroundSummaryResponse,
    SavePlaygroundFilesRequest,
    StarResponse,
    UpdatePlaygroundRequest,
)
from codeplay.api.schemas.playgrounds import TemplateFilesResponse
from codeplay.db.postgres.models.playgrounds import (
    Playground,
    PlaygroundTemplateKind,
    StarMark,
    TemplateFile,
)
from codeplay.db.postgres.session import get_db
from codeplay.services.playground_templates import build_template_files

logger = logging.getLogger(__name__)

router = APIRouter()

MAX_PAGE_SIZE = 100


def _enum_value(value: Any) -> str:
    return value.value if hasattr(value, "value") else str(value)


def _resolve_template(raw: Optional[str]) -> PlaygroundTemplateKind:
    normalized = (raw or "").strip().upper()
    try:
        return PlaygroundTemplateKind(normalized)
    except ValueError:
        valid = ", ".join(kind.value for kind in PlaygroundTemplateKind)
        raise HTTPException(status_code=400, detail=f"Invalid template. Must be one of: {valid}")


def _validate_title(raw: Optional[str]) -> str:
    title = (raw or "").strip()
    if not title:
        raise HTTPException(status_code=400, detail="Title is required")
    return title


def _playground_to_summary(playground: Playground) -> PlaygroundSummaryResponse:
    return PlaygroundSummaryResponse(
        id=str(playground.id),
        title=playground.title,
        description=playground.description,
        template=_enum_value(playground.template),
        created_at=playground.created_at,
        updated_at=playground.updated_at,
    )


def _playground_to_response(playground: Playground, is_starred: Optional[bool] = None) -> PlaygroundResponse:
    files = playground.template_files
    return PlaygroundResponse(
        **_playground_to_summary(playground).model_dump(),
        user_id=str(playground.user_id),
        template_files=(
            TemplateFilesResponse(
                id=str(files.id),
                playground_id=str(files.playground_id),
                content=files.content or {},
            )
            if files is not None
            else None
        ),
        is_starred=is_starred,
    )


async def _load_playground(db: AsyncSession, playground_id: UUID) -> Optional[Playground]:
    result = await db.execute(
        select(Playground)
        .options(selectinload(Playground.template_files))
        .where(Playground.id == playground_id)
        .execution_options(populate_existing=True)
        .limit(1)
    )
    return result.scalar_one_or_none()


async def _get_playground_or_404(db: AsyncSession, playground_id: UUID) -> Playground:
    playground = await _load_playground(db, playground_id)
    if playground is None:
        raise HTTPException(status_code=404, detail="Project not found")
    return playground


async def _get_owned_playground(db: AsyncSession, playground_id: UUID, user_id: UUID) -> Playground:
    playground = await _get_playground_or_404(db, playground_id)
    # Existing projects owned by someone else are reported as forbidden, never hidden.
    if playground.user_id != user_id:
        raise HTTPException(status_code=403, detail="Access denied")
    return playground


async def _get_star(db: AsyncSession, playground_id: UUID, user_id: UUID) -> Optional[StarMark]:
    result = await db.execute(
        select(StarMark).where(
            StarMark.playground_id == playground_id,
            StarMark.user_id == user_id,
        ).limit(1)
    )
    return result.scalar_one_or_none()


@router.get("", response_model=PlaygroundListResponse)
async def list_playgrounds(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=MAX_PAGE_SIZE),
    template: Optional[str] = None,
    search: Optional[str] = None,
    principal: Dict[str, Any] = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    query = select(Playground).where(Playground.user_id == principal["user_id"])
    if template:
        query = query.where(Playground.template == _resolve_template(template))
    if search and search.strip():
        pattern = f"%{search.strip()}%"
        query = query.where(or_(Playground.title.ilike(pattern), Playground.description.ilike(pattern)))

    total = int(await db.scalar(select(func.count()).select_from(query.subquery())) or 0)

    result = await db.execute(
        query.order_by(Playground.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    playgrounds = result.scalars().all()

    return PlaygroundListResponse(
        data=[_playground_to_summary(item) for item in playgrounds],
        pagination=PaginationResponse(
            page=page,
            limit=limit,
            total=total,
            pages=math.ceil(total / limit),
        ),
    )


@router.get("/{playground_id}", response_model=PlaygroundResponse)
async def get_playground(
    playground_id: UUID,
    principal: Dict[str, Any] = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    playground = await _get_owned_playground(db, playground_id, principal["user_id"])
    star = await _get_star(db, playground.id, principal["user_id"])
    return _playground_to_response(playground, is_starred=star is not None)


@router.post("", response_model=PlaygroundResponse, status_code=status.HTTP_201_CREATED)
async def create_playground(
    request: CreatePlaygroundRequest,
    principal: Dict[str, Any] = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    title = _validate_title(request.title)
    template = _resolve_template(request.template)

    playground = Playground(
        title=title,
        description=request.description,
        template=template,
        user_id=principal["user_id"],
    )
    playground.template_files = TemplateFile(content=build_template_files(template.value))
    db.add(playground)
    await db.commit()

    logger.info("Created playground id=%s template=%s", playground.id, template.value)
    playground = await _get_playground_or_404(db, playground.id)
    return _playground_to_response(playground, is_starred=False)


@router.put("/{playground_id}", response_model=PlaygroundResponse)
async def update_playground(
    playground_id: UUID,
    request: UpdatePlaygroundRequest,
    principal: Dict[str, Any] = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    playground = await _get_owned_playground(db, playground_id, principal["user_id"])

    patch = request.model_dump(exclude_unset=True)
    if "title" in patch:
        playground.title = _validate_title(patch["title"])
    if "description" in patch:
        playground.description = patch["description"]
    if "template" in patch:
        # Files are a snapshot taken at creation; switching kinds leaves them alone.
        playground.template = _resolve_template(patch["template"])

    await db.commit()
    playground = await _get_playground_or_404(db, playground_id)
    star = await _get_star(db, playground.id, principal["user_id"])
    return _playground_to_response(playground, is_starred=star is not None)


@router.put("/{playground_id}/files", response_model=PlaygroundResponse)
async def save_playground_files(
    playground_id: UUID,
    request: SavePlaygroundFilesRequest,
    principal: Dict[str, Any] = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    playground = await _get_owned_playground(db, playground_id, principal["user_id"])

    if playground.template_files is None:
        playground.template_files = TemplateFile(content=request.content)
    else:
        playground.template_files.content = request.content
    playground.updated_at = func.now()

    await db.commit()
    playground = await _get_playground_or_404(db, playground_id)
    star = await _get_star(db, playground.id, principal["user_id"])
    return _playground_to_response(playground, is_starred=star is not None)


@router.delete("/{playground_id}", response_model=MessageResponse)
async def delete_playground(
    playground_id: UUID,
    principal: Dict[str, Any] = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    playground = await _get_owned_playground(db, playground_id, principal["user_id"])

    await db.execute(delete(StarMark).where(StarMark.playground_id == playground.id))
    await db.delete(playground)
    await db.commit()

    logger.info("Deleted playground id=%s", playground_id)
    return MessageResponse(message="Project deleted successfully")


@router.post("/{playground_id}/clone", response_model=PlaygroundResponse, status_code=status.HTTP_201_CREATED)
async def clone_playground(
    playground_id: UUID,
    request: Optional[ClonePlaygroundRequest] = None,
    principal: Dict[str, Any] = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    source = await _get_playground_or_404(db, playground_id)

    title = (request.title or "").strip() if request is not None else ""
    source_content = source.template_files.content if source.template_files is not None else {}

    clone = Playground(
        title=title or f"{source.title} (Clone)",
        description=source.description,
        template=_resolve_template(_enum_value(source.template)),
        user_id=principal["user_id"],
    )
    clone.template_files = TemplateFile(content=copy.deepcopy(source_content or {}))
    db.add(clone)
    await db.commit()

    logger.info("Cloned playground id=%s into id=%s", playground_id, clone.id)
    clone = await _get_playground_or_404(db, clone.id)
    return _playground_to_response(clone, is_starred=False)


@router.post("/{playground_id}/star", response_model=StarResponse)
async def toggle_star(
    playground_id: UUID,
    principal: Dict[str, Any] = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    playground = await _get_owned_playground(db, playground_id, principal["user_id"])

    star = await _get_star(db, playground.id, principal["user_id"])
    if star is None:
        db.add(StarMark(user_id=principal["user_id"], playground_id=playground.id))
        is_starred = True
    else:
        await db.delete(star)
        is_starred = False

    await db.commit()
    return StarResponse(is_starred=is_starred)
