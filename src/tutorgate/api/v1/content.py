"""
Content API Endpoints

Listing of content visible to the caller, content creation and assignment management.
"""
# ruff: noqa: B008 - FastAPI Depends in function defaults is standard pattern

from datetime import UTC, datetime
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from tutorgate.api.deps import get_caller, require_staff
from tutorgate.core.database import get_db
from tutorgate.core.models import ContentItem
from tutorgate.core.schemas import (
    AssignmentSetSchema,
    AssignmentUpdate,
    AudienceSchema,
    ContentCreate,
    ContentSchema,
    ContentStaffSchema,
)
from tutorgate.core.schemas.content import ContentKind
from tutorgate.release import (
    AudienceResolver,
    Caller,
    InvalidAssignmentInput,
    UnknownContentItem,
    initial_publication,
    is_visible,
    set_class_assignments,
    set_direct_assignments,
)
from tutorgate.release.repo_db import DBReleaseRepo, audience_of

router = APIRouter()


def _present(item: ContentItem, caller: Caller) -> ContentSchema:
    if caller.is_student:
        return ContentSchema.model_validate(item)
    return ContentStaffSchema.model_validate(item)


def _not_found(content_id: UUID) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Content not found with ID: {content_id}",
    )


@router.get("", response_model=None)
async def list_content(
    kind: ContentKind | None = Query(None, description="Filter by content kind"),
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
) -> list[ContentSchema]:
    """List content the caller may see, newest first."""
    repo = DBReleaseRepo(db)
    items = await repo.list_content(kind)
    resolver = AudienceResolver(await repo.load_enrollment_directory())

    visible = resolver.list_visible_content(
        caller, items, datetime.now(UTC), kind=kind, audience_of=audience_of
    )
    return [_present(item, caller) for item in visible]


@router.get("/{content_id}", response_model=None)
async def get_content(
    content_id: UUID,
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
) -> ContentSchema:
    """Get one content item. Students get 404 for items they are not entitled to."""
    repo = DBReleaseRepo(db)
    try:
        item = await repo.get_content(content_id)
    except UnknownContentItem:
        raise _not_found(content_id) from None

    resolver = AudienceResolver(await repo.load_enrollment_directory())
    if not resolver.can_read(caller, audience_of(item), datetime.now(UTC)):
        raise _not_found(content_id)

    return _present(item, caller)


@router.post("", response_model=ContentStaffSchema, status_code=status.HTTP_201_CREATED)
async def create_content(
    content_data: ContentCreate,
    caller: Caller = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
) -> ContentItem:
    """Create a content item.

    A release time always schedules the item, even when `published` is true.
    """
    fields = content_data.model_dump(exclude={"published", "release_at"})
    item = ContentItem(**fields, author_id=caller.subject_id)
    item.publication = initial_publication(content_data.published, content_data.release_at)

    db.add(item)
    await db.commit()
    await db.refresh(item)

    return item


@router.put("/{content_id}/students", response_model=AssignmentSetSchema)
async def replace_student_assignments(
    content_id: UUID,
    update: AssignmentUpdate,
    caller: Caller = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
) -> AssignmentSetSchema:
    """Replace the direct student assignments. An empty list clears them."""
    try:
        ids = await set_direct_assignments(DBReleaseRepo(db), content_id, update.ids)
    except UnknownContentItem:
        raise _not_found(content_id) from None
    except InvalidAssignmentInput as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    await db.commit()
    return AssignmentSetSchema(content_id=content_id, ids=sorted(ids, key=str))


@router.put("/{content_id}/classes", response_model=AssignmentSetSchema)
async def replace_class_assignments(
    content_id: UUID,
    update: AssignmentUpdate,
    caller: Caller = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
) -> AssignmentSetSchema:
    """Replace the class assignments. An empty list clears them."""
    try:
        ids = await set_class_assignments(DBReleaseRepo(db), content_id, update.ids)
    except UnknownContentItem:
        raise _not_found(content_id) from None
    except InvalidAssignmentInput as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    await db.commit()
    return AssignmentSetSchema(content_id=content_id, ids=sorted(ids, key=str))


@router.get("/{content_id}/audience", response_model=AudienceSchema)
async def get_audience(
    content_id: UUID,
    caller: Caller = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
) -> AudienceSchema:
    """Effective audience of an item and the rule that produced it."""
    repo = DBReleaseRepo(db)
    try:
        item = await repo.get_content(content_id)
    except UnknownContentItem:
        raise _not_found(content_id) from None

    audience = audience_of(item)
    resolver = AudienceResolver(await repo.load_enrollment_directory())

    if audience.is_template:
        rule = "template"
    elif audience.direct_student_ids:
        rule = "direct"
    elif audience.class_ids:
        rule = "class"
    else:
        rule = "everyone"

    return AudienceSchema(
        content_id=content_id,
        rule=rule,
        visible_now=is_visible(audience.publication, datetime.now(UTC)),
        direct_student_ids=sorted(audience.direct_student_ids, key=str),
        class_ids=sorted(audience.class_ids, key=str),
        entitled_student_ids=sorted(resolver.entitled_student_ids(audience), key=str),
    )
