# survey_api/api/v1/endpoints/comments.py
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response

from survey_api.api.deps.auth import require_employee
from survey_api.models.user import User
from survey_api.schemas.comments import CommentCreateIn, CommentOut, CommentUpdateIn
from survey_api.services import comments as comment_service
from survey_api.services.store import SurveyStore, get_store

router = APIRouter(tags=["comments"], dependencies=[Depends(require_employee)])


@router.get("/surveys/{survey_id}/comments", response_model=List[CommentOut])
def list_comments(
    survey_id: UUID,
    assignment_id: Optional[UUID] = Query(default=None),
    store: SurveyStore = Depends(get_store),
    current: User = Depends(require_employee),
):
    return comment_service.list_comments(store, survey_id, current, assignment_id=assignment_id)


@router.post("/surveys/{survey_id}/comments", response_model=CommentOut, status_code=201)
def create_comment(
    survey_id: UUID,
    payload: CommentCreateIn,
    store: SurveyStore = Depends(get_store),
    current: User = Depends(require_employee),
):
    with store.transaction():
        comment = comment_service.create_comment(store, survey_id, current, payload.model_dump())
    store.refresh(comment)
    return comment


@router.put("/comments/{comment_id}", response_model=CommentOut)
def update_comment(
    comment_id: UUID,
    payload: CommentUpdateIn,
    store: SurveyStore = Depends(get_store),
    current: User = Depends(require_employee),
):
    with store.transaction():
        comment = comment_service.update_comment(store, comment_id, current, payload.model_dump(exclude_unset=True))
    store.refresh(comment)
    return comment


@router.delete("/comments/{comment_id}", status_code=204)
def delete_comment(
    comment_id: UUID,
    store: SurveyStore = Depends(get_store),
    current: User = Depends(require_employee),
):
    with store.transaction():
        comment_service.delete_comment(store, comment_id, current)
    return Response(status_code=204)
