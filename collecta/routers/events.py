import dataclasses
from typing import Literal, Optional

from fastapi import APIRouter, Depends, File, Path, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession
from starlette import status

from collecta.db.session import get_db
from collecta.schemas import MAX_ID, EventCreate, EventUpdate, EventOut, RatingIn
from collecta.services.auth_service import Caller, get_caller
from collecta.services.event_service import EventService, WHEN_PREDICATES
from collecta.utils.forms import as_form, sent_file
from collecta.utils.listing import ListQuery, list_query

router = APIRouter(prefix="/events", tags=["events"])


@router.get("", status_code=status.HTTP_200_OK)
async def list_events(
    collection_id: Optional[int] = Query(None, gt=0, le=MAX_ID),
    when: Literal["all", "coming", "past"] = Query("all"),
    query: ListQuery = Depends(list_query),
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    predicate = WHEN_PREDICATES[when]
    if predicate is not None:
        query = dataclasses.replace(query, predicates=[predicate])

    page = await EventService.list_owned(db, caller, query, collection_id)
    return page.envelope("events", lambda event: event)


@router.get("/{event_id}", status_code=status.HTTP_200_OK)
async def get_event(
    event_id: int = Path(..., gt=0, le=MAX_ID),
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    event = await EventService.get(db, caller, event_id)
    return {"success": True, "event": EventOut.model_validate(event)}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_event(
    data: EventCreate = Depends(as_form(EventCreate)),
    image: Optional[UploadFile] = File(None),
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    event = await EventService.create(db, caller, data, sent_file(image))
    return {"success": True, "event": EventOut.model_validate(event)}


@router.patch("/{event_id}", status_code=status.HTTP_200_OK)
async def update_event(
    data: EventUpdate,
    event_id: int = Path(..., gt=0, le=MAX_ID),
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    event = await EventService.update(db, caller, event_id, data)
    return {"success": True, "event": EventOut.model_validate(event)}


@router.put("/{event_id}/image", status_code=status.HTTP_200_OK)
async def replace_event_image(
    event_id: int = Path(..., gt=0, le=MAX_ID),
    image: UploadFile = File(...),
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    event = await EventService.set_image(db, caller, event_id, image)
    return {"success": True, "event": EventOut.model_validate(event)}


@router.post("/{event_id}/rating", status_code=status.HTTP_200_OK)
async def rate_event(
    body: RatingIn,
    event_id: int = Path(..., gt=0, le=MAX_ID),
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    event = await EventService.rate(db, caller, event_id, body.rating)
    return {"success": True, "event": EventOut.model_validate(event)}


@router.delete("/{event_id}", status_code=status.HTTP_200_OK)
async def delete_event(
    event_id: int = Path(..., gt=0, le=MAX_ID),
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    deleted_id = await EventService.delete(db, caller, event_id)
    return {"success": True, "deleted_id": deleted_id}
