import datetime as dt
import logging
from typing import List, Optional

import sqlalchemy as sa
from fastapi import UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from collecta.db.models.collection import Collection
from collecta.db.models.event import Event
from collecta.errors import InvalidInput
from collecta.schemas import EventCreate, EventUpdate, EventOut
from collecta.services.auth_service import Caller
from collecta.services.ownership import COLLECTIONS, EVENTS
from collecta.services.transactions import commit_or_fail
from collecta.services.upload_service import UploadService
from collecta.utils.listing import ListQuery, Page, apply_listing

logger = logging.getLogger(__name__)

SEARCH_ATTRIBUTES = ("name", "location", "description", "collection_name")


def is_past(date: dt.date, today: Optional[dt.date] = None) -> bool:
    return date < (today or dt.date.today())


def ensure_rateable(date: dt.date, rating: Optional[int]) -> None:
    """Ratings can only be given once the event is over."""
    if rating is not None and not is_past(date):
        raise InvalidInput("Only past events can be rated.")


WHEN_PREDICATES = {
    "all": None,
    "coming": lambda event: not is_past(event.date),
    "past": lambda event: is_past(event.date),
}


class EventService:
    @staticmethod
    async def list_owned(
        db: AsyncSession,
        caller: Caller,
        query: ListQuery,
        collection_id: Optional[int] = None,
    ) -> Page[EventOut]:
        """Events of one owned collection, or of all the caller's collections.

        Rows are ordered by date, earliest first.
        """
        stmt = (
            sa.select(Event, Collection.name)
            .join(Collection, Event.collection_id == Collection.id)
            .where(Collection.owner_id == caller.id)
            .order_by(Event.date.asc(), Event.id.asc())
        )

        if collection_id is not None:
            await COLLECTIONS.authorize(db, collection_id, caller)
            stmt = stmt.where(Event.collection_id == collection_id)

        rows: List[EventOut] = [
            EventOut.model_validate(event).model_copy(update={"collection_name": collection_name})
            for event, collection_name in (await db.execute(stmt)).all()
        ]
        return apply_listing(rows, query, SEARCH_ATTRIBUTES)

    @staticmethod
    async def get(db: AsyncSession, caller: Caller, event_id: int) -> Event:
        return await EVENTS.authorize(db, event_id, caller)

    @staticmethod
    async def create(
        db: AsyncSession,
        caller: Caller,
        data: EventCreate,
        image: Optional[UploadFile] = None,
    ) -> Event:
        await COLLECTIONS.authorize(db, data.collection_id, caller)
        ensure_rateable(data.date, data.rating)

        image_path = await UploadService.save_image(image, "events") if image else None

        event = Event(**data.model_dump(), image=image_path)
        db.add(event)
        await commit_or_fail(db, "create the event", [image_path])
        await db.refresh(event)

        logger.info("User %s created event %s in collection %s", caller.id, event.id, event.collection_id)
        return event

    @staticmethod
    async def update(
        db: AsyncSession,
        caller: Caller,
        event_id: int,
        data: EventUpdate,
    ) -> Event:
        event: Event = await EVENTS.authorize(db, event_id, caller)

        changes = data.model_dump(exclude_unset=True)
        target = changes.get("collection_id")
        if target is not None and target != event.collection_id:
            await COLLECTIONS.authorize(db, target, caller)

        ensure_rateable(
            changes.get("date", event.date),
            changes.get("rating", event.rating),
        )

        for key, value in changes.items():
            setattr(event, key, value)

        await commit_or_fail(db, "update the event")
        await db.refresh(event)
        return event

    @staticmethod
    async def set_image(db: AsyncSession, caller: Caller, event_id: int, image: UploadFile) -> Event:
        event: Event = await EVENTS.authorize(db, event_id, caller)

        new_image = await UploadService.save_image(image, "events")
        old_image, event.image = event.image, new_image

        await commit_or_fail(db, "update the event image", [new_image])
        await UploadService.discard([old_image])
        await db.refresh(event)
        return event

    @staticmethod
    async def rate(db: AsyncSession, caller: Caller, event_id: int, rating: Optional[int]) -> Event:
        event: Event = await EVENTS.authorize(db, event_id, caller)
        ensure_rateable(event.date, rating)
        event.rating = rating

        await commit_or_fail(db, "rate the event")
        await db.refresh(event)
        return event

    @staticmethod
    async def delete(db: AsyncSession, caller: Caller, event_id: int) -> int:
        event: Event = await EVENTS.authorize(db, event_id, caller)
        image = event.image

        await db.delete(event)
        await commit_or_fail(db, "delete the event")
        await UploadService.discard([image])

        logger.info("User %s deleted event %s", caller.id, event_id)
        return event_id
