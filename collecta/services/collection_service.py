import logging
from typing import List, Optional

import sqlalchemy as sa
from fastapi import UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from collecta.db.models.collection import Collection
from collecta.db.models.event import Event
from collecta.db.models.item import Item
from collecta.schemas import CollectionCreate, CollectionUpdate
from collecta.services.auth_service import Caller
from collecta.services.ownership import COLLECTIONS
from collecta.services.transactions import commit_or_fail
from collecta.services.upload_service import UploadService
from collecta.utils.listing import ListQuery, Page, apply_listing

logger = logging.getLogger(__name__)

SEARCH_ATTRIBUTES = ("name", "type", "description")


class CollectionService:
    @staticmethod
    async def list_owned(db: AsyncSession, caller: Caller, query: ListQuery) -> Page[Collection]:
        rows: List[Collection] = list(await db.scalars(
            sa.select(Collection)
            .where(Collection.owner_id == caller.id)
            .order_by(Collection.id.desc())
        ))
        return apply_listing(rows, query, SEARCH_ATTRIBUTES)

    @staticmethod
    async def get(db: AsyncSession, caller: Caller, collection_id: int) -> Collection:
        return await COLLECTIONS.authorize(db, collection_id, caller)

    @staticmethod
    async def create(
        db: AsyncSession,
        caller: Caller,
        data: CollectionCreate,
        image: Optional[UploadFile] = None,
    ) -> Collection:
        image_path = await UploadService.save_image(image, "collections") if image else None

        collection = Collection(
            owner_id=caller.id,
            name=data.name,
            type=data.type,
            description=data.description,
            image=image_path,
        )
        if data.creation_date is not None:
            collection.creation_date = data.creation_date

        db.add(collection)
        await commit_or_fail(db, "create the collection", [image_path])
        await db.refresh(collection)

        logger.info("User %s created collection %s", caller.id, collection.id)
        return collection

    @staticmethod
    async def update(
        db: AsyncSession,
        caller: Caller,
        collection_id: int,
        data: CollectionUpdate,
    ) -> Collection:
        collection: Collection = await COLLECTIONS.authorize(db, collection_id, caller)

        for key, value in data.model_dump(exclude_unset=True).items():
            setattr(collection, key, value)

        await commit_or_fail(db, "update the collection")
        await db.refresh(collection)
        return collection

    @staticmethod
    async def set_image(db: AsyncSession, caller: Caller, collection_id: int, image: UploadFile) -> Collection:
        collection: Collection = await COLLECTIONS.authorize(db, collection_id, caller)

        new_image = await UploadService.save_image(image, "collections")
        old_image, collection.image = collection.image, new_image

        await commit_or_fail(db, "update the collection image", [new_image])
        await UploadService.discard([old_image])
        await db.refresh(collection)
        return collection

    @staticmethod
    async def delete(db: AsyncSession, caller: Caller, collection_id: int) -> int:
        """Delete a collection together with its items and events."""
        collection: Collection = await COLLECTIONS.authorize(db, collection_id, caller)

        images = [collection.image]
        images += list(await db.scalars(sa.select(Item.image).where(Item.collection_id == collection_id)))
        images += list(await db.scalars(sa.select(Event.image).where(Event.collection_id == collection_id)))

        await db.execute(sa.delete(Item).where(Item.collection_id == collection_id))
        await db.execute(sa.delete(Event).where(Event.collection_id == collection_id))
        await db.delete(collection)

        await commit_or_fail(db, "delete the collection")
        await UploadService.discard(images)

        logger.info("User %s deleted collection %s", caller.id, collection_id)
        return collection_id
