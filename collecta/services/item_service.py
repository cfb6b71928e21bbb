import datetime as dt
import logging
from typing import List, Optional

import sqlalchemy as sa
from fastapi import UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from collecta.config import config
from collecta.db.models.item import Item
from collecta.schemas import ItemCreate, ItemUpdate
from collecta.services.auth_service import Caller
from collecta.services.ownership import COLLECTIONS, ITEMS
from collecta.services.transactions import commit_or_fail
from collecta.services.upload_service import UploadService
from collecta.utils.listing import ListQuery, Page, apply_listing

logger = logging.getLogger(__name__)

SEARCH_ATTRIBUTES = ("name", "description")


def is_high_importance(item: Item) -> bool:
    return (item.importance or 0) >= config.HIGH_IMPORTANCE_THRESHOLD


def acquisition_sort_key(item: Item):
    return item.date_of_acquisition or dt.date.min, item.id


class ItemService:
    @staticmethod
    async def list_by_collection(
        db: AsyncSession,
        caller: Caller,
        collection_id: int,
        query: ListQuery,
    ) -> Page[Item]:
        await COLLECTIONS.authorize(db, collection_id, caller)

        rows: List[Item] = list(await db.scalars(
            sa.select(Item)
            .where(Item.collection_id == collection_id)
            .order_by(Item.id.desc())
        ))
        return apply_listing(rows, query, SEARCH_ATTRIBUTES)

    @staticmethod
    async def get(db: AsyncSession, caller: Caller, item_id: int) -> Item:
        return await ITEMS.authorize(db, item_id, caller)

    @staticmethod
    async def create(
        db: AsyncSession,
        caller: Caller,
        data: ItemCreate,
        image: Optional[UploadFile] = None,
    ) -> Item:
        await COLLECTIONS.authorize(db, data.collection_id, caller)

        image_path = await UploadService.save_image(image, "items") if image else None

        item = Item(**data.model_dump(), image=image_path)
        db.add(item)
        await commit_or_fail(db, "create the item", [image_path])
        await db.refresh(item)

        logger.info("User %s created item %s in collection %s", caller.id, item.id, item.collection_id)
        return item

    @staticmethod
    async def update(
        db: AsyncSession,
        caller: Caller,
        item_id: int,
        data: ItemUpdate,
    ) -> Item:
        item: Item = await ITEMS.authorize(db, item_id, caller)

        changes = data.model_dump(exclude_unset=True)
        target = changes.get("collection_id")
        if target is not None and target != item.collection_id:
            await COLLECTIONS.authorize(db, target, caller)

        for key, value in changes.items():
            setattr(item, key, value)

        await commit_or_fail(db, "update the item")
        await db.refresh(item)
        return item

    @staticmethod
    async def set_image(db: AsyncSession, caller: Caller, item_id: int, image: UploadFile) -> Item:
        item: Item = await ITEMS.authorize(db, item_id, caller)

        new_image = await UploadService.save_image(image, "items")
        old_image, item.image = item.image, new_image

        await commit_or_fail(db, "update the item image", [new_image])
        await UploadService.discard([old_image])
        await db.refresh(item)
        return item

    @staticmethod
    async def rate(db: AsyncSession, caller: Caller, item_id: int, rating: Optional[int]) -> Item:
        item: Item = await ITEMS.authorize(db, item_id, caller)
        item.rating = rating

        await commit_or_fail(db, "rate the item")
        await db.refresh(item)
        return item

    @staticmethod
    async def delete(db: AsyncSession, caller: Caller, item_id: int) -> int:
        item: Item = await ITEMS.authorize(db, item_id, caller)
        image = item.image

        await db.delete(item)
        await commit_or_fail(db, "delete the item")
        await UploadService.discard([image])

        logger.info("User %s deleted item %s", caller.id, item_id)
        return item_id
