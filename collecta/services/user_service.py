import logging

import sqlalchemy as sa
from fastapi import UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from collecta.db.models.collection import Collection
from collecta.db.models.item import Item
from collecta.db.models.user import User
from collecta.errors import InvalidInput
from collecta.schemas import UserUpdate, MetricsOut
from collecta.services.transactions import commit_or_fail
from collecta.services.upload_service import UploadService

logger = logging.getLogger(__name__)


class UserService:
    @staticmethod
    async def update_profile(db: AsyncSession, user: User, data: UserUpdate) -> User:
        changes = data.model_dump(exclude_unset=True)

        clashes = []
        if "username" in changes and changes["username"] != user.username:
            clashes.append(User.username == changes["username"])
        if "email" in changes and changes["email"] != user.email:
            clashes.append(User.email == changes["email"])

        if clashes:
            taken = await db.scalar(sa.select(User.id).where(sa.or_(*clashes), User.id != user.id))
            if taken:
                raise InvalidInput("Username or email is already in use.")

        for key, value in changes.items():
            setattr(user, key, value)

        await commit_or_fail(db, "update the profile", conflict="Username or email is already in use.")
        await db.refresh(user)
        return user

    @staticmethod
    async def set_picture(db: AsyncSession, user: User, image: UploadFile) -> User:
        new_image = await UploadService.save_image(image, "users")
        old_image, user.profile_picture = user.profile_picture, new_image

        await commit_or_fail(db, "update the profile picture", [new_image])
        await UploadService.discard([old_image])
        await db.refresh(user)
        return user

    @staticmethod
    async def metrics(db: AsyncSession, user_id: int) -> MetricsOut:
        total_collections = await db.scalar(
            sa.select(sa.func.count()).select_from(Collection).where(Collection.owner_id == user_id)
        )

        owned_items = (
            sa.select(sa.func.count(Item.id), sa.func.avg(sa.func.coalesce(Item.rating, Item.importance)))
            .join(Collection, Item.collection_id == Collection.id)
            .where(Collection.owner_id == user_id)
        )
        total_items, average = (await db.execute(owned_items)).one()

        return MetricsOut(
            total_collections=total_collections or 0,
            total_items=total_items or 0,
            average_rating=round(float(average), 2) if average is not None else 0,
        )
