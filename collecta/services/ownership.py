"""Ownership chains for every user-owned resource.

Each resource resolves its owning user by following its foreign keys up to
``Collection.owner_id``. Handlers call :meth:`OwnershipChain.authorize` before
reading or writing a row; no handler compares owners on its own.
"""
import logging
from dataclasses import dataclass
from typing import Any, Sequence, Tuple

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncSession

from collecta.db.models.collection import Collection
from collecta.db.models.event import Event
from collecta.db.models.item import Item
from collecta.errors import Forbidden, NotFound
from collecta.services.auth_service import Caller

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OwnershipChain:
    model: Any
    label: str
    joins: Sequence[Tuple[Any, Any]] = ()

    def owner_statement(self, row_id: int) -> sa.Select:
        stmt = sa.select(self.model, Collection.owner_id)
        for target, onclause in self.joins:
            stmt = stmt.join(target, onclause)
        return stmt.where(self.model.id == row_id)

    async def resolve_owner(self, db: AsyncSession, row_id: int) -> Tuple[Any, int]:
        row = (await db.execute(self.owner_statement(row_id))).first()
        if row is None:
            raise NotFound(f"{self.label} not found.")

        return row[0], row[1]

    async def authorize(self, db: AsyncSession, row_id: int, caller: Caller):
        """Return the row ``row_id`` if ``caller`` owns it.

        Raises ``NotFound`` when the row is absent and ``Forbidden`` when it
        belongs to somebody else.
        """
        obj, owner_id = await self.resolve_owner(db, row_id)
        if owner_id != caller.id:
            logger.warning(
                "User %s denied access to %s %s owned by user %s",
                caller.id, self.label.lower(), row_id, owner_id
            )
            raise Forbidden(f"You do not own this {self.label.lower()}.")

        return obj


COLLECTIONS = OwnershipChain(Collection, "Collection")
ITEMS = OwnershipChain(Item, "Item", ((Collection, Item.collection_id == Collection.id),))
EVENTS = OwnershipChain(Event, "Event", ((Collection, Event.collection_id == Collection.id),))
