import datetime as dt

import sqlalchemy as sa

from collecta.db.base import Base


class Collection(Base):
    __tablename__ = "collections"

    id = sa.Column(sa.Integer, primary_key=True, autoincrement=True)
    owner_id = sa.Column(
        sa.Integer,
        sa.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    name = sa.Column(sa.String(100), nullable=False)
    type = sa.Column(sa.String(64), nullable=True)
    description = sa.Column(sa.Text, nullable=True)
    creation_date = sa.Column(sa.Date, nullable=False, default=dt.date.today)
    image = sa.Column(sa.String(256), nullable=True)

    created_at = sa.Column(sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False)
    updated_at = sa.Column(sa.DateTime(timezone=True), server_default=sa.func.now(), onupdate=sa.func.now(), nullable=False)
