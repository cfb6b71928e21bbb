import sqlalchemy as sa

from collecta.db.base import Base


class Event(Base):
    __tablename__ = "events"
    __table_args__ = (
        sa.CheckConstraint("rating BETWEEN 0 AND 5", name="ck_events_rating_range"),
    )

    id = sa.Column(sa.Integer, primary_key=True, autoincrement=True)

    collection_id = sa.Column(
        sa.Integer,
        sa.ForeignKey("collections.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    name = sa.Column(sa.String(100), nullable=False)
    location = sa.Column(sa.String(200), nullable=False)
    date = sa.Column(sa.Date, nullable=False, index=True)
    description = sa.Column(sa.Text, nullable=True)
    rating = sa.Column(sa.SmallInteger, nullable=True)
    image = sa.Column(sa.String(256), nullable=True)

    created_at = sa.Column(sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False)
    updated_at = sa.Column(sa.DateTime(timezone=True), server_default=sa.func.now(), onupdate=sa.func.now(), nullable=False)
