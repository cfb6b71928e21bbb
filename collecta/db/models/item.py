import sqlalchemy as sa

from collecta.db.base import Base


class Item(Base):
    __tablename__ = "items"
    __table_args__ = (
        sa.CheckConstraint("importance BETWEEN 0 AND 10", name="ck_items_importance_range"),
        sa.CheckConstraint("rating BETWEEN 0 AND 5", name="ck_items_rating_range"),
    )

    id = sa.Column(sa.Integer, primary_key=True, autoincrement=True)

    collection_id = sa.Column(
        sa.Integer,
        sa.ForeignKey("collections.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    name = sa.Column(sa.String(100), nullable=False)
    importance = sa.Column(sa.SmallInteger, nullable=True)
    weight = sa.Column(sa.Float, nullable=True)
    price = sa.Column(sa.Numeric(10, 2, asdecimal=False), nullable=True)
    date_of_acquisition = sa.Column(sa.Date, nullable=True)
    rating = sa.Column(sa.SmallInteger, nullable=True)
    description = sa.Column(sa.Text, nullable=True)
    image = sa.Column(sa.String(256), nullable=True)

    created_at = sa.Column(sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False)
    updated_at = sa.Column(sa.DateTime(timezone=True), server_default=sa.func.now(), onupdate=sa.func.now(), nullable=False)
