import sqlalchemy as sa

from collecta.db.base import Base


class RefreshToken(Base):
    __tablename__ = "refresh_tokens"

    id = sa.Column(sa.Integer, primary_key=True, autoincrement=True)
    user_id = sa.Column(sa.Integer, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    jti_hash = sa.Column(sa.String(64), nullable=False, unique=True, index=True)
    revoked = sa.Column(sa.Boolean, nullable=False, server_default=sa.false())

    expires_at = sa.Column(sa.DateTime(timezone=True), nullable=False, index=True)
    created_at = sa.Column(sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False)
