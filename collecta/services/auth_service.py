import datetime as dt
import hashlib
import logging
import uuid
from dataclasses import dataclass
from typing import Optional

# noinspection PyPackageRequirements
from argon2 import PasswordHasher
from argon2.exceptions import VerificationError, InvalidHashError
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from jose import jwt, JWTError
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from collecta.config import config
from collecta.db.models.refresh_token import RefreshToken
from collecta.db.models.user import User
from collecta.db.session import get_db
from collecta.errors import Unauthenticated, InvalidInput, StorageFailure

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)
ph = PasswordHasher()


@dataclass(frozen=True)
class Caller:
    """Identity of the authenticated user making the current request."""
    id: int
    username: str


class AuthService:
    @staticmethod
    def hash_password(password: str) -> str:
        return ph.hash(password)

    @staticmethod
    def verify_password(password: str, hashed: str) -> bool:
        try:
            return ph.verify(hashed, password)
        except (VerificationError, InvalidHashError):
            return False

    @staticmethod
    def _make_jwt(sub: str, scope: str, ttl: dt.timedelta) -> str:
        now = dt.datetime.now(dt.timezone.utc)
        payload = {
            "iss": "collecta-auth",
            "sub": sub,
            "scope": scope,
            "iat": int(now.timestamp()),
            "exp": int((now + ttl).timestamp()),
            "jti": str(uuid.uuid4()),
        }
        return jwt.encode(payload, config.JWT_SECRET, algorithm=config.JWT_ALG)

    @staticmethod
    def _hash_jti(jti: str) -> str:
        return hashlib.sha256(jti.encode()).hexdigest()

    @classmethod
    def mint_access(cls, user_id: str) -> str:
        return cls._make_jwt(user_id, "access", dt.timedelta(minutes=config.ACCESS_TTL_MIN))

    @classmethod
    def mint_refresh(cls, user_id: str) -> str:
        return cls._make_jwt(user_id, "refresh", dt.timedelta(days=config.REFRESH_TTL_DAYS))

    @classmethod
    async def register(
        cls,
        db: AsyncSession,
        name: str,
        username: str,
        email: str,
        password: str,
        date_of_birth: Optional[dt.date] = None,
    ) -> User:
        existing = await db.scalar(
            select(User).where((User.username == username) | (User.email == email))
        )
        if existing:
            raise InvalidInput("Username or email is already in use.")

        user = User(
            name=name,
            username=username,
            email=email,
            date_of_birth=date_of_birth,
            hashed_password=cls.hash_password(password)
        )

        try:
            db.add(user)
            await db.commit()
        except IntegrityError as e:
            # Lost a race with a concurrent registration of the same name or email.
            await db.rollback()
            raise InvalidInput("Username or email is already in use.") from e
        except SQLAlchemyError as e:
            await db.rollback()
            logger.exception("Failed to register user %r", username)
            raise StorageFailure("Could not create the account.") from e

        await db.refresh(user)
        logger.info("Registered user %s (%r)", user.id, user.username)
        return user

    @classmethod
    async def login(cls, db: AsyncSession, username: str, password: str):
        user = await db.scalar(select(User).where(User.username == username))
        if not user or not cls.verify_password(password, user.hashed_password):
            raise Unauthenticated("Invalid credentials.")

        access = cls.mint_access(str(user.id))
        refresh = cls.mint_refresh(str(user.id))

        payload = jwt.get_unverified_claims(refresh)

        db.add(
            RefreshToken(
                user_id=user.id,
                jti_hash=cls._hash_jti(payload["jti"]),
                expires_at=dt.datetime.fromtimestamp(payload["exp"], tz=dt.timezone.utc)
            )
        )
        await db.commit()
        return access, refresh

    @classmethod
    async def verify_token(cls, token: str, db: AsyncSession) -> User:
        try:
            payload = jwt.decode(token, config.JWT_SECRET, algorithms=[config.JWT_ALG])
        except JWTError:
            raise Unauthenticated("Invalid token.")

        user_id = payload.get("sub")
        if not user_id or payload.get("scope") != "access":
            raise Unauthenticated("Invalid token.")

        try:
            user_id = int(user_id)
        except ValueError:
            raise Unauthenticated("Invalid token.")

        user = await db.scalar(select(User).where(User.id == user_id))
        if not user:
            raise Unauthenticated("User not found.")

        return user

    @classmethod
    async def get_current_user(
        cls,
        token: Optional[str] = Depends(oauth2_scheme),
        db: AsyncSession = Depends(get_db),
    ) -> User:
        if not token:
            raise Unauthenticated()

        return await cls.verify_token(token, db)

    @classmethod
    async def _find_refresh_token(cls, db: AsyncSession, refresh_token: str) -> RefreshToken:
        try:
            payload = jwt.decode(refresh_token, config.JWT_SECRET, algorithms=[config.JWT_ALG])
        except JWTError:
            raise Unauthenticated("Invalid refresh token.")

        if payload.get("scope") != "refresh":
            raise Unauthenticated("Invalid token scope.")

        if not payload.get("sub"):
            raise Unauthenticated("Missing subject claim.")

        db_token = await db.scalar(
            select(RefreshToken).where(
                RefreshToken.jti_hash == cls._hash_jti(payload["jti"]),
                RefreshToken.revoked.is_(False),
                RefreshToken.expires_at > dt.datetime.now(dt.timezone.utc)
            )
        )
        if not db_token:
            raise Unauthenticated("Refresh token invalid or expired.")

        return db_token

    @classmethod
    async def refresh(cls, db: AsyncSession, refresh_token: str):
        db_token = await cls._find_refresh_token(db, refresh_token)

        new_access = cls.mint_access(str(db_token.user_id))
        return {"access_token": new_access, "token_type": "bearer", "expires_in": config.ACCESS_TTL_MIN * 60}

    @classmethod
    async def logout(cls, db: AsyncSession, refresh_token: str) -> None:
        db_token = await cls._find_refresh_token(db, refresh_token)
        db_token.revoked = True
        await db.commit()


async def get_caller(user: User = Depends(AuthService.get_current_user)) -> Caller:
    return Caller(id=user.id, username=user.username)
