from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from starlette import status

from collecta.config import config
from collecta.db.session import get_db
from collecta.schemas import RegisterIn, LoginIn, RefreshIn, TokenOut, UserOut
from collecta.services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(credentials: RegisterIn, db: AsyncSession = Depends(get_db)):
    user = await AuthService.register(
        db,
        name=credentials.name,
        username=credentials.username,
        email=str(credentials.email),
        password=credentials.password,
        date_of_birth=credentials.date_of_birth,
    )
    return {"success": True, "user": UserOut.model_validate(user)}


@router.post("/login", response_model=TokenOut, status_code=status.HTTP_200_OK)
async def login(credentials: LoginIn, db: AsyncSession = Depends(get_db)):
    access, refresh = await AuthService.login(db, credentials.username, credentials.password)
    return TokenOut(access_token=access, refresh_token=refresh, expires_in=config.ACCESS_TTL_MIN * 60)


@router.post("/refresh", response_model=TokenOut, status_code=status.HTTP_200_OK)
async def refresh(body: RefreshIn, db: AsyncSession = Depends(get_db)):
    data = await AuthService.refresh(db, body.refresh_token)
    return TokenOut(
        access_token=data["access_token"],
        refresh_token=body.refresh_token,
        expires_in=data["expires_in"]
    )


@router.post("/logout", status_code=status.HTTP_200_OK)
async def logout(body: RefreshIn, db: AsyncSession = Depends(get_db)):
    await AuthService.logout(db, body.refresh_token)
    return {"success": True}
