from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from collecta.db.models.user import User
from collecta.db.session import get_db
from collecta.errors import InvalidInput
from collecta.schemas import UserOut, UserUpdate
from collecta.services.auth_service import AuthService
from collecta.services.user_service import UserService
from collecta.utils.forms import sent_file

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me")
async def get_profile(user: User = Depends(AuthService.get_current_user)):
    return {"success": True, "user": UserOut.model_validate(user)}


@router.patch("/me")
async def update_profile(
    data: UserUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(AuthService.get_current_user),
):
    user = await UserService.update_profile(db, user, data)
    return {"success": True, "user": UserOut.model_validate(user)}


@router.post("/me/picture")
async def upload_picture(
    image: UploadFile = File(...),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(AuthService.get_current_user),
):
    if sent_file(image) is None:
        raise InvalidInput("No image was provided.")

    user = await UserService.set_picture(db, user, image)
    return {"success": True, "user": UserOut.model_validate(user)}


@router.get("/me/metrics")
async def get_metrics(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(AuthService.get_current_user),
):
    return {"success": True, "metrics": await UserService.metrics(db, user.id)}
