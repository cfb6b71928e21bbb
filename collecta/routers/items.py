import dataclasses
from typing import Optional

from fastapi import APIRouter, Depends, File, Path, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession
from starlette import status

from collecta.db.session import get_db
from collecta.schemas import MAX_ID, ItemCreate, ItemUpdate, ItemOut, RatingIn
from collecta.services.auth_service import Caller, get_caller
from collecta.services.item_service import ItemService, is_high_importance, acquisition_sort_key
from collecta.utils.forms import as_form, sent_file
from collecta.utils.listing import ListQuery, list_query

router = APIRouter(prefix="/items", tags=["items"])


@router.get("", status_code=status.HTTP_200_OK)
async def list_items(
    collection_id: int = Query(..., gt=0, le=MAX_ID),
    rarity: str = Query("", pattern="^(high)?$"),
    recent: bool = Query(False),
    query: ListQuery = Depends(list_query),
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    if rarity == "high":
        query = dataclasses.replace(query, predicates=[is_high_importance])
    if recent:
        query = dataclasses.replace(query, sort_key=acquisition_sort_key, sort_descending=True)

    page = await ItemService.list_by_collection(db, caller, collection_id, query)
    return page.envelope("items", ItemOut.model_validate)


@router.get("/{item_id}", status_code=status.HTTP_200_OK)
async def get_item(
    item_id: int = Path(..., gt=0, le=MAX_ID),
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    item = await ItemService.get(db, caller, item_id)
    return {"success": True, "item": ItemOut.model_validate(item)}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_item(
    data: ItemCreate = Depends(as_form(ItemCreate)),
    image: Optional[UploadFile] = File(None),
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    item = await ItemService.create(db, caller, data, sent_file(image))
    return {"success": True, "item": ItemOut.model_validate(item)}


@router.patch("/{item_id}", status_code=status.HTTP_200_OK)
async def update_item(
    data: ItemUpdate,
    item_id: int = Path(..., gt=0, le=MAX_ID),
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    item = await ItemService.update(db, caller, item_id, data)
    return {"success": True, "item": ItemOut.model_validate(item)}


@router.put("/{item_id}/image", status_code=status.HTTP_200_OK)
async def replace_item_image(
    item_id: int = Path(..., gt=0, le=MAX_ID),
    image: UploadFile = File(...),
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    item = await ItemService.set_image(db, caller, item_id, image)
    return {"success": True, "item": ItemOut.model_validate(item)}


@router.post("/{item_id}/rating", status_code=status.HTTP_200_OK)
async def rate_item(
    body: RatingIn,
    item_id: int = Path(..., gt=0, le=MAX_ID),
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    item = await ItemService.rate(db, caller, item_id, body.rating)
    return {"success": True, "item": ItemOut.model_validate(item)}


@router.delete("/{item_id}", status_code=status.HTTP_200_OK)
async def delete_item(
    item_id: int = Path(..., gt=0, le=MAX_ID),
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    deleted_id = await ItemService.delete(db, caller, item_id)
    return {"success": True, "deleted_id": deleted_id}
