import dataclasses
from typing import Optional

from fastapi import APIRouter, Depends, File, Path, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession
from starlette import status

from collecta.db.session import get_db
from collecta.schemas import MAX_ID, CollectionCreate, CollectionUpdate, CollectionOut
from collecta.services.auth_service import Caller, get_caller
from collecta.services.collection_service import CollectionService
from collecta.utils.forms import as_form, sent_file
from collecta.utils.listing import ListQuery, list_query

router = APIRouter(prefix="/collections", tags=["collections"])


@router.get("", status_code=status.HTTP_200_OK)
async def list_collections(
    type: Optional[str] = Query(None, max_length=64),
    query: ListQuery = Depends(list_query),
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    if type:
        wanted = type.lower()
        query = dataclasses.replace(query, predicates=[lambda c: (c.type or "").lower() == wanted])

    page = await CollectionService.list_owned(db, caller, query)
    return page.envelope("collections", CollectionOut.model_validate)


@router.get("/{collection_id}", status_code=status.HTTP_200_OK)
async def get_collection(
    collection_id: int = Path(..., gt=0, le=MAX_ID),
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    collection = await CollectionService.get(db, caller, collection_id)
    return {"success": True, "collection": CollectionOut.model_validate(collection)}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_collection(
    data: CollectionCreate = Depends(as_form(CollectionCreate)),
    image: Optional[UploadFile] = File(None),
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    collection = await CollectionService.create(db, caller, data, sent_file(image))
    return {"success": True, "collection": CollectionOut.model_validate(collection)}


@router.patch("/{collection_id}", status_code=status.HTTP_200_OK)
async def update_collection(
    data: CollectionUpdate,
    collection_id: int = Path(..., gt=0, le=MAX_ID),
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    collection = await CollectionService.update(db, caller, collection_id, data)
    return {"success": True, "collection": CollectionOut.model_validate(collection)}


@router.put("/{collection_id}/image", status_code=status.HTTP_200_OK)
async def replace_collection_image(
    collection_id: int = Path(..., gt=0, le=MAX_ID),
    image: UploadFile = File(...),
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    collection = await CollectionService.set_image(db, caller, collection_id, image)
    return {"success": True, "collection": CollectionOut.model_validate(collection)}


@router.delete("/{collection_id}", status_code=status.HTTP_200_OK)
async def delete_collection(
    collection_id: int = Path(..., gt=0, le=MAX_ID),
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    deleted_id = await CollectionService.delete(db, caller, collection_id)
    return {"success": True, "deleted_id": deleted_id}
