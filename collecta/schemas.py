"""
Request and response schemas.

Create models are read from HTML form fields, update models from JSON bodies.
Blank strings are read as "not given / cleared", matching what browsers send
for untouched inputs. Update models are applied with ``exclude_unset=True``, so
only the fields present in the request change; any field not declared here
(owner, ids, timestamps) is ignored.
"""
import datetime as dt
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

# Largest value the integer id columns hold.
MAX_ID = 2**31 - 1


class InputModel(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    @model_validator(mode="before")
    @classmethod
    def blank_to_none(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data

        return {
            key: None if isinstance(value, str) and not value.strip() else value
            for key, value in data.items()
        }


def _reject_null(value, info):
    if value is None:
        raise ValueError(f"{info.field_name} cannot be empty")
    return value


# Auth & users

class RegisterIn(InputModel):
    name: str = Field(..., min_length=1, max_length=100, description="Display name")
    username: str = Field(..., min_length=3, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6)
    date_of_birth: Optional[dt.date] = None


class LoginIn(BaseModel):
    username: str
    password: str


class RefreshIn(BaseModel):
    refresh_token: str


class TokenOut(BaseModel):
    token_type: str = "bearer"
    access_token: str
    expires_in: int
    refresh_token: str


class UserUpdate(InputModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    username: Optional[str] = Field(None, min_length=3, max_length=50)
    email: Optional[EmailStr] = None
    date_of_birth: Optional[dt.date] = None

    @field_validator("name", "username", "email")
    @classmethod
    def reject_null(cls, value, info):
        return _reject_null(value, info)


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    username: str
    email: str
    date_of_birth: Optional[dt.date] = None
    date_of_registration: dt.date
    profile_picture: Optional[str] = None


class MetricsOut(BaseModel):
    total_collections: int
    total_items: int
    average_rating: float


# Collections

class CollectionCreate(InputModel):
    name: str = Field(..., min_length=1, max_length=100, description="Collection name")
    type: Optional[str] = Field(None, max_length=64, description="Free-form category, e.g. 'Coins'")
    description: Optional[str] = None
    creation_date: Optional[dt.date] = Field(None, description="Defaults to today")


class CollectionUpdate(InputModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    type: Optional[str] = Field(None, max_length=64)
    description: Optional[str] = None
    creation_date: Optional[dt.date] = None

    @field_validator("name", "creation_date")
    @classmethod
    def reject_null(cls, value, info):
        return _reject_null(value, info)


class CollectionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    owner_id: int
    name: str
    type: Optional[str] = None
    description: Optional[str] = None
    creation_date: dt.date
    image: Optional[str] = None


# Items

class ItemFields(InputModel):
    importance: Optional[int] = Field(None, ge=0, le=10, description="0 (common) to 10 (rarest)")
    weight: Optional[float] = Field(None, ge=0)
    price: Optional[float] = Field(None, ge=0)
    date_of_acquisition: Optional[dt.date] = None
    rating: Optional[int] = Field(None, ge=0, le=5, description="0 to 5 stars, null when unrated")
    description: Optional[str] = None


class ItemCreate(ItemFields):
    collection_id: int = Field(..., gt=0, le=MAX_ID)
    name: str = Field(..., min_length=1, max_length=100)


class ItemUpdate(ItemFields):
    collection_id: Optional[int] = Field(None, gt=0, le=MAX_ID)
    name: Optional[str] = Field(None, min_length=1, max_length=100)

    @field_validator("collection_id", "name")
    @classmethod
    def reject_null(cls, value, info):
        return _reject_null(value, info)


class ItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    collection_id: int
    name: str
    importance: Optional[int] = None
    weight: Optional[float] = None
    price: Optional[float] = None
    date_of_acquisition: Optional[dt.date] = None
    rating: Optional[int] = None
    description: Optional[str] = None
    image: Optional[str] = None


# Events

class EventCreate(InputModel):
    collection_id: int = Field(..., gt=0, le=MAX_ID)
    name: str = Field(..., min_length=1, max_length=100)
    location: str = Field(..., min_length=1, max_length=200)
    date: dt.date
    description: Optional[str] = None
    rating: Optional[int] = Field(None, ge=0, le=5)


class EventUpdate(InputModel):
    collection_id: Optional[int] = Field(None, gt=0, le=MAX_ID)
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    location: Optional[str] = Field(None, min_length=1, max_length=200)
    date: Optional[dt.date] = None
    description: Optional[str] = None
    rating: Optional[int] = Field(None, ge=0, le=5)

    @field_validator("collection_id", "name", "location", "date")
    @classmethod
    def reject_null(cls, value, info):
        return _reject_null(value, info)


class EventOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    collection_id: int
    collection_name: Optional[str] = None
    name: str
    location: str
    date: dt.date
    description: Optional[str] = None
    rating: Optional[int] = None
    image: Optional[str] = None


class RatingIn(InputModel):
    rating: Optional[int] = Field(..., ge=0, le=5, description="null clears the rating")
