# coding: utf-8
"""
Places API Endpoints

Catalog of Saratov places with reviews. Reads are public; creating,
editing and reviewing need a session.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.auth import get_current_user
from src.database.engine import get_session
from src.database.models import User
from src.services.catalog_service import CatalogService

router = APIRouter(prefix="/places", tags=["places"])


# ===========================
# REQUEST MODELS
# ===========================


class PlaceCreateRequest(BaseModel):
    name: str = Field(..., min_length=2, max_length=200)
    description: Optional[str] = None
    category: str = Field(..., min_length=1, max_length=50)
    latitude: float
    longitude: float
    address: Optional[str] = Field(None, min_length=5, max_length=255)
    phone: Optional[str] = Field(None, max_length=20)
    website: Optional[str] = Field(None, max_length=255)
    image_url: Optional[str] = Field(None, max_length=255)


class PlaceUpdateRequest(BaseModel):
    """Every field optional; omitted fields keep their stored value"""

    name: Optional[str] = Field(None, min_length=2, max_length=200)
    description: Optional[str] = None
    category: Optional[str] = Field(None, min_length=1, max_length=50)
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    address: Optional[str] = Field(None, min_length=5, max_length=255)
    phone: Optional[str] = Field(None, max_length=20)
    website: Optional[str] = Field(None, max_length=255)
    image_url: Optional[str] = Field(None, max_length=255)


class ReviewCreateRequest(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=500)


# ===========================
# ENDPOINTS
# ===========================


@router.get("")
async def list_places(
    session: AsyncSession = Depends(get_session),
    category: Optional[str] = Query(None, description="Exact category id"),
    search: Optional[str] = Query(None, description="Substring of name or description"),
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
):
    return await CatalogService.list_places(
        session, category=category, search=search, limit=limit, offset=offset
    )


# Registered before /{place_id} so "categories" is not parsed as an id
@router.get("/categories/list")
async def list_categories():
    return {"categories": CatalogService.list_categories()}


@router.get("/{place_id}")
async def get_place(
    place_id: int,
    session: AsyncSession = Depends(get_session),
):
    return {"place": await CatalogService.get_place(session, place_id)}


@router.post("", status_code=201)
async def create_place(
    request: PlaceCreateRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    place = await CatalogService.create_place(session, user, **request.model_dump())
    return {"message": "Place created successfully", "place": place}


@router.put("/{place_id}")
async def update_place(
    place_id: int,
    request: PlaceUpdateRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    place = await CatalogService.update_place(
        session, place_id, user, **request.model_dump(exclude_unset=True)
    )
    return {"message": "Place updated successfully", "place": place}


@router.post("/{place_id}/reviews", status_code=201)
async def add_review(
    place_id: int,
    request: ReviewCreateRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    review = await CatalogService.add_review(
        session, place_id, user.id, rating=request.rating, comment=request.comment
    )
    return {"message": "Review added successfully", "review": review}
