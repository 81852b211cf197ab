"""
Property listing endpoints, scoped to the caller's active team.
"""
import uuid
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from realtyhub import rbac
from realtyhub.api.deps import get_current_team, get_current_user_context
from realtyhub.db import models, schemas
from realtyhub.db.database import get_db
from realtyhub.services import listings


router = APIRouter(prefix="/properties", tags=["properties"])


def _require(db: Session, user: models.User, permission: str) -> None:
    if not rbac.user_can(db, user, permission):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="This action is unauthorized.")


@router.get("/", response_model=List[schemas.Property])
def list_properties(
    listing_type: Optional[str] = None,
    min_price: Optional[Decimal] = None,
    max_price: Optional[Decimal] = None,
    bedrooms: Optional[int] = None,
    bathrooms: Optional[int] = None,
    location_id: Optional[uuid.UUID] = None,
    property_type_id: Optional[uuid.UUID] = None,
    featured: bool = False,
    skip: int = 0,
    limit: int = 20,
    db: Session = Depends(get_db),
    team: models.Team = Depends(get_current_team),
):
    return listings.search_properties(
        db,
        listing_type=listing_type,
        min_price=min_price,
        max_price=max_price,
        bedrooms=bedrooms,
        bathrooms=bathrooms,
        location_id=location_id,
        property_type_id=property_type_id,
        featured_only=featured,
        skip=skip,
        limit=min(limit, 100),
    )


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=schemas.Property)
def create_property(
    payload: schemas.PropertyCreate,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
    team: models.Team = Depends(get_current_team),
):
    user, _ = user_context
    _require(db, user, "create properties")
    return listings.create_property(db, payload.model_dump())


@router.get("/favorites", response_model=List[uuid.UUID])
def list_favorites(
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    user, _ = user_context
    return listings.favorite_property_ids(db, user)


@router.get("/{slug}", response_model=schemas.Property)
def get_property(
    slug: str,
    db: Session = Depends(get_db),
    team: models.Team = Depends(get_current_team),
):
    prop = listings.get_by_slug(db, slug)
    listings.increment_views(db, prop)
    return prop


@router.post("/{slug}/favorite", response_model=schemas.FavoriteToggle)
def toggle_favorite(
    slug: str,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
    team: models.Team = Depends(get_current_team),
):
    user, _ = user_context
    prop = listings.get_by_slug(db, slug)
    favorited = listings.toggle_favorite(db, user, prop)
    return {"favorited": favorited, "favorites_count": prop.favorites_count}


@router.post("/{slug}/inquiries", status_code=status.HTTP_201_CREATED, response_model=schemas.Inquiry)
def create_inquiry(
    slug: str,
    payload: schemas.InquiryCreate,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
    team: models.Team = Depends(get_current_team),
):
    user, _ = user_context
    prop = listings.get_by_slug(db, slug)
    return listings.create_inquiry(db, prop, payload.model_dump(), user=user)


@router.get("/{slug}/inquiries", response_model=List[schemas.Inquiry])
def list_inquiries(
    slug: str,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
    team: models.Team = Depends(get_current_team),
):
    user, _ = user_context
    _require(db, user, "view inquiries")
    prop = listings.get_by_slug(db, slug)
    return (
        db.query(models.Inquiry)
        .filter(models.Inquiry.property_id == prop.id)
        .order_by(models.Inquiry.created_at.desc())
        .all()
    )


@router.put("/inquiries/{inquiry_id}", response_model=schemas.Inquiry)
def respond_to_inquiry(
    inquiry_id: uuid.UUID,
    payload: schemas.InquiryRespond,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
    team: models.Team = Depends(get_current_team),
):
    user, _ = user_context
    _require(db, user, "edit inquiries")
    inquiry = db.query(models.Inquiry).filter(models.Inquiry.id == inquiry_id).first()
    if inquiry is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Inquiry not found")
    return listings.respond_to_inquiry(db, inquiry, user, notes=payload.agent_notes, status=payload.status)
