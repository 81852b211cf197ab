"""
Property listings: search filters, favorites and inquiries.
"""
import logging
import uuid
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Query, Session

from realtyhub.db import models
from realtyhub.db.database import transaction
from realtyhub.errors import NotFound, Validator
from realtyhub.utils.slugs import unique_slug

logger = logging.getLogger(__name__)

LISTING_TYPES = ("sale", "rent")
PROPERTY_STATUSES = ("available", "sold", "rented", "pending", "draft")
INQUIRY_TYPES = ("general", "viewing", "offer", "financing")
INQUIRY_STATUSES = ("pending", "contacted", "responded", "closed")


# ---- query helpers ---------------------------------------------------------------

def available(query: Query) -> Query:
    return query.filter(models.Property.status == "available")


def featured(query: Query) -> Query:
    return query.filter(models.Property.is_featured.is_(True))


def for_sale(query: Query) -> Query:
    return query.filter(models.Property.listing_type == "sale")


def for_rent(query: Query) -> Query:
    return query.filter(models.Property.listing_type == "rent")


def price_range(query: Query, min_price: Optional[Decimal] = None, max_price: Optional[Decimal] = None) -> Query:
    if min_price is not None:
        query = query.filter(models.Property.price >= min_price)
    if max_price is not None:
        query = query.filter(models.Property.price <= max_price)
    return query


def with_bedrooms(query: Query, bedrooms: int) -> Query:
    return query.filter(models.Property.bedrooms >= bedrooms)


def with_bathrooms(query: Query, bathrooms: int) -> Query:
    return query.filter(models.Property.bathrooms >= bathrooms)


def search_properties(
    db: Session,
    *,
    listing_type: Optional[str] = None,
    min_price: Optional[Decimal] = None,
    max_price: Optional[Decimal] = None,
    bedrooms: Optional[int] = None,
    bathrooms: Optional[int] = None,
    location_id: Optional[uuid.UUID] = None,
    property_type_id: Optional[uuid.UUID] = None,
    featured_only: bool = False,
    skip: int = 0,
    limit: int = 20,
) -> List[models.Property]:
    """Available properties matching the filters, featured first then newest."""
    query = available(db.query(models.Property))
    if listing_type == "sale":
        query = for_sale(query)
    elif listing_type == "rent":
        query = for_rent(query)
    query = price_range(query, min_price, max_price)
    if bedrooms is not None:
        query = with_bedrooms(query, bedrooms)
    if bathrooms is not None:
        query = with_bathrooms(query, bathrooms)
    if location_id is not None:
        query = query.filter(models.Property.location_id == location_id)
    if property_type_id is not None:
        query = query.filter(models.Property.property_type_id == property_type_id)
    if featured_only:
        query = featured(query)
    return (
        query.order_by(models.Property.is_featured.desc(), models.Property.created_at.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )


def get_by_slug(db: Session, slug: str) -> models.Property:
    prop = db.query(models.Property).filter(models.Property.slug == slug).first()
    if prop is None:
        raise NotFound("Property not found")
    return prop


def formatted_price(prop: models.Property) -> str:
    return f"{int(prop.price):,} {prop.currency}"


# ---- writes ----------------------------------------------------------------------

def create_property(db: Session, data: Dict[str, Any]) -> models.Property:
    v = Validator()
    if v.required("title", data.get("title")):
        v.max_length("title", data["title"], 255)
    v.required("address", data.get("address"))
    v.required("price", data.get("price"))
    v.one_of("listing_type", data.get("listing_type", "sale"), LISTING_TYPES)
    v.one_of("status", data.get("status", "available"), PROPERTY_STATUSES)
    for field in ("property_type_id", "location_id", "agent_id"):
        v.required(field, data.get(field))
    v.validate()

    # Related records must be visible in the current team
    for model, field in ((models.PropertyType, "property_type_id"), (models.Location, "location_id"), (models.Agent, "agent_id")):
        if db.query(model.id).filter(model.id == data[field]).first() is None:
            raise NotFound(f"{model.__name__} not found")

    with transaction(db):
        payload = dict(data)
        payload["slug"] = unique_slug(db, models.Property, payload.get("slug") or payload["title"])
        prop = models.Property(**payload)
        db.add(prop)
        db.flush()
    logger.info("property_created: %s slug=%s team=%s", prop.id, prop.slug, prop.team_id)
    return prop


def increment_views(db: Session, prop: models.Property) -> None:
    with transaction(db):
        prop.views_count = models.Property.views_count + 1


def is_favorited(db: Session, user: models.User, prop: models.Property) -> bool:
    return (
        db.query(models.Favorite.id)
        .filter(models.Favorite.user_id == user.id, models.Favorite.property_id == prop.id)
        .first()
        is not None
    )


def toggle_favorite(db: Session, user: models.User, prop: models.Property) -> bool:
    """Add or remove the favorite; returns True when the property is now favorited."""
    with transaction(db):
        favorite = (
            db.query(models.Favorite)
            .filter(models.Favorite.user_id == user.id, models.Favorite.property_id == prop.id)
            .first()
        )
        if favorite is not None:
            db.delete(favorite)
            prop.favorites_count = models.Property.favorites_count - 1
            favorited = False
        else:
            db.add(models.Favorite(user_id=user.id, property_id=prop.id))
            prop.favorites_count = models.Property.favorites_count + 1
            favorited = True
    return favorited


def favorite_property_ids(db: Session, user: models.User) -> List[uuid.UUID]:
    rows = db.query(models.Favorite.property_id).filter(models.Favorite.user_id == user.id).all()
    return [r[0] for r in rows]


def create_inquiry(db: Session, prop: models.Property, data: Dict[str, Any], user: Optional[models.User] = None) -> models.Inquiry:
    v = Validator()
    if v.required("name", data.get("name")):
        v.max_length("name", data["name"], 255)
    if v.required("email", data.get("email")):
        v.email("email", data["email"])
    v.required("message", data.get("message"))
    v.one_of("inquiry_type", data.get("inquiry_type", "general"), INQUIRY_TYPES)
    v.validate()

    with transaction(db):
        inquiry = models.Inquiry(
            property_id=prop.id,
            team_id=prop.team_id,
            user_id=user.id if user else None,
            name=data["name"],
            email=data["email"],
            phone=data.get("phone"),
            message=data["message"],
            inquiry_type=data.get("inquiry_type") or "general",
        )
        db.add(inquiry)
        prop.inquiries_count = models.Property.inquiries_count + 1
        db.flush()
    logger.info("inquiry_created: %s property=%s type=%s", inquiry.id, prop.id, inquiry.inquiry_type)
    return inquiry


def respond_to_inquiry(
    db: Session, inquiry: models.Inquiry, responder: models.User, notes: Optional[str] = None, status: str = "responded",
) -> models.Inquiry:
    v = Validator()
    v.one_of("status", status, INQUIRY_STATUSES)
    v.validate()
    with transaction(db):
        inquiry.status = status
        inquiry.responded_at = models.now_utc()
        inquiry.responded_by = responder.id
        inquiry.agent_notes = notes
    return inquiry
