import uuid
from datetime import datetime
from decimal import Decimal
from typing import Literal
from pydantic import BaseModel, ConfigDict


class PropertyBase(BaseModel):
    title: str
    description: str = ""
    listing_type: Literal["sale", "rent"] = "sale"
    status: Literal["available", "sold", "rented", "pending", "draft"] = "available"
    price: Decimal
    monthly_rent: Decimal | None = None
    currency: str = "BDT"
    bedrooms: int | None = None
    bathrooms: int | None = None
    area_sqft: Decimal | None = None
    address: str
    is_furnished: bool = False
    has_parking: bool = False
    pet_friendly: bool = False
    is_featured: bool = False
    property_type_id: uuid.UUID
    location_id: uuid.UUID
    agent_id: uuid.UUID


class PropertyCreate(PropertyBase):
    slug: str | None = None


class Property(PropertyBase):
    id: uuid.UUID
    slug: str
    team_id: uuid.UUID
    views_count: int
    favorites_count: int
    inquiries_count: int
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


class FavoriteToggle(BaseModel):
    favorited: bool
    favorites_count: int


class InquiryCreate(BaseModel):
    name: str
    email: str
    phone: str | None = None
    message: str
    inquiry_type: Literal["general", "viewing", "offer", "financing"] = "general"


class InquiryRespond(BaseModel):
    status: Literal["contacted", "responded", "closed"] = "responded"
    agent_notes: str | None = None


class Inquiry(InquiryCreate):
    id: uuid.UUID
    property_id: uuid.UUID
    user_id: uuid.UUID | None = None
    status: str
    agent_notes: str | None = None
    responded_at: datetime | None = None
    responded_by: uuid.UUID | None = None
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)
