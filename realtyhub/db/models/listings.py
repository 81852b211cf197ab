import uuid
from sqlalchemy import (
    Column, String, Text, DateTime, Boolean, Integer, Numeric, ForeignKey, Index, CheckConstraint, UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import UUID, JSONB
from sqlalchemy.orm import relationship
from .base import Base, now_utc
from ..team_scope import TeamOwnedMixin


class PropertyType(TeamOwnedMixin, Base):
    __tablename__ = 'property_types'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False, unique=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)


class Location(TeamOwnedMixin, Base):
    __tablename__ = 'locations'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False, unique=True)
    city = Column(String(255), nullable=True)
    state = Column(String(255), nullable=True)
    country = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)


class Agent(TeamOwnedMixin, Base):
    __tablename__ = 'agents'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True)
    phone = Column(String(50), nullable=True)
    license_number = Column(String(100), nullable=True, unique=True)
    bio = Column(Text, nullable=True)
    social_media = Column(JSONB, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    commission_rate = Column(Numeric(5, 2), nullable=False, default=5)
    experience_years = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), default=now_utc)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)


class Property(TeamOwnedMixin, Base):
    __tablename__ = 'properties'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False, unique=True)
    description = Column(Text, nullable=False, default='')
    listing_type = Column(String(10), nullable=False, default='sale')  # sale|rent
    status = Column(String(20), nullable=False, default='available')  # available|sold|rented|pending|draft
    price = Column(Numeric(15, 2), nullable=False)
    monthly_rent = Column(Numeric(15, 2), nullable=True)
    currency = Column(String(3), nullable=False, default='BDT')
    bedrooms = Column(Integer, nullable=True)
    bathrooms = Column(Integer, nullable=True)
    area_sqft = Column(Numeric(10, 2), nullable=True)
    address = Column(String(500), nullable=False)
    latitude = Column(Numeric(10, 8), nullable=True)
    longitude = Column(Numeric(11, 8), nullable=True)
    is_furnished = Column(Boolean, nullable=False, default=False)
    has_parking = Column(Boolean, nullable=False, default=False)
    pet_friendly = Column(Boolean, nullable=False, default=False)
    is_featured = Column(Boolean, nullable=False, default=False)
    property_type_id = Column(UUID(as_uuid=True), ForeignKey('property_types.id', ondelete='CASCADE'), nullable=False)
    location_id = Column(UUID(as_uuid=True), ForeignKey('locations.id', ondelete='CASCADE'), nullable=False)
    agent_id = Column(UUID(as_uuid=True), ForeignKey('agents.id', ondelete='CASCADE'), nullable=False)
    views_count = Column(Integer, nullable=False, default=0)
    favorites_count = Column(Integer, nullable=False, default=0)
    inquiries_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), default=now_utc)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    property_type = relationship('PropertyType')
    location = relationship('Location')
    agent = relationship('Agent')
    inquiries = relationship('Inquiry', back_populates='property', cascade='all, delete-orphan')
    favorites = relationship('Favorite', back_populates='property', cascade='all, delete-orphan')

    __table_args__ = (
        Index('ix_properties_status_listing_type', 'status', 'listing_type'),
        Index('ix_properties_price_listing_type', 'price', 'listing_type'),
        Index('ix_properties_is_featured_status', 'is_featured', 'status'),
        CheckConstraint("listing_type in ('sale','rent')", name='ck_properties_listing_type'),
        CheckConstraint("status in ('available','sold','rented','pending','draft')", name='ck_properties_status'),
    )


class Inquiry(TeamOwnedMixin, Base):
    __tablename__ = 'inquiries'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    property_id = Column(UUID(as_uuid=True), ForeignKey('properties.id', ondelete='CASCADE'), nullable=False)
    user_id = Column(UUID(as_uuid=True), ForeignKey('users.id', ondelete='CASCADE'), nullable=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=True)
    message = Column(Text, nullable=False)
    inquiry_type = Column(String(20), nullable=False, default='general')  # general|viewing|offer|financing
    status = Column(String(20), nullable=False, default='pending')  # pending|contacted|responded|closed
    agent_notes = Column(Text, nullable=True)
    responded_at = Column(DateTime(timezone=True), nullable=True)
    responded_by = Column(UUID(as_uuid=True), ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)

    property = relationship('Property', back_populates='inquiries')

    __table_args__ = (
        Index('ix_inquiries_property_id_status', 'property_id', 'status'),
        CheckConstraint("inquiry_type in ('general','viewing','offer','financing')", name='ck_inquiries_type'),
        CheckConstraint("status in ('pending','contacted','responded','closed')", name='ck_inquiries_status'),
    )


class Favorite(Base):
    __tablename__ = 'property_favorites'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    property_id = Column(UUID(as_uuid=True), ForeignKey('properties.id', ondelete='CASCADE'), nullable=False)
    created_at = Column(DateTime(timezone=True), default=now_utc)

    property = relationship('Property', back_populates='favorites')

    __table_args__ = (
        UniqueConstraint('user_id', 'property_id', name='uq_property_favorites_user_property'),
    )
