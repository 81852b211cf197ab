from decimal import Decimal

import pytest

from realtyhub.db import models
from realtyhub.db.team_scope import set_current_team
from realtyhub.errors import ValidationError
from realtyhub.services import listings
from realtyhub.services import teams as team_service


@pytest.fixture
def team(db, make_user):
    owner = make_user(name="Agency Owner")
    team = team_service.personal_team(db, owner)
    set_current_team(db, team.id)
    return team


@pytest.fixture
def refs(team, listing_refs):
    return listing_refs(team)


def test_create_property_generates_unique_slugs(db, team, refs, property_data):
    first = listings.create_property(db, property_data(refs))
    second = listings.create_property(db, property_data(refs))
    assert first.slug == "lake-view-apartment"
    assert second.slug == "lake-view-apartment-1"
    assert first.team_id == team.id
    assert listings.formatted_price(first) == "12,500,000 BDT"


def test_create_property_validation(db, team, refs, property_data):
    with pytest.raises(ValidationError) as exc:
        listings.create_property(db, property_data(refs, title="", listing_type="lease"))
    assert exc.value.errors == {
        "title": ["The title field is required."],
        "listing_type": ["The selected listing_type is invalid."],
    }


def test_search_filters(db, team, refs, property_data):
    create = lambda **kw: listings.create_property(db, property_data(refs, **kw))
    create(title="Budget Flat", price=Decimal("3000000"), bedrooms=1, bathrooms=1)
    create(title="Family Home", price=Decimal("9000000"), bedrooms=4, bathrooms=3)
    create(title="Penthouse", price=Decimal("40000000"), bedrooms=5, bathrooms=4, is_featured=True)
    create(title="Studio To Let", listing_type="rent", price=Decimal("25000"), bedrooms=1)
    create(title="Sold Villa", status="sold", price=Decimal("8000000"), bedrooms=4)

    titles = lambda **kw: [p.title for p in listings.search_properties(db, **kw)]

    assert titles()[0] == "Penthouse"
    assert "Sold Villa" not in titles()
    assert titles(listing_type="rent") == ["Studio To Let"]
    assert sorted(titles(listing_type="sale", min_price=Decimal("5000000"), max_price=Decimal("10000000"))) == ["Family Home"]
    assert sorted(titles(bedrooms=4)) == ["Family Home", "Penthouse"]
    assert sorted(titles(bathrooms=3)) == ["Family Home", "Penthouse"]
    assert titles(featured_only=True) == ["Penthouse"]
    assert len(titles(limit=2)) == 2


def test_search_by_location_and_type(db, team, refs, listing_refs, property_data):
    other = listing_refs(team)
    listings.create_property(db, property_data(refs, title="Here"))
    listings.create_property(db, property_data(other, title="There"))

    assert [p.title for p in listings.search_properties(db, location_id=other["location_id"])] == ["There"]
    assert [p.title for p in listings.search_properties(db, property_type_id=refs["property_type_id"])] == ["Here"]


def test_toggle_favorite_updates_counter(db, team, refs, property_data, make_user):
    prop = listings.create_property(db, property_data(refs))
    fan = make_user()

    assert listings.toggle_favorite(db, fan, prop) is True
    assert prop.favorites_count == 1
    assert listings.is_favorited(db, fan, prop)
    assert listings.favorite_property_ids(db, fan) == [prop.id]

    assert listings.toggle_favorite(db, fan, prop) is False
    assert prop.favorites_count == 0
    assert listings.favorite_property_ids(db, fan) == []


def test_increment_views(db, team, refs, property_data):
    prop = listings.create_property(db, property_data(refs))
    listings.increment_views(db, prop)
    listings.increment_views(db, prop)
    assert prop.views_count == 2


def test_inquiries(db, team, refs, property_data, make_user):
    prop = listings.create_property(db, property_data(refs))
    buyer, agent = make_user(), make_user()

    inquiry = listings.create_inquiry(db, prop, {
        "name": "Karim", "email": "karim@example.com", "message": "Is it still available?",
        "inquiry_type": "viewing",
    }, user=buyer)
    assert inquiry.status == "pending"
    assert inquiry.team_id == team.id
    assert inquiry.user_id == buyer.id
    assert prop.inquiries_count == 1

    listings.respond_to_inquiry(db, inquiry, agent, notes="Called back")
    db.refresh(inquiry)
    assert inquiry.status == "responded"
    assert inquiry.responded_by == agent.id
    assert inquiry.agent_notes == "Called back"
    assert inquiry.responded_at is not None

    with pytest.raises(ValidationError):
        listings.respond_to_inquiry(db, inquiry, agent, status="lost")


def test_inquiry_validation(db, team, refs, property_data):
    prop = listings.create_property(db, property_data(refs))
    with pytest.raises(ValidationError) as exc:
        listings.create_inquiry(db, prop, {"name": "Guest", "email": "nope", "message": "", "inquiry_type": "barter"})
    assert exc.value.errors == {
        "email": ["The email must be a valid email address."],
        "message": ["The message field is required."],
        "inquiry_type": ["The selected inquiry_type is invalid."],
    }
    assert db.query(models.Inquiry).count() == 0
