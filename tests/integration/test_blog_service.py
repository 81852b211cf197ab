import uuid

import pytest

from realtyhub.db import models
from realtyhub.db.team_scope import set_current_team
from realtyhub.errors import NotFound, ValidationError
from realtyhub.services import blog
from realtyhub.services import teams as team_service


@pytest.fixture
def author(db, make_user):
    user = make_user(name="Nadia Writer")
    set_current_team(db, team_service.personal_team(db, user).id)
    return user


@pytest.fixture
def post(db, author):
    return blog.create_post(db, author, {"title": "Buying in Dhaka", "content": "<p>Start with the location.</p>"})


def test_create_post_is_a_draft(db, author, post):
    assert post.status == "draft"
    assert post.slug == "buying-in-dhaka"
    assert post.user_id == author.id
    assert post.team_id == author.current_team_id
    assert not blog.is_published(post)
    assert blog.list_published(db) == []


def test_create_post_resolves_tags(db, author):
    post = blog.create_post(db, author, {"title": "Market report", "tags": ["Luxury Homes", "Dhaka", " "]})
    again = blog.create_post(db, author, {"title": "Market report", "tags": ["luxury homes"]})

    assert sorted(t.slug for t in post.tags) == ["dhaka", "luxury-homes"]
    assert [t.id for t in again.tags] == [t.id for t in post.tags if t.slug == "luxury-homes"]
    assert again.slug == "market-report-1"
    assert db.query(models.Tag).count() == 2


def test_teams_keep_their_own_tags(db, author, make_user):
    first = blog.create_post(db, author, {"title": "Penthouses", "tags": ["Luxury"]})
    author_tag = first.tags[0]

    rival = make_user(name="Omar Rival")
    set_current_team(db, team_service.personal_team(db, rival).id)
    posts = [blog.create_post(db, rival, {"title": f"Villa {n}", "tags": ["Luxury"]}) for n in range(3)]

    rival_tags = {p.tags[0].id for p in posts}
    assert len(rival_tags) == 1
    rival_tag = posts[0].tags[0]
    assert rival_tag.id != author_tag.id
    assert rival_tag.slug == author_tag.slug == "luxury"
    assert rival_tag.team_id == rival.current_team_id
    assert db.query(models.Tag).execution_options(without_team_scope=True).count() == 2


def test_category_slugs_are_unique_per_team(db, author, make_user):
    rival = make_user()
    db.add_all([
        models.Category(team_id=author.current_team_id, name="News", slug="news"),
        models.Category(team_id=rival.current_team_id, name="News", slug="news"),
    ])
    db.commit()
    assert db.query(models.Category).execution_options(without_team_scope=True).count() == 2


def test_create_post_rejects_category_from_another_team(db, author, make_user):
    stranger = make_user()
    category = models.Category(team_id=team_service.personal_team(db, stranger).id, name="News", slug="news")
    db.add(category)
    db.commit()
    with pytest.raises(NotFound):
        blog.create_post(db, author, {"title": "Hi", "category_id": category.id})


def test_publish_and_unpublish(db, post):
    blog.publish(db, post)
    assert blog.is_published(post)
    assert [p.id for p in blog.list_published(db)] == [post.id]
    assert blog.get_by_slug(db, "buying-in-dhaka").id == post.id

    blog.unpublish(db, post)
    assert post.published_at is None
    assert blog.list_published(db) == []


def test_get_by_slug_missing(db, author):
    with pytest.raises(NotFound) as exc:
        blog.get_by_slug(db, "nothing-here")
    assert str(exc.value) == "Post not found"


def test_sync_tags(db, author, post):
    tags = [models.Tag(name=n, slug=n.lower()) for n in ("Rent", "Tips")]
    db.add_all(tags)
    db.commit()

    blog.sync_tags(db, post, [t.id for t in tags])
    assert blog.has_tag(post, tags[0].id) and blog.has_tag(post, tags[1].id)
    blog.sync_tags(db, post, [tags[1].id])
    assert not blog.has_tag(post, tags[0].id)
    blog.sync_tags(db, post, [])
    assert post.tags == []


def test_increment_views(db, post):
    blog.increment_views(db, post)
    assert post.views_count == 1


def test_guest_comment_requires_name_and_email(db, post):
    with pytest.raises(ValidationError) as exc:
        blog.add_comment(db, post, {"content": "Great read"})
    assert exc.value.errors == {
        "author_name": ["The name field is required."],
        "author_email": ["The email field is required."],
    }

    comment = blog.add_comment(db, post, {"content": "Great read", "author_name": "Guest", "author_email": "g@example.com"})
    assert comment.status == "pending"
    assert comment.user_id is None and comment.author_name == "Guest"


def test_comment_by_user_uses_their_identity(db, author, post):
    comment = blog.add_comment(db, post, {"content": "Thanks!"}, user=author)
    assert (comment.author_name, comment.author_email) == ("Nadia Writer", author.email)
    assert comment.team_id == post.team_id


def test_comments_disabled(db, author):
    post = blog.create_post(db, author, {"title": "Closed", "allow_comments": False})
    with pytest.raises(ValidationError) as exc:
        blog.add_comment(db, post, {"content": "Hello"}, user=author)
    assert str(exc.value) == "Comments are disabled for this post."


def test_reply_parent_must_belong_to_post(db, author, post):
    other = blog.create_post(db, author, {"title": "Other"})
    foreign = blog.add_comment(db, other, {"content": "elsewhere"}, user=author)

    for parent_id in (uuid.uuid4(), foreign.id):
        with pytest.raises(ValidationError) as exc:
            blog.add_comment(db, post, {"content": "reply", "parent_id": parent_id}, user=author)
        assert exc.value.errors == {"parent_id": ["The selected parent comment is invalid."]}

    root = blog.add_comment(db, post, {"content": "root"}, user=author)
    reply = blog.add_comment(db, post, {"content": "reply", "parent_id": root.id}, user=author)
    assert reply.parent_id == root.id


def test_moderation_keeps_comment_counter_in_step(db, author, post, make_user):
    moderator = make_user()
    comment = blog.add_comment(db, post, {"content": "Nice"}, user=author)
    pending = blog.add_comment(db, post, {"content": "Buy pills"}, user=author)

    blog.approve_comment(db, comment, moderator)
    blog.approve_comment(db, comment, moderator)
    db.refresh(post)
    assert post.comments_count == 1
    assert comment.approved_by == moderator.id
    assert [c.id for c in blog.approved_comments(db, post)] == [comment.id]

    blog.mark_comment_as_spam(db, pending)
    db.refresh(post)
    assert post.comments_count == 1
    assert pending.status == "spam"

    blog.reject_comment(db, comment)
    db.refresh(post)
    assert post.comments_count == 0
    assert comment.status == "rejected" and comment.approved_by is None
    assert blog.approved_comments(db, post) == []
