from datetime import timedelta

from realtyhub.db import models
from realtyhub.services import blog


def _post(**kwargs):
    return models.Post(title="t", slug="t", **kwargs)


def test_reading_time_rounds_up_and_never_zero():
    assert blog.reading_time(_post(content="")) == 1
    assert blog.reading_time(_post(content="word " * 200)) == 1
    assert blog.reading_time(_post(content="word " * 201)) == 2
    assert blog.reading_time(_post(content="<p>" + "word " * 450 + "</p>")) == 3


def test_word_count_ignores_markup():
    assert blog.word_count(_post(content="<h1>Hello</h1><p>big <b>world</b></p>")) == 3


def test_excerpt_prefers_explicit_then_truncates_content():
    assert blog.excerpt(_post(excerpt="Short intro", content="ignored")) == "Short intro"
    assert blog.excerpt(_post(content="<p>Tiny post</p>")) == "Tiny post"
    long = blog.excerpt(_post(content="a" * 400))
    assert long.endswith("...") and len(long) == 153
    assert blog.excerpt(_post(content=None)) is None


def test_is_published():
    now = models.now_utc()
    assert blog.is_published(_post(status="published", published_at=now - timedelta(minutes=1)))
    assert not blog.is_published(_post(status="published", published_at=now + timedelta(days=1)))
    assert not blog.is_published(_post(status="draft", published_at=now))
    assert not blog.is_published(_post(status="published", published_at=None))
