"""
Shared fixtures for django-blog-platform tests.
"""
import json
import uuid

import pytest
from django.urls import reverse

from blog_platform import captcha
from blog_platform.models import AdminUser, Category, Comment, Post, Tag


@pytest.fixture
def category(db):
    return Category.objects.create(name="Test Category")


@pytest.fixture
def tag(db):
    return Tag.objects.create(name="django")


@pytest.fixture
def post(db, category):
    """Create a published test post."""
    return Post.objects.create(
        title="Test Post",
        content="This is a test post body.",
        category=category,
        status=Post.STATUS_PUBLISHED,
    )


@pytest.fixture
def comment(db, post):
    return Comment.objects.create(
        post=post,
        author_name="Alice",
        content="Great post!",
    )


@pytest.fixture
def admin_user(db, django_user_model):
    """A user listed in the admin registry."""
    user = django_user_model.objects.create_user(username="admin", password="adminpass123")
    AdminUser.objects.create(user=user)
    return user


@pytest.fixture
def plain_user(db, django_user_model):
    """An authenticated user who is not a blog admin."""
    return django_user_model.objects.create_user(username="reader", password="readerpass123")


@pytest.fixture
def session_id():
    return str(uuid.uuid4())


def post_json(client, url, data):
    return client.post(url, data=json.dumps(data), content_type="application/json")


@pytest.fixture
def solved_captcha(client, monkeypatch):
    """Issue and verify a captcha on ``client``; returns (id, answer)."""
    monkeypatch.setattr(captcha, "generate_problem", lambda: ("3 + 4 = ?", 7))
    response = client.get(reverse("blog_platform:math_captcha"))
    challenge_id = response.json()["sessionId"]
    verified = post_json(
        client,
        reverse("blog_platform:math_captcha"),
        {"sessionId": challenge_id, "userAnswer": 7},
    )
    assert verified.status_code == 200
    return challenge_id, 7
