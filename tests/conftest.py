from __future__ import annotations

import json

import pytest
from django.test import Client

from blog import posts
from blog.auth import create_access_token
from blog.models import Category, User


def doc(text: str = "Hello world") -> dict:
    return {
        "type": "doc",
        "content": [{"type": "paragraph", "content": [{"type": "text", "text": text}]}],
    }


class Api:
    """Django test client speaking JSON with an optional bearer token."""

    def __init__(self) -> None:
        self.client = Client()

    def _headers(self, user, token):
        if token is None and user is not None:
            token = create_access_token(user)
        return {"Authorization": f"Bearer {token}"} if token else {}

    def get(self, path, user=None, token=None, **params):
        return self.client.get(path, params, headers=self._headers(user, token))

    def _send(self, method, path, body, user, token):
        send = getattr(self.client, method)
        return send(
            path,
            data=json.dumps(body) if body is not None else "",
            content_type="application/json",
            headers=self._headers(user, token),
        )

    def post(self, path, body=None, user=None, token=None):
        return self._send("post", path, body, user, token)

    def put(self, path, body=None, user=None, token=None):
        return self._send("put", path, body, user, token)

    def delete(self, path, body=None, user=None, token=None):
        return self._send("delete", path, body, user, token)


@pytest.fixture
def api() -> Api:
    return Api()


@pytest.fixture
def make_user(db):
    def _make(username: str, **extra) -> User:
        return User.objects.create_user(
            username=username,
            email=f"{username}@example.com",
            password="correct-horse-battery",
            name=username.title(),
            **extra,
        )
    return _make


@pytest.fixture
def alice(make_user) -> User:
    return make_user("alice")


@pytest.fixture
def bob(make_user) -> User:
    return make_user("bob")


@pytest.fixture
def admin(make_user) -> User:
    return make_user("root", is_admin=True)


@pytest.fixture
def tech(db) -> Category:
    return Category.objects.create(name="Technology", is_approved=True)


@pytest.fixture
def travel(db) -> Category:
    return Category.objects.create(name="Travel", is_approved=True)


@pytest.fixture
def make_post(tech):
    def _make(author: User, text: str = "Hello world", categories=None, **data):
        body = {
            "content": doc(text),
            "categoryIds": [c.pk for c in (categories or [tech])],
            **data,
        }
        return posts.create_post(author, body)
    return _make
