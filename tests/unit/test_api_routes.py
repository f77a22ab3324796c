"""Unit tests for the REST endpoints."""

from __future__ import annotations

from typing import Any

from fastapi.testclient import TestClient

from postanalyzer.config import settings
from postanalyzer.core.exceptions import AuthenticationError
from postanalyzer.core.field_encryption import reset_settings_cipher
from postanalyzer.dependencies import (
    get_api_key_validator,
    get_option_store,
    get_wordpress_client,
)
from postanalyzer.integrations.ai_platforms import KeyValidationResult
from postanalyzer.integrations.option_store import InMemoryOptionStore
from postanalyzer.integrations.wordpress import WordPressPost, WordPressUser
from postanalyzer.main import create_app
from postanalyzer.services.images.stores import AttachmentMetadata

PREFIX = settings.api_prefix


class _FakeWordPress:
    def __init__(self, fail_posts: bool = False) -> None:
        self.fail_posts = fail_posts
        self.user_queries: list[tuple[int, str]] = []
        self.post = WordPressPost(
            id=42,
            title="Hello &amp; Welcome",
            link="https://blog.example.com/hello/",
            content='<p>Hello there</p><img src="https://cdn.other.com/a.png">',
            date="2024-05-01T09:05:00",
            modified="2024-05-01T09:05:00",
            author_name="Jane Doe",
        )

    async def get_post(self, post_id: int) -> WordPressPost | None:
        if self.fail_posts:
            raise AuthenticationError("WordPress")
        return self.post if post_id == 42 else None

    async def get_post_content(self, post_id: int) -> str:
        return self.post.content

    async def get_featured_image_id(self, post_id: int) -> int | None:
        return None

    async def get_attachment_children(self, post_id: int) -> list[int]:
        return []

    async def get_attachment_metadata(self, attachment_id: int) -> AttachmentMetadata | None:
        return None

    async def resolve_url_to_attachment_id(self, url: str) -> int | None:
        return None

    async def list_posts(self, per_page: int = 50) -> list[WordPressPost]:
        return [
            WordPressPost(id=42, title="Hello &amp; Welcome", slug="hello", status="publish"),
            WordPressPost(id=5, title="", slug="draft-5", status="draft"),
        ]

    async def list_users(self, per_page: int = 100, role: str = "") -> list[WordPressUser]:
        self.user_queries.append((per_page, role))
        return [WordPressUser(id=7, name="Jane Doe", email="jane@example.com")]

    async def get_user(self, user_id: int) -> WordPressUser | None:
        return WordPressUser(id=7, name="Jane Doe") if user_id == 7 else None


class _FakeValidator:
    async def validate(self, platform: str, api_key: str) -> KeyValidationResult:
        if api_key == "bad":
            return KeyValidationResult(valid=False, message="Invalid Groq API key. Please check your key and try again.")
        return KeyValidationResult(valid=True, message="ok", info={"models_available": 1})


def _client(wp: _FakeWordPress, store: InMemoryOptionStore | None = None) -> tuple[Any, TestClient]:
    app = create_app()
    option_store = store or InMemoryOptionStore()
    app.dependency_overrides[get_wordpress_client] = lambda: wp
    app.dependency_overrides[get_option_store] = lambda: option_store
    app.dependency_overrides[get_api_key_validator] = lambda: _FakeValidator()
    return app, TestClient(app)


def test_health() -> None:
    app, client = _client(_FakeWordPress())
    with client:
        response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "version": settings.app_version}


def test_analyze_post_returns_report() -> None:
    app, client = _client(_FakeWordPress())
    try:
        with client:
            response = client.post(f"{PREFIX}/analyze-post", json={"post_id": 42})
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 200
    payload = response.json()
    assert payload["title"] == "Hello & Welcome"
    assert payload["published_date"] == "May 1, 2024 9:05 AM"
    assert payload["word_count"] == 2
    assert payload["featured_image"] is None
    external = payload["attached_images"]["external-0"]
    assert external["type"] == "external"
    assert "mime_type" not in external
    assert "ai_suggestions" not in payload


def test_analyze_post_error_statuses() -> None:
    app, client = _client(_FakeWordPress())
    try:
        with client:
            missing = client.post(f"{PREFIX}/analyze-post", json={"post_id": 999})
            invalid = client.post(f"{PREFIX}/analyze-post", json={"post_id": "abc"})
            negative = client.post(f"{PREFIX}/analyze-post", json={"post_id": 0})
    finally:
        app.dependency_overrides.clear()

    assert missing.status_code == 404
    assert missing.json()["detail"] == "Post not found: 999"
    assert invalid.status_code == 422
    assert negative.status_code == 422


def test_analyze_post_upstream_failure_is_bad_gateway() -> None:
    app, client = _client(_FakeWordPress(fail_posts=True))
    try:
        with client:
            response = client.post(f"{PREFIX}/analyze-post", json={"post_id": 42})
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 502


def test_list_posts_and_users() -> None:
    wp = _FakeWordPress()
    app, client = _client(wp)
    try:
        with client:
            posts = client.get(f"{PREFIX}/posts", params={"per_page": 0})
            users = client.get(f"{PREFIX}/users", params={"role": "editor"})
    finally:
        app.dependency_overrides.clear()

    assert posts.status_code == 200
    assert [(item["id"], item["title"], item["status"]) for item in posts.json()] == [
        (42, "Hello & Welcome", "Publish"),
        (5, "Post #5", "Draft"),
    ]
    assert users.json() == [{"id": 7, "name": "Jane Doe", "email": "jane@example.com"}]
    assert wp.user_queries == [(100, "editor")]


def test_save_and_get_settings() -> None:
    original_key = settings.settings_encryption_key
    settings.settings_encryption_key = "unit-test-key"
    reset_settings_cipher()
    app, client = _client(_FakeWordPress())
    try:
        with client:
            empty = client.post(
                f"{PREFIX}/save-settings",
                json={"ai_platform": "groq", "api_keys": {"groq": ""}, "author_id": 7},
            )
            unknown_author = client.post(
                f"{PREFIX}/save-settings",
                json={"ai_platform": "groq", "api_keys": {"groq": "gsk_key"}, "author_id": 8},
            )
            rejected = client.post(
                f"{PREFIX}/save-settings",
                json={"ai_platform": "groq", "api_keys": {"groq": "bad"}, "author_id": 7},
            )
            bad_platform = client.post(
                f"{PREFIX}/save-settings",
                json={"ai_platform": "claude", "api_keys": {}, "author_id": 7},
            )
            before = client.get(f"{PREFIX}/get-settings")
            saved = client.post(
                f"{PREFIX}/save-settings",
                json={"ai_platform": "groq", "api_keys": {"groq": "gsk_valid_key"}, "author_id": 7},
            )
            after = client.get(f"{PREFIX}/get-settings")
    finally:
        app.dependency_overrides.clear()
        settings.settings_encryption_key = original_key
        reset_settings_cipher()

    assert empty.status_code == 400
    assert empty.json()["detail"] == "API key for Groq cannot be empty"
    assert unknown_author.status_code == 400
    assert unknown_author.json()["detail"] == "Selected author does not exist"
    assert rejected.status_code == 400
    assert bad_platform.status_code == 422
    assert before.json() == {"ai_platform": "", "author_id": 0}

    assert saved.status_code == 200
    assert saved.json()["success"] is True
    assert saved.json()["data"]["author_name"] == "Jane Doe"

    current = after.json()
    assert current["ai_platform"] == "groq"
    assert current["author_name"] == "Jane Doe"
    assert current["api_keys_masked"] == {"groq": "gsk_*********"}
