"""WordPress REST API integration.

Provides read access to the posts, users and media library of the analyzed
site. The client doubles as the content and media store of the image
pipeline. One instance serves one request; attachment lookups are cached on
the instance only.
"""

import base64
import logging
from dataclasses import dataclass, field
from posixpath import basename, splitext
from typing import Any
from urllib.parse import urlsplit

import httpx

from postanalyzer.config import settings
from postanalyzer.core.exceptions import AuthenticationError, ExternalAPIError
from postanalyzer.services.images.stores import AttachmentMetadata
from postanalyzer.services.images.url_normalizer import normalize_image_url, urls_match

logger = logging.getLogger(__name__)

API_NAME = "WordPress"


@dataclass(slots=True)
class WordPressPost:
    """A post as returned by the REST API, flattened."""

    id: int
    title: str = ""
    link: str = ""
    slug: str = ""
    status: str = ""
    excerpt: str = ""
    content: str = ""
    date: str | None = None
    modified: str | None = None
    author_id: int | None = None
    author_name: str | None = None
    featured_media: int | None = None
    categories: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    meta: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class WordPressUser:
    """A site user."""

    id: int
    name: str
    email: str = ""


class WordPressClient:
    """Client for the WordPress REST API (``/wp-json/wp/v2``).

    Authenticates with an Application Password when one is configured and
    then reads posts in ``edit`` context to get the raw block markup.
    """

    def __init__(
        self,
        base_url: str | None = None,
        username: str | None = None,
        app_password: str | None = None,
        timeout: float | None = None,
        max_per_page: int | None = None,
    ) -> None:
        self.base_url = (base_url or settings.wordpress_url).rstrip("/")
        self.username = username if username is not None else settings.wordpress_username
        self.app_password = (
            app_password if app_password is not None else settings.wordpress_app_password
        )
        self.timeout = timeout or settings.wordpress_timeout
        self.max_per_page = max_per_page or settings.wordpress_max_per_page
        self._client: httpx.AsyncClient | None = None
        self._posts: dict[int, dict[str, Any] | None] = {}
        self._attachments: dict[int, AttachmentMetadata | None] = {}

    @property
    def api_url(self) -> str:
        return f"{self.base_url}/wp-json/wp/v2"

    @property
    def is_configured(self) -> bool:
        """Whether credentials for authenticated access are available."""
        return bool(self.username and self.app_password)

    @property
    def _context(self) -> str:
        return "edit" if self.is_configured else "view"

    @property
    def _auth_header(self) -> str:
        """Generate Basic Auth header for the application password."""
        # Application passwords are displayed with spaces; WordPress ignores them
        password = (self.app_password or "").replace(" ", "")
        credentials = f"{self.username}:{password}"
        encoded = base64.b64encode(credentials.encode("utf-8")).decode("utf-8")
        return f"Basic {encoded}"

    async def __aenter__(self) -> "WordPressClient":
        headers = {"Accept": "application/json"}
        if self.is_configured:
            headers["Authorization"] = self._auth_header
        self._client = httpx.AsyncClient(
            timeout=self.timeout,
            headers=headers,
            follow_redirects=True,
        )
        return self

    async def __aexit__(self, *args: Any) -> None:
        if self._client:
            await self._client.aclose()

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError("Client must be used as async context manager")
        return self._client

    async def _send(
        self,
        endpoint: str,
        params: dict[str, Any] | None = None,
    ) -> httpx.Response | None:
        """GET an API endpoint; None when the resource does not exist."""
        url = f"{self.api_url}/{endpoint.lstrip('/')}"

        try:
            response = await self.client.request("GET", url, params=params)
        except httpx.HTTPError as e:
            logger.warning("WordPress HTTP error", extra={"endpoint": endpoint, "error": str(e)})
            raise ExternalAPIError(API_NAME, str(e)) from e

        if response.status_code == 404:
            return None
        if response.status_code in (401, 403):
            logger.warning(
                "WordPress rejected credentials",
                extra={"endpoint": endpoint, "status": response.status_code},
            )
            raise AuthenticationError(API_NAME)
        if response.status_code >= 400:
            logger.warning(
                "WordPress API error",
                extra={"endpoint": endpoint, "status": response.status_code},
            )
            raise ExternalAPIError(
                API_NAME,
                f"API error: {response.status_code} - {response.text[:200]}",
            )
        return response

    def _decode(self, endpoint: str, response: httpx.Response) -> Any:
        """JSON body of a response; maintenance pages and interstitials are API errors."""
        try:
            return response.json()
        except ValueError as e:
            logger.warning(
                "WordPress returned a non-JSON body",
                extra={"endpoint": endpoint, "status": response.status_code},
            )
            raise ExternalAPIError(API_NAME, f"Invalid JSON response: {response.text[:200]}") from e

    async def _get_json(self, endpoint: str, params: dict[str, Any] | None = None) -> Any:
        response = await self._send(endpoint, params)
        if response is None:
            return None
        return self._decode(endpoint, response)

    async def _paginate(
        self,
        endpoint: str,
        params: dict[str, Any],
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """Fetch a collection across pages, up to ``limit`` items (all if None)."""
        per_page = min(limit or self.max_per_page, self.max_per_page)
        items: list[dict[str, Any]] = []
        page = 1

        while True:
            response = await self._send(endpoint, {**params, "per_page": per_page, "page": page})
            if response is None:
                break
            batch = self._decode(endpoint, response)
            if not isinstance(batch, list) or not batch:
                break

            items.extend(item for item in batch if isinstance(item, dict))
            if limit and len(items) >= limit:
                return items[:limit]

            total_pages = _as_int(response.headers.get("X-WP-TotalPages")) or 1
            if page >= total_pages:
                break
            page += 1

        return items

    # ------------------------------------------------------------------
    # Posts and users
    # ------------------------------------------------------------------

    async def _get_post_payload(self, post_id: int) -> dict[str, Any] | None:
        if post_id not in self._posts:
            payload = await self._get_json(
                f"posts/{post_id}",
                {"context": self._context, "_embed": "author,wp:term"},
            )
            self._posts[post_id] = payload if isinstance(payload, dict) else None
        return self._posts[post_id]

    async def get_post(self, post_id: int) -> WordPressPost | None:
        """Fetch one post with its author and terms, or None if it does not exist."""
        logger.info("Fetching post", extra={"post_id": post_id})
        payload = await self._get_post_payload(post_id)
        if payload is None:
            return None
        return _post_from_payload(payload)

    async def list_posts(self, per_page: int = 50) -> list[WordPressPost]:
        """Latest posts first; ``per_page=0`` returns every post."""
        params = {
            "context": self._context,
            "orderby": "date",
            "order": "desc",
            "status": "any" if self.is_configured else "publish",
            "_fields": "id,title,date,slug,link,status",
        }
        payloads = await self._paginate("posts", params, limit=per_page or None)
        return [_post_from_payload(payload) for payload in payloads]

    async def list_users(self, per_page: int = 100, role: str = "") -> list[WordPressUser]:
        """Users ordered by display name; defaults to users who can author posts."""
        params: dict[str, Any] = {
            "context": self._context,
            "orderby": "name",
            "order": "asc",
        }
        if role:
            params["roles"] = role
        else:
            params["who"] = "authors"

        payloads = await self._paginate("users", params, limit=per_page if per_page > 0 else None)
        return [_user_from_payload(payload) for payload in payloads]

    async def get_user(self, user_id: int) -> WordPressUser | None:
        """Fetch one user, or None if the id is unknown."""
        payload = await self._get_json(f"users/{user_id}", {"context": self._context})
        if not isinstance(payload, dict):
            return None
        return _user_from_payload(payload)

    # ------------------------------------------------------------------
    # Content store
    # ------------------------------------------------------------------

    async def get_post_content(self, post_id: int) -> str:
        payload = await self._get_post_payload(post_id)
        if payload is None:
            return ""
        return _rendered_text(payload.get("content"))

    async def get_featured_image_id(self, post_id: int) -> int | None:
        payload = await self._get_post_payload(post_id)
        if payload is None:
            return None
        return _as_int(payload.get("featured_media")) or None

    async def get_attachment_children(self, post_id: int) -> list[int]:
        """Image attachments uploaded to the post, oldest first."""
        params = {
            "context": self._context,
            "parent": post_id,
            "media_type": "image",
            "orderby": "id",
            "order": "asc",
        }
        payloads = await self._paginate("media", params)

        attachment_ids: list[int] = []
        for payload in payloads:
            attachment = _attachment_from_payload(payload)
            if attachment is None:
                continue
            self._attachments[attachment.id] = attachment
            attachment_ids.append(attachment.id)

        logger.info(
            "Listed attached images",
            extra={"post_id": post_id, "count": len(attachment_ids)},
        )
        return attachment_ids

    # ------------------------------------------------------------------
    # Media store
    # ------------------------------------------------------------------

    async def get_attachment_metadata(self, attachment_id: int) -> AttachmentMetadata | None:
        if attachment_id not in self._attachments:
            payload = await self._get_json(
                f"media/{attachment_id}",
                {"context": self._context},
            )
            self._attachments[attachment_id] = (
                _attachment_from_payload(payload) if isinstance(payload, dict) else None
            )
        return self._attachments[attachment_id]

    async def resolve_url_to_attachment_id(self, url: str) -> int | None:
        """Find the attachment whose file (or one of its renditions) is ``url``.

        Only URLs served from this site are looked up.
        """
        try:
            parsed = urlsplit(url)
        except ValueError:
            return None
        site_host = urlsplit(self.base_url).hostname
        if parsed.hostname and parsed.hostname != site_host:
            return None

        stem, _ = splitext(basename(normalize_image_url(url)))
        if not stem:
            return None

        payloads = await self._get_json(
            "media",
            {
                "context": self._context,
                "search": stem,
                "media_type": "image",
                "per_page": self.max_per_page,
            },
        )
        if not isinstance(payloads, list):
            return None

        for payload in payloads:
            attachment = _attachment_from_payload(payload) if isinstance(payload, dict) else None
            if attachment is None:
                continue
            self._attachments.setdefault(attachment.id, attachment)
            candidates = [attachment.url, *attachment.rendition_urls]
            if any(urls_match(url, candidate) for candidate in candidates if candidate):
                return attachment.id

        logger.debug("No attachment for URL", extra={"url": url})
        return None


def _rendered_text(value: Any) -> str:
    """Prefer the raw value of a REST text field, falling back to rendered."""
    if isinstance(value, dict):
        raw = value.get("raw")
        if isinstance(raw, str):
            return raw
        rendered = value.get("rendered")
        return rendered if isinstance(rendered, str) else ""
    return value if isinstance(value, str) else ""


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def _post_from_payload(payload: dict[str, Any]) -> WordPressPost:
    embedded = payload.get("_embedded") or {}

    author_name = None
    authors = embedded.get("author") or []
    if authors and isinstance(authors[0], dict):
        author_name = authors[0].get("name")

    categories: list[str] = []
    tags: list[str] = []
    for taxonomy_terms in embedded.get("wp:term") or []:
        for term in taxonomy_terms or []:
            if not isinstance(term, dict) or not term.get("name"):
                continue
            if term.get("taxonomy") == "category":
                categories.append(term["name"])
            elif term.get("taxonomy") == "post_tag":
                tags.append(term["name"])

    meta = payload.get("meta")
    return WordPressPost(
        id=int(payload["id"]),
        title=_rendered_text(payload.get("title")),
        link=payload.get("link") or "",
        slug=payload.get("slug") or "",
        status=payload.get("status") or "",
        excerpt=_rendered_text(payload.get("excerpt")),
        content=_rendered_text(payload.get("content")),
        date=payload.get("date"),
        modified=payload.get("modified"),
        author_id=_as_int(payload.get("author")),
        author_name=author_name,
        featured_media=_as_int(payload.get("featured_media")) or None,
        categories=categories,
        tags=tags,
        meta=meta if isinstance(meta, dict) else {},
    )


def _user_from_payload(payload: dict[str, Any]) -> WordPressUser:
    return WordPressUser(
        id=int(payload["id"]),
        name=payload.get("name") or payload.get("username") or payload.get("slug") or "",
        email=payload.get("email") or "",
    )


def _attachment_from_payload(payload: dict[str, Any]) -> AttachmentMetadata | None:
    if payload.get("type") not in (None, "attachment") or not payload.get("id"):
        return None

    details = payload.get("media_details") or {}
    sizes = details.get("sizes") or {}
    renditions = {
        name: size for name, size in sizes.items() if isinstance(size, dict)
    }
    image_meta = details.get("image_meta")

    return AttachmentMetadata(
        id=int(payload["id"]),
        url=payload.get("source_url") or "",
        alt=payload.get("alt_text") or "",
        title=_rendered_text(payload.get("title")),
        caption=_rendered_text(payload.get("caption")),
        description=_rendered_text(payload.get("description")),
        mime_type=payload.get("mime_type") or "",
        file_path=details.get("file") or "",
        file_size=_as_int(details.get("filesize")),
        created_at=payload.get("date"),
        width=_as_int(details.get("width")),
        height=_as_int(details.get("height")),
        renditions=renditions,
        image_meta=image_meta if isinstance(image_meta, dict) else None,
        rendition_urls=[
            size["source_url"] for size in renditions.values() if size.get("source_url")
        ],
    )
