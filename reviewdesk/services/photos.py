from __future__ import annotations

import json
import logging
from typing import Any

from reviewdesk.schemas.reviews import Photo
from reviewdesk.services.fields import resolve

logger = logging.getLogger(__name__)

# Tried in this order when the primary field yields nothing
PHOTO_FIELDS = ("photos", "images", "attachments", "photo_urls", "photo", "user_avatar")

_URL_KEYS = ("url", "path", "src")


def _first_url(item: Any) -> str | None:
    for key in _URL_KEYS:
        url = resolve(item, [key])
        if isinstance(url, str) and url.strip():
            return url
    return None


def _from_sequence(items: list | tuple) -> list[Photo]:
    photos: list[Photo] = []
    for item in items:
        if isinstance(item, str):
            url = item if item.strip() else None
        else:
            url = _first_url(item)
        if url:
            photos.append(Photo(url=url))
    return photos


def _from_string(raw: str) -> list[Photo]:
    if not raw.strip():
        return []
    try:
        parsed = json.loads(raw)
    except ValueError:
        return [Photo(url=raw)]

    if isinstance(parsed, list):
        return _from_sequence(parsed)
    if isinstance(parsed, dict):
        url = _first_url(parsed)
        return [Photo(url=url)] if url else []
    if isinstance(parsed, str) and parsed.strip():
        return [Photo(url=parsed)]
    return [Photo(url=raw)]


def _normalize(raw: Any) -> list[Photo]:
    if isinstance(raw, (list, tuple)):
        return _from_sequence(raw)
    if isinstance(raw, str):
        return _from_string(raw)
    url = _first_url(raw)
    return [Photo(url=url)] if url else []


def normalize_photos(raw: Any) -> list[Photo]:
    """Turn any photo encoding the backend produces into a list of ``Photo``.

    Handles lists of URLs or ``{url|path|src}`` objects, JSON-encoded strings
    of either, single objects and bare URL strings. Unknown shapes give an
    empty list.
    """
    try:
        return _normalize(raw)
    except Exception as e:
        logger.debug("Unrecognized photo payload %r: %s", raw, e)
        return []


def collect_photos(record: Any) -> list[Photo]:
    for field in PHOTO_FIELDS:
        photos = normalize_photos(resolve(record, [field]))
        if photos:
            return photos
    return []


def absolute_photo_url(url: Any, base_url: str) -> str | None:
    """Resolve a stored photo reference against the media host.

    Absolute ``http(s)`` URLs are kept, ``/uploads/x.jpg`` and ``uploads/x.jpg``
    are joined to ``base_url``. Objects and JSON-encoded objects are unwrapped
    first.
    """
    if not url:
        return None
    if not isinstance(url, str):
        return absolute_photo_url(_first_url(url), base_url)

    text = url.strip()
    if not text:
        return None
    if text.startswith(("{", "[")):
        try:
            parsed = json.loads(text)
        except ValueError:
            pass
        else:
            return absolute_photo_url(_first_url(parsed) if isinstance(parsed, dict) else None, base_url)

    if text.startswith(("http://", "https://")):
        return text

    base = base_url.rstrip("/")
    if text.startswith("/"):
        return f"{base}{text}"
    return f"{base}/{text}"


def absolute_photos(photos: list[Photo], base_url: str) -> list[Photo]:
    resolved = (absolute_photo_url(photo.url, base_url) for photo in photos)
    return [Photo(url=url) for url in resolved if url]
