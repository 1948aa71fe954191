"""Convert Firefly tag strings into catalog labels and tags."""

from __future__ import annotations

import re
from collections.abc import Iterable

from ..models import FireflyAsset

MAX_LENGTH = 63
UNKNOWN_LOCATION = "unknown"

_INVALID_LABEL_CHARS = re.compile(r"[^a-zA-Z0-9\-_.]")
_REPEATED_SEPARATORS = re.compile(r"[-_.]{2,}")
_EDGE_SEPARATOR = re.compile(r"^[-_.]|[-_.]$")
_INVALID_TAG_CHARS = re.compile(r"[^a-z0-9+#\-]")


def valid_name(name: str) -> str:
    """Sanitize a string so it can be used as a label key or value.

    Labels are alphanumeric with ``-``, ``_`` and ``.`` separators and at
    most 63 characters long.
    """
    updated = _INVALID_LABEL_CHARS.sub("_", name)[:MAX_LENGTH]
    updated = _REPEATED_SEPARATORS.sub("_", updated)
    return _EDGE_SEPARATOR.sub("", updated)


def tags_to_labels(tags_list: Iterable[str]) -> dict[str, str]:
    """Parse ``"key: value"`` tag strings into a label map.

    Keys are lower-cased. When two tags sanitize to the same key the later
    one wins.
    """
    labels: dict[str, str] = {}
    for tag in tags_list:
        parts = tag.split(": ")
        key = parts[0].lower()
        value = parts[1] if len(parts) > 1 else ""
        labels[valid_name(key)] = valid_name(value)
    return labels


def location_label(region: str | None) -> str:
    return valid_name(region or "") or UNKNOWN_LOCATION


def build_labels_for_asset(asset: FireflyAsset) -> dict[str, str]:
    """Labels for an asset: its tags plus a ``location`` label from the region."""
    labels = tags_to_labels(asset.tags_list)
    labels["location"] = location_label(asset.region)
    return labels


def to_tag(value: str) -> str:
    return _INVALID_TAG_CHARS.sub("-", value.lower())[:MAX_LENGTH]


def build_tag_list(labels: dict[str, str]) -> list[str]:
    """Derive catalog tags from label values, dropping empties and duplicates."""
    tags: list[str] = []
    for value in labels.values():
        tag = to_tag(value)
        if tag and tag not in tags:
            tags.append(tag)
    return tags
