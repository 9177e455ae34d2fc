"""Canonical serialization and hashing for tree node content."""

from __future__ import annotations

import base64
import hashlib
import json
from collections.abc import Iterable, Mapping
from datetime import UTC, date, datetime, time
from typing import Any


def canonicalize(obj: Mapping[str, Any]) -> str:
    """Serialize a mapping with keys sorted at every level.

    Two mappings holding the same pairs canonicalize to the same string,
    whatever their insertion order.
    """
    members = ",".join(
        f"{json.dumps(str(key), ensure_ascii=False)}:{serialize(obj[key])}"
        for key in sorted(obj, key=str)
    )
    return "{" + members + "}"


def serialize(value: Any) -> str:
    """Serialize a single attribute value."""
    if isinstance(value, Mapping):
        return canonicalize(value)
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(serialize(element) for element in value) + "]"
    if isinstance(value, datetime):
        return f'Date.parse("{_iso_timestamp(value)}")'
    if isinstance(value, date):
        return f'Date.parse("{_iso_timestamp(datetime.combine(value, time(), tzinfo=UTC))}")'
    return json.dumps(value, ensure_ascii=False)


def _iso_timestamp(value: datetime) -> str:
    """Fixed textual form: UTC with millisecond precision and a Z suffix."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    value = value.astimezone(UTC)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def compute_string_hash(text: str) -> str:
    """SHA-256 of the UTF-8 text, base64-encoded."""
    digest = hashlib.sha256(text.encode("utf-8")).digest()
    return base64.b64encode(digest).decode("ascii")


def compute_children_hash(child_hashes: Iterable[str]) -> str:
    """Hash of the lexicographically sorted child hashes."""
    return compute_string_hash(",".join(sorted(child_hashes)))


def compute_node_hash(attributes: Mapping[str, Any] | None, child_hashes: Iterable[str]) -> str:
    """Hash attributes when present, otherwise the children."""
    if attributes is not None:
        return compute_string_hash(canonicalize(attributes))
    return compute_children_hash(child_hashes)
