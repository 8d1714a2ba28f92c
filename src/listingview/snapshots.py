"""
Listing snapshot accessors.

The data layer hands over listings and users that may be partial: nested
groups missing, nulls in place of objects, ids wrapped as ``{"uuid": ...}``.
The ``ensure_*`` helpers turn any of that into a fully defaulted, validated
record so the resolver never has to branch on absence.
"""
from __future__ import annotations
import logging
import re
import unicodedata
from typing import Any, Mapping, Optional, Union

from pydantic import ValidationError
from pydantic.alias_generators import to_camel, to_snake

from listingview.schemas import Listing, User

logger = logging.getLogger("listingview.snapshots")

RawListing = Union[Listing, Mapping[str, Any], None]
RawUser = Union[User, Mapping[str, Any], None]


def _raw_id(raw: Mapping[str, Any]) -> Any:
    return raw.get("id")


def _thaw(value: Any) -> Any:
    # mutable copy of nested mappings and sequences
    if isinstance(value, Mapping):
        return {k: _thaw(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_thaw(v) for v in value]
    return value


def _drop_invalid(data: dict, loc: tuple) -> bool:
    """
    Remove the value an error location points at, or the deepest part of that
    path still present (a group with a missing required key goes as a whole).
    Returns False when nothing under ``loc`` exists in ``data``.
    """
    path: list[tuple[Any, Any]] = []
    node: Any = data
    for key in loc:
        if isinstance(node, dict):
            # error locations use the camelCase alias; callers may send snake_case
            found = next((k for k in (key, to_camel(str(key)), to_snake(str(key))) if k in node), None)
            if found is None:
                break
        elif isinstance(node, list) and isinstance(key, int) and 0 <= key < len(node):
            found = key
        else:
            break
        path.append((node, found))
        node = node[found]
    if not path:
        return False
    parent, key = path[-1]
    del parent[key]
    return True


def _ensure(model: type, raw: Any, **defaults: Any) -> Any:
    if isinstance(raw, model):
        return raw
    if raw is None:
        return model(**defaults)
    if not isinstance(raw, Mapping):
        logger.warning(f"Ignoring {type(raw).__name__} snapshot; expected a mapping")
        return model(**defaults)

    raw_id = _raw_id(raw)
    data = _thaw(raw)
    dropped: list[str] = []
    while True:
        for key, value in defaults.items():
            if data.get(key) is None:
                data[key] = value
        try:
            record = model.model_validate(data)
        except ValidationError as e:
            # one location per pass; the next pass reports errors against the pruned data
            removed = next((err["loc"] for err in e.errors() if _drop_invalid(data, err["loc"])), None)
            if removed is None:
                # keep the id so the page can still report the record as invalid
                logger.warning(
                    f"Malformed {model.__name__} snapshot id={raw_id!r}: "
                    f"{e.error_count()} validation error(s); using defaults"
                )
                return model.model_validate({"id": raw_id, **defaults})
            dropped.append(".".join(str(part) for part in removed))
            continue
        if dropped:
            logger.warning(
                f"Malformed {model.__name__} snapshot id={raw_id!r}: "
                f"dropped invalid field(s) {', '.join(dropped)}"
            )
        return record


def ensure_listing(raw: RawListing) -> Listing:
    return _ensure(Listing, raw, type="listing")


def ensure_own_listing(raw: RawListing) -> Listing:
    return _ensure(Listing, raw, type="ownListing")


def ensure_user(raw: RawUser) -> User:
    return _ensure(User, raw)


def ensure_current_user(raw: RawUser) -> Optional[User]:
    """Like ``ensure_user`` but keeps an anonymous viewer as ``None``."""
    if raw is None:
        return None
    return ensure_user(raw)


# ------------------------------------------------------------
# Derived display values
# ------------------------------------------------------------
_NON_WORD = re.compile(r"[^\w-]+")
_DASHES = re.compile(r"-{2,}")
_SPACES = re.compile(r"\s+")


def create_slug(title: str) -> str:
    """URL slug for a listing title. Cosmetic only; routes resolve by id."""
    text = unicodedata.normalize("NFKD", str(title or "")).encode("ascii", "ignore").decode("ascii")
    text = _SPACES.sub("-", text.lower().strip())
    text = _NON_WORD.sub("", text)
    text = _DASHES.sub("-", text).strip("-")
    return text or "no-slug"


def user_display_name(user: Optional[User], default: str = "") -> str:
    if user is None:
        return default
    attributes = user.attributes
    if attributes.banned or attributes.deleted:
        return default
    return attributes.profile.display_name or default
