"""Conversion of stored documents into JSON-safe values."""

import json
import math
from collections.abc import Mapping

from bson import ObjectId


def jsonable(document: Mapping[str, object]) -> dict[str, object]:
    """Return a copy of a document that strict JSON encoders accept.

    Non-finite floats become None; ObjectIds, Decimal128 and datetimes
    become strings.
    """
    return json.loads(json.dumps(_finite(document), default=str, allow_nan=False))


def id_candidates(value: str) -> list[object]:
    """Return the stored forms an ``_id`` given as text may have."""
    if ObjectId.is_valid(value):
        return [ObjectId(value), value]
    return [value]


def _finite(value: object) -> object:
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, Mapping):
        return {str(key): _finite(item) for key, item in value.items()}
    if isinstance(value, list | tuple):
        return [_finite(item) for item in value]
    return value
