import json
import math
import uuid
from typing import Any, Dict, Iterable, Tuple
from bson import ObjectId, json_util
from bson.decimal128 import Decimal128
from bson.errors import BSONError
from datetime import datetime

from .errors import MalformedBody


def to_jsonable(obj: Any) -> Any:
    """
    Recursively convert a document read from Mongo into plain JSON values.
    ObjectId renders as its hex string and datetimes as ISO 8601; any other BSON
    type (Binary, Regex, Timestamp, Code, MinKey, ...) and non-finite floats fall
    back to relaxed extended JSON.
    """
    if isinstance(obj, ObjectId):
        return str(obj)
    if isinstance(obj, Decimal128):
        # Convert Decimal128 to string to preserve precision in JSON
        return str(obj.to_decimal())
    if isinstance(obj, datetime):
        return obj.isoformat()
    if isinstance(obj, uuid.UUID):
        return str(obj)
    if isinstance(obj, dict):
        return {k: to_jsonable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_jsonable(i) for i in obj]
    if obj is None or isinstance(obj, (str, bool)):
        return obj
    if isinstance(obj, int):
        # Int64 is an int subclass; plain int serializes the same way
        return int(obj)
    if isinstance(obj, float) and math.isfinite(obj):
        return obj
    return json.loads(json_util.dumps(obj, json_options=json_util.RELAXED_JSON_OPTIONS))


def decode_body(raw: bytes) -> Any:
    """Parse a request body as JSON, accepting MongoDB extended JSON ($oid, $date, ...)."""
    try:
        return json_util.loads(raw)
    except (ValueError, TypeError, BSONError) as e:
        # JSONDecodeError, bad UTF-8 and invalid extended-JSON values
        raise MalformedBody(str(e)) from e


def first_values(items: Iterable[Tuple[str, str]]) -> Dict[str, str]:
    """Collapse repeated query-string keys to their first value."""
    query: Dict[str, str] = {}
    for key, value in items:
        query.setdefault(key, value)
    return query
