import uuid
from datetime import datetime
from decimal import Decimal

import pytest
from bson import Int64, MinKey, ObjectId, Regex, Timestamp
from bson.decimal128 import Decimal128

from msmongo.errors import MalformedBody
from msmongo.utils import decode_body, first_values, to_jsonable


def test_to_jsonable_converts_bson_types():
    oid = ObjectId("5f1d7f8e8f1b2c3d4e5f6a7b")
    doc = {
        "_id": oid,
        "price": Decimal128(Decimal("9.99")),
        "at": datetime(2024, 1, 2, 3, 4, 5),
        "tags": [oid, "x"],
        "nested": {"n": 1},
    }
    assert to_jsonable(doc) == {
        "_id": "5f1d7f8e8f1b2c3d4e5f6a7b",
        "price": "9.99",
        "at": "2024-01-02T03:04:05",
        "tags": ["5f1d7f8e8f1b2c3d4e5f6a7b", "x"],
        "nested": {"n": 1},
    }


def test_decode_body_plain_json():
    assert decode_body(b'{"a": [1, 2, null]}') == {"a": [1, 2, None]}
    assert decode_body(b"[1, 2]") == [1, 2]


def test_decode_body_extended_json():
    body = decode_body(b'{"_id": {"$oid": "5f1d7f8e8f1b2c3d4e5f6a7b"}}')
    assert body["_id"] == ObjectId("5f1d7f8e8f1b2c3d4e5f6a7b")


@pytest.mark.parametrize("raw", [b"", b"{", b"not json", b"\xc3\x28"])
def test_decode_body_rejects_garbage(raw):
    with pytest.raises(MalformedBody):
        decode_body(raw)


def test_first_values_keeps_first_occurrence():
    items = [("a", "1"), ("b", "2"), ("a", "3")]
    assert first_values(items) == {"a": "1", "b": "2"}
    assert first_values([]) == {}


def test_to_jsonable_falls_back_to_extended_json():
    doc = {
        "bin": b"\x00\x01",
        "re": Regex("^a"),
        "ts": Timestamp(5, 1),
        "low": MinKey(),
        "nan": float("nan"),
        "big": Int64(7),
        "ok": True,
        "f": 1.5,
    }
    assert to_jsonable(doc) == {
        "bin": {"$binary": {"base64": "AAE=", "subType": "00"}},
        "re": {"$regularExpression": {"pattern": "^a", "options": ""}},
        "ts": {"$timestamp": {"t": 5, "i": 1}},
        "low": {"$minKey": 1},
        "nan": {"$numberDouble": "NaN"},
        "big": 7,
        "ok": True,
        "f": 1.5,
    }


def test_to_jsonable_uuid_as_string():
    value = uuid.UUID("12345678-1234-5678-1234-567812345678")
    assert to_jsonable(value) == "12345678-1234-5678-1234-567812345678"
