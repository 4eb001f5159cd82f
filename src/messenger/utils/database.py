"""
Object id helpers shared by the data models and the store backends.

Entities expose their ids as 24-character lowercase hex strings while the
stored documents keep them as BSON 'ObjectId' values, for '_id' and for every
reference field alike. 'ObjectIdStr' accepts either form on validation and
always yields the normalised hex string.
"""

from typing import Annotated, Any

from bson import ObjectId
from pydantic import BeforeValidator


def normalize_object_id(value: Any) -> str:
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, str) and ObjectId.is_valid(value):
        return str(ObjectId(value))
    raise ValueError(f"{value!r} is not a valid object id")


ObjectIdStr = Annotated[str, BeforeValidator(normalize_object_id)]


def to_object_id(value: str) -> ObjectId:
    return ObjectId(value)


def to_object_ids(values: list[str]) -> list[ObjectId]:
    return [ObjectId(value) for value in values]


def generate_uid() -> ObjectId:
    return ObjectId()
