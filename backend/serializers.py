from datetime import datetime
from typing import Dict

from bson import ObjectId


def serialize_value(value):
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat() + "Z"
    if isinstance(value, dict):
        return {key: serialize_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [serialize_value(item) for item in value]
    return value


def serialize_document(document):
    if document is None:
        return None
    return serialize_value(dict(document))


def serialize_documents(documents):
    return [serialize_document(document) for document in documents]


def serialize_insert_result(result) -> Dict[str, object]:
    return {
        "acknowledged": result.acknowledged,
        "insertedId": serialize_value(result.inserted_id),
    }


def serialize_update_result(result) -> Dict[str, object]:
    return {
        "acknowledged": result.acknowledged,
        "matchedCount": result.matched_count,
        "modifiedCount": result.modified_count,
        "upsertedId": serialize_value(result.upserted_id),
    }


def serialize_delete_result(result) -> Dict[str, object]:
    return {
        "acknowledged": result.acknowledged,
        "deletedCount": result.deleted_count,
    }
