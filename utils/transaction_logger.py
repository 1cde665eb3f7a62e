# utils/transaction_logger.py
import json
from datetime import datetime
from enum import Enum

from bson import ObjectId

from utils.date_utils import utc_now


def convert_bson(obj):
    """Helper to safely convert ObjectId/Datetime/enums for JSON output"""
    if isinstance(obj, ObjectId):
        return str(obj)
    if isinstance(obj, datetime):
        return obj.isoformat()
    if isinstance(obj, Enum):
        return obj.value
    return str(obj)


def build_log(db_name: str, index_results, seed_action, duration_ms: int) -> dict:
    """Build the summary document of one bootstrap run"""
    return {
        "database": db_name,
        "indexes": [
            {
                "collection": req.collection,
                "key_fields": sorted(req.key_fields),
                "unique": req.unique,
                "action": action,
            }
            for req, action in index_results
        ],
        "seed_user": seed_action,
        "timestamp": utc_now(),
        "duration_ms": duration_ms,
    }


def dump_log(log: dict) -> str:
    return json.dumps(log, default=convert_bson, sort_keys=True)
