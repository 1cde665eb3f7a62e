# utils/seed_user.py
import logging
import re
from datetime import datetime
from typing import Callable, FrozenSet, Optional

from pymongo.errors import DuplicateKeyError

from Models.sentinel_models import SEED_USER_INDEX, USER_COLLECTION, Action
from Schemas.seed_schema import IDENTITY_FIELDS, SeedUserRecord, comparison_key
from utils.date_utils import utc_now
from utils.mongo_helpers import duplicate_key_fields, index_key_set

logger = logging.getLogger(__name__)

# "E11000 duplicate key error collection: sentinel.user index: id_1 dup key: ..."
_INDEX_NAME_RE = re.compile(r"index: (\S+)")


def seed_user_exists(db, canonical: SeedUserRecord) -> bool:
    return db[USER_COLLECTION].count_documents(comparison_key(canonical), limit=1) > 0


def _violated_fields(db, exc: DuplicateKeyError) -> Optional[FrozenSet[str]]:
    fields = duplicate_key_fields(exc.details)
    if fields is not None:
        return fields
    m = _INDEX_NAME_RE.search(str(exc))
    if not m:
        return None
    spec = db[USER_COLLECTION].index_information().get(m.group(1))
    return index_key_set(spec) if spec else None


def _is_benign_conflict(db, canonical: SeedUserRecord, exc: DuplicateKeyError) -> bool:
    fields = _violated_fields(db, exc)
    if fields is not None:
        return fields <= set(IDENTITY_FIELDS)
    # server named neither key pattern nor index; check the unique backstop directly
    key = comparison_key(canonical)
    backstop = {f: key[f] for f in SEED_USER_INDEX.key_fields}
    return db[USER_COLLECTION].count_documents(backstop, limit=1) > 0


def ensure_seed_user(db, canonical: SeedUserRecord, *, clock: Callable[[], datetime] = utc_now) -> Action:
    """
    Insert the seed user unless a record equal to it on every identity field
    is already stored. ``creationTimeUtc`` never takes part in the comparison
    and is assigned here, at insert time.

    Existing records are never updated. A duplicate-key error on the identity
    fields means a concurrent bootstrap got there first, or the stored seed
    user has since been edited; both are reported as ``ALREADY_PRESENT``.
    Every other failure propagates.
    """
    if seed_user_exists(db, canonical):
        return Action.ALREADY_PRESENT

    doc = canonical.to_document(clock())
    try:
        db[USER_COLLECTION].insert_one(doc)
    except DuplicateKeyError as e:
        if not _is_benign_conflict(db, canonical, e):
            raise
        logger.warning("Seed user %r already stored with other field values (%s); leaving it as is",
                       canonical.id, e)
        return Action.ALREADY_PRESENT
    return Action.CREATED
