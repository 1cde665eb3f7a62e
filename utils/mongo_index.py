# utils/mongo_index.py
import logging
from typing import FrozenSet, Iterable, List, Tuple

from pymongo.errors import OperationFailure

from Models.sentinel_models import Action, IndexRequirement
from utils.mongo_helpers import DUPLICATE_KEY_CODES, index_key_set

logger = logging.getLogger(__name__)


class IndexConflictError(RuntimeError):
    """Existing documents already violate a requested unique index."""

    def __init__(self, collection: str, key_fields: Iterable[str], reason: str = ""):
        self.collection = collection
        self.key_fields = tuple(sorted(key_fields))
        msg = (
            f"cannot create unique index on {collection} {list(self.key_fields)}: "
            f"existing documents violate the constraint, deduplicate them first"
        )
        if reason:
            msg = f"{msg} ({reason})"
        super().__init__(msg)


def missing_index(existing: Iterable[FrozenSet[str]], requirement: IndexRequirement) -> bool:
    return not any(keys == requirement.key_fields for keys in existing)


def ensure_index(db, requirement: IndexRequirement) -> Action:
    """
    Create the index described by ``requirement`` unless an index over the
    same set of fields already exists. Existing indices are never dropped or
    altered, even when their options differ.
    """
    coll = db[requirement.collection]
    info = coll.index_information()

    if not missing_index((index_key_set(spec) for spec in info.values()), requirement):
        for name, spec in info.items():
            existing_unique = bool(spec.get("unique", False))
            if index_key_set(spec) == requirement.key_fields and existing_unique != requirement.unique:
                logger.warning(
                    "Index %s on %s covers %s but unique=%s (wanted %s); leaving it as is",
                    name, requirement.collection, sorted(requirement.key_fields),
                    existing_unique, requirement.unique,
                )
        return Action.ALREADY_PRESENT

    try:
        coll.create_index(requirement.index_keys(), unique=requirement.unique)
    except OperationFailure as e:
        if e.code in DUPLICATE_KEY_CODES:
            raise IndexConflictError(requirement.collection, requirement.key_fields, str(e)) from e
        raise
    return Action.CREATED


def ensure_indexes(db, requirements: Iterable[IndexRequirement]) -> List[Tuple[IndexRequirement, Action]]:
    results = []
    for req in requirements:
        action = ensure_index(db, req)
        logger.info("      - %s (%s)", req.label or req.collection, action.value)
        results.append((req, action))
    return results
