"""Tests for index reconciliation."""

import logging
from unittest.mock import MagicMock

import pytest
from pydantic import ValidationError
from pymongo import ASCENDING
from pymongo.errors import OperationFailure

from Models.sentinel_models import INDEX_REQUIREMENTS, Action, IndexRequirement
from utils.mongo_index import IndexConflictError, ensure_index, ensure_indexes, missing_index

UPLOADS = INDEX_REQUIREMENTS[0]


def _mock_db(index_info):
    coll = MagicMock()
    coll.index_information.return_value = index_info
    db = MagicMock()
    db.__getitem__.return_value = coll
    return db, coll


def test_missing_index_ignores_field_order():
    existing = [frozenset({"_id"}), frozenset({"A", "B"})]
    required = IndexRequirement(collection="c", key_fields={"B", "A"}, unique=True)
    assert missing_index(existing, required) is False


def test_missing_index_requires_exact_set():
    existing = [frozenset({"A"}), frozenset({"A", "B", "C"})]
    required = IndexRequirement(collection="c", key_fields={"A", "B"})
    assert missing_index(existing, required) is True


def test_requirement_rejects_empty_key_fields():
    with pytest.raises(ValidationError):
        IndexRequirement(collection="c", key_fields=frozenset())


def test_ensure_index_creates_when_absent(db):
    assert ensure_index(db, UPLOADS) == Action.CREATED

    info = db["fs.files"].index_information()
    created = [spec for name, spec in info.items() if name != "_id_"]
    assert len(created) == 1
    assert {k for k, _ in created[0]["key"]} == {"md5", "metadata.uploader"}
    assert created[0]["unique"] is True


def test_ensure_index_accepts_reordered_existing_index(db):
    db["fs.files"].create_index([("metadata.uploader", 1), ("md5", 1)], unique=True)
    before = db["fs.files"].index_information()

    assert ensure_index(db, UPLOADS) == Action.ALREADY_PRESENT
    assert db["fs.files"].index_information() == before


def test_ensure_index_is_idempotent(db):
    assert ensure_index(db, UPLOADS) == Action.CREATED
    assert ensure_index(db, UPLOADS) == Action.ALREADY_PRESENT
    assert len(db["fs.files"].index_information()) == 2


def test_ensure_index_leaves_mismatched_uniqueness_alone(db, caplog):
    db["annotations"].create_index([("annotMd5", 1)])
    required = INDEX_REQUIREMENTS[1]

    with caplog.at_level(logging.WARNING, logger="utils.mongo_index"):
        assert ensure_index(db, required) == Action.ALREADY_PRESENT

    assert "leaving it as is" in caplog.text
    assert len(db["annotations"].index_information()) == 2


def test_ensure_index_does_not_issue_request_when_present():
    db, coll = _mock_db({
        "_id_": {"key": [("_id", 1)]},
        "combinedMd5_1": {"key": [("combinedMd5", 1)], "unique": True},
    })
    assert ensure_index(db, INDEX_REQUIREMENTS[2]) == Action.ALREADY_PRESENT
    coll.create_index.assert_not_called()


def test_ensure_index_reports_conflicting_data():
    db, coll = _mock_db({"_id_": {"key": [("_id", 1)]}})
    coll.create_index.side_effect = OperationFailure("E11000 duplicate key error collection", code=11000)

    with pytest.raises(IndexConflictError) as exc_info:
        ensure_index(db, UPLOADS)

    err = exc_info.value
    assert err.collection == "fs.files"
    assert err.key_fields == ("md5", "metadata.uploader")
    assert "fs.files" in str(err)
    assert isinstance(err.__cause__, OperationFailure)


def test_ensure_index_propagates_other_failures():
    db, coll = _mock_db({})
    coll.create_index.side_effect = OperationFailure("not authorized", code=13)

    with pytest.raises(OperationFailure) as exc_info:
        ensure_index(db, UPLOADS)
    assert not isinstance(exc_info.value, IndexConflictError)


def test_partial_state_creates_only_missing_indexes(db):
    db["fs.files"].create_index([("md5", 1), ("metadata.uploader", 1)], unique=True)
    uploads_before = db["fs.files"].index_information()

    results = ensure_indexes(db, INDEX_REQUIREMENTS)

    assert [action for _, action in results] == [
        Action.ALREADY_PRESENT, Action.CREATED, Action.CREATED,
    ]
    assert db["fs.files"].index_information() == uploads_before
    assert len(db["annotations"].index_information()) == 2
    assert len(db["references"].index_information()) == 2


def test_index_keys_are_sorted_and_ascending():
    assert UPLOADS.index_keys() == [("md5", ASCENDING), ("metadata.uploader", ASCENDING)]
