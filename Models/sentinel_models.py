# Models/sentinel_models.py
from enum import Enum
from typing import FrozenSet, List

from pymongo import ASCENDING
from pydantic import BaseModel, ConfigDict, field_validator

USER_COLLECTION = "user"


class Action(str, Enum):
    CREATED = "created"
    ALREADY_PRESENT = "already_present"


class IndexRequirement(BaseModel):
    """A unique/lookup constraint over a set of field paths on one collection.

    Two requirements are equivalent iff their ``key_fields`` sets are equal;
    declaration order carries no meaning.
    """

    model_config = ConfigDict(frozen=True)

    collection: str
    key_fields: FrozenSet[str]
    unique: bool = False
    label: str = ""

    @field_validator("key_fields")
    @classmethod
    def non_empty(cls, v: FrozenSet[str]) -> FrozenSet[str]:
        if not v:
            raise ValueError("key_fields must not be empty")
        return v

    def index_keys(self) -> List[tuple]:
        # sorted so the server-generated index name is stable across runs
        return [(f, ASCENDING) for f in sorted(self.key_fields)]


# ── Declared indices
INDEX_REQUIREMENTS: List[IndexRequirement] = [
    IndexRequirement(collection="fs.files", key_fields=frozenset({"md5", "metadata.uploader"}),
                     unique=True, label="raw uploads"),
    IndexRequirement(collection="annotations", key_fields=frozenset({"annotMd5"}),
                     unique=True, label="annotation records"),
    IndexRequirement(collection="references", key_fields=frozenset({"combinedMd5"}),
                     unique=True, label="reference records"),
]

# backstop for two bootstraps racing to insert the seed user
SEED_USER_INDEX = IndexRequirement(collection=USER_COLLECTION, key_fields=frozenset({"id"}),
                                   unique=True, label="user accounts")
