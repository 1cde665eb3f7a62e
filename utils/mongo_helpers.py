from typing import Any, FrozenSet, Mapping, Optional

# server codes reported for unique-constraint violations
DUPLICATE_KEY_CODES = (11000, 11001, 12582)


def index_key_set(spec: Mapping[str, Any]) -> FrozenSet[str]:
    """Field paths of one ``index_information()`` entry, direction ignored."""
    return frozenset(k for k, _ in spec["key"])


def duplicate_key_fields(details: Optional[Mapping[str, Any]]) -> Optional[FrozenSet[str]]:
    """
    Fields of the violated unique index, as reported by the server in
    ``keyPattern``. None when the server did not say.
    """
    if not details:
        return None
    pattern = details.get("keyPattern")
    if not pattern:
        return None
    return frozenset(pattern)
