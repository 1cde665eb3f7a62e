from datetime import datetime, timezone


def utc_now() -> datetime:
    # Mongo keeps millisecond precision; trim so the stored value equals the one we hand out
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=(now.microsecond // 1000) * 1000)
