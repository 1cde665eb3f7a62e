# main.py
#
# Initial Sentinel MongoDB setup. Safe to re-run: only missing indices and a
# missing seed user are created.
#
# Usage: python main.py [MONGO_URI] [--db NAME]
import argparse
import logging
import os
import sys
import time

from dotenv import load_dotenv

from Connections.db_mongo import MONGO_DB_DEFAULT, get_db
from Models.sentinel_models import INDEX_REQUIREMENTS, SEED_USER_INDEX
from Schemas.seed_schema import SeedUserRecord, seed_user_from_env
from utils.mongo_index import ensure_indexes
from utils.seed_user import ensure_seed_user
from utils.transaction_logger import build_log, dump_log

logger = logging.getLogger("sentinel.bootstrap")


def run_bootstrap(db, seed_user: SeedUserRecord) -> dict:
    """
    Reconcile indices first, then the seed user, so the unique constraints are
    live before the seed row is written. Returns the run summary.
    """
    start = time.time()
    logger.info("    *** Bootstrapping Sentinel ***")

    logger.info("    Creating indices for ...")
    index_results = ensure_indexes(db, [*INDEX_REQUIREMENTS, SEED_USER_INDEX])

    logger.info("    Adding the seed user ...")
    seed_action = ensure_seed_user(db, seed_user)
    logger.info("      - %s (%s)", seed_user.id, seed_action.value)

    logger.info("    ************ Done ************")
    return build_log(db.name, index_results, seed_action, int((time.time() - start) * 1000))


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Bootstrap the Sentinel MongoDB database.")
    parser.add_argument("mongo_uri", nargs="?", default=None,
                        help="MongoDB connection string (default: $MONGO_URI)")
    parser.add_argument("--db", dest="db_name", default=None,
                        help=f"database name (default: $MONGO_DB or {MONGO_DB_DEFAULT!r})")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    load_dotenv()
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    args = parse_args(argv)

    try:
        seed_user = seed_user_from_env()
        with get_db(args.mongo_uri, args.db_name) as db:
            summary = run_bootstrap(db, seed_user)
    except RuntimeError as e:
        logger.error("Bootstrap failed: %s", e)
        return 1

    logger.info("Bootstrap summary: %s", dump_log(summary))
    return 0


if __name__ == "__main__":
    sys.exit(main())
