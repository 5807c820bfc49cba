# relaydrop/infra/init_db.py

import argparse

from relaydrop.config import settings
from relaydrop.infra.database import check_connection, init_db, make_engine
from relaydrop.infra.kv_store import KeyValueStore


def main(argv=None):
    parser = argparse.ArgumentParser(description="Create relay tables and evict expired entries.")
    parser.add_argument("--purge", action="store_true", help="delete expired entries")
    args = parser.parse_args(argv)

    engine = make_engine(settings.database_url)
    if not check_connection(engine):
        return 1

    init_db(engine)
    print("✓ Tables ready")

    if args.purge:
        purged = KeyValueStore(engine).purge_expired()
        print(f"✓ Purged {purged} expired entries")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
