import argparse
import logging

from .config import settings
from .crud import database_stats
from .db import SessionLocal, init_db, session_scope


def main(argv=None):
    parser = argparse.ArgumentParser(prog="savorly")
    parser.add_argument(
        "--reset", action="store_true",
        help="drop all data and reseed the catalog before starting",
    )
    parser.add_argument(
        "--no-serve", action="store_true",
        help="initialize the database, print a summary and exit",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    init_db(reset=args.reset or settings.reset_db_on_start)
    with session_scope(SessionLocal) as db:
        stats = database_stats(db)
    print(
        f"Loaded {stats.recipes} recipe(s): {stats.food} food, "
        f"{stats.drinks} drinks, {stats.tags} tags, {stats.users} user(s)."
    )
    if args.no_serve:
        return

    import uvicorn

    uvicorn.run("savorly.app:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
