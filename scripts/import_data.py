import sys
from pathlib import Path

from savorly.config import settings
from savorly.db import SessionLocal, init_db, session_scope
from savorly.seed import import_recipes, read_seed_file


def main():
    init_db(seed=False)
    p = Path(sys.argv[1]) if len(sys.argv) > 1 else settings.seed_file
    if not p.exists():
        print(f'{p} not found')
        return
    with session_scope(SessionLocal) as db:
        added = import_recipes(db, read_seed_file(p))
    print(f'Imported {added} recipes')


if __name__ == '__main__':
    main()
