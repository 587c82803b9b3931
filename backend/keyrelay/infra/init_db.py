# keyrelay/infra/init_db.py

import argparse

from sqlalchemy import inspect

from keyrelay.infra.database import drop_db, engine, init_db
from keyrelay.utils.logger import setup_logger


def main(argv=None):
    parser = argparse.ArgumentParser(description="Create the keyrelay database schema")
    parser.add_argument("--drop", action="store_true", help="drop all tables first")
    args = parser.parse_args(argv)

    logger = setup_logger()

    if args.drop:
        drop_db()
    init_db()

    inspector = inspect(engine)
    for table in inspector.get_table_names():
        columns = ", ".join(col["name"] for col in inspector.get_columns(table))
        logger.info("%s: %s", table, columns)


if __name__ == "__main__":
    main()
