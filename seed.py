#!/usr/bin/env python3
"""
Load the sample catalog into the configured database.

Usage:
    python seed.py            # create tables and insert missing records
    python seed.py --reset    # drop everything first
"""
import argparse
from typing import Callable

from sqlalchemy.orm import Session

import config
import database
from logger import get_logger, setup_logging
from models import Book, Member

logger = get_logger("seed")

MEMBERS = [
    {"code": "M001", "name": "Angga"},
    {"code": "M002", "name": "Ferry"},
    {"code": "M003", "name": "Putri"},
]

BOOKS = [
    {"code": "JK-45", "title": "Harry Potter", "author": "J.K Rowling", "stock": 1},
    {"code": "SHR-1", "title": "A Study in Scarlet", "author": "Arthur Conan Doyle", "stock": 1},
    {"code": "TW-11", "title": "Twilight", "author": "Stephenie Meyer", "stock": 1},
    {"code": "HOB-83", "title": "The Hobbit, or There and Back Again", "author": "J.R.R. Tolkien", "stock": 1},
    {"code": "NRN-7", "title": "The Lion, the Witch and the Wardrobe", "author": "C.S. Lewis", "stock": 1},
]


def seed(session_factory: Callable[[], Session]) -> dict:
    """Insert sample members and books whose codes are not present yet."""
    created = {"members": 0, "books": 0}
    db = session_factory()
    try:
        existing = {code for (code,) in db.query(Member.code).all()}
        for data in MEMBERS:
            if data["code"] not in existing:
                db.add(Member(borrowing=0, status="normal", **data))
                created["members"] += 1

        existing = {code for (code,) in db.query(Book.code).all()}
        for data in BOOKS:
            if data["code"] not in existing:
                db.add(Book(**data))
                created["books"] += 1
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
    return created


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(description="Load the sample library catalog")
    parser.add_argument("--reset", action="store_true", help="drop and recreate all tables first")
    args = parser.parse_args(argv)

    setup_logging(config.LOG_LEVEL)
    if args.reset:
        logger.warning(f"Resetting database {database.engine.url!r}")
        database.reset_db()
    else:
        database.init_db()

    created = seed(database.Session)
    logger.info(f"Seeded {created['members']} member(s) and {created['books']} book(s)")


if __name__ == "__main__":
    main()
