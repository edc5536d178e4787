"""
Reset the users table to a small demo set.

Usage::

    python seed.py

Every existing user (and their saved events) is deleted first. Passwords
are hashed with the configured bcrypt cost.
"""
from __future__ import annotations

import logging

from sqlmodel import Session, select

from config import get_settings
from db import get_engine, init_db
from logging_config import setup_logging
from models import User
from schemas import UserCreate
from services.users import UserService

logger = logging.getLogger("seed")

DEMO_USERS = [
    {
        "name": "Admin User",
        "email": "admin@example.com",
        "password": "admin123",
        "age": 30,
        "role": "admin",
        "interests": ["Dance", "Sport"],
        "city": "Paris",
    },
    {
        "name": "John Doe",
        "email": "john@example.com",
        "password": "user123",
        "age": 25,
        "interests": ["Dance", "Sport"],
        "city": "Paris",
    },
    {
        "name": "Jane Smith",
        "email": "jane@example.com",
        "password": "user123",
        "age": 28,
        "interests": ["Dance", "Sport"],
        "city": "Paris",
    },
]


def seed_users(session: Session) -> int:
    for user in session.exec(select(User)).all():
        session.delete(user)
    session.commit()
    logger.info("Cleared existing users")

    service = UserService(session, get_settings())
    for data in DEMO_USERS:
        service.create_user(UserCreate(**data))
    return len(DEMO_USERS)


def main() -> None:
    setup_logging(get_settings().log_level)
    engine = get_engine()
    init_db(engine)
    with Session(engine, expire_on_commit=False) as session:
        count = seed_users(session)
    logger.info("Seeded %d users", count)


if __name__ == "__main__":
    main()
