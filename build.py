#!/usr/bin/env python3
"""
Build script for deployment.
This script creates the database tables and the first dashboard user.
"""
import logging
import os

from auth import hash_password
from extensions import db
from models import User

logger = logging.getLogger(__name__)


def create_default_admin():
    """Creates an admin user from DEFAULT_ADMIN_EMAIL/DEFAULT_ADMIN_PASSWORD if no user exists."""
    admin_email = os.environ.get('DEFAULT_ADMIN_EMAIL')
    admin_password = os.environ.get('DEFAULT_ADMIN_PASSWORD')

    if not admin_email or not admin_password:
        logger.warning("DEFAULT_ADMIN_EMAIL and/or DEFAULT_ADMIN_PASSWORD are not set. Skipping default admin creation.")
        return None

    if User.query.first() is not None:
        logger.info("Users already exist; default admin not created.")
        return None

    admin_user = User(
        email=admin_email.strip().lower(),
        password_hash=hash_password(admin_password),
        is_active=True,
    )
    db.session.add(admin_user)
    db.session.commit()
    logger.info("Default admin '%s' created.", admin_user.email)
    return admin_user


def initialize_database(app):
    """Initialize database for deployment."""
    with app.app_context():
        logger.info("Creating database tables...")
        db.create_all()

        logger.info("Creating default admin user...")
        create_default_admin()

        logger.info("Database initialization completed successfully!")


def main():
    from app import create_app
    initialize_database(create_app())


if __name__ == "__main__":
    main()
