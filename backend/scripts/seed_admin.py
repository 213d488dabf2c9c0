#!/usr/bin/env python
"""Seed script to create the initial admin user.

Run once during initial setup. The admin can then create inspectors,
engineers and clients through the API.

Usage:
    python backend/scripts/seed_admin.py

Environment Variables:
    DATABASE_URL: Database connection string
    PASSWORD_PEPPER: Password hashing pepper (required)
    ADMIN_EMAIL: Email for admin user (default: admin@example.com)
    ADMIN_PASSWORD: Password for admin user (default: AdminP@ss123)
    ADMIN_NAME: Display name for admin user (default: System Administrator)
"""

import os
import sys

from inspex.database import get_db_session
from inspex.errors import DomainError
from inspex.users.service import create_user


def main():
    """Create initial admin user."""
    admin_email = os.getenv("ADMIN_EMAIL", "admin@example.com")
    admin_password = os.getenv("ADMIN_PASSWORD", "AdminP@ss123")
    admin_name = os.getenv("ADMIN_NAME", "System Administrator")

    try:
        with get_db_session() as session:
            admin_user = create_user(
                session,
                email=admin_email,
                name=admin_name,
                role="admin",
                password=admin_password,
            )
            print("SUCCESS: Admin user created")
            print(f"  ID:    {admin_user.id}")
            print(f"  Email: {admin_user.email}")
            print(f"  Name:  {admin_user.name}")
            print(f"  Role:  {admin_user.role}")
    except DomainError as e:
        print(f"ERROR: Failed to create admin user: {e.message}")
        sys.exit(1)


if __name__ == "__main__":
    main()
