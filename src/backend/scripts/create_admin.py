"""
Create an election administrator account.

Usage:
    python scripts/create_admin.py admin@college.edu --name "Election Office"

The password is prompted for unless --password is given.
"""

import asyncio
import getpass
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from azure.cosmos.exceptions import CosmosResourceExistsError

from core.security import hash_password
from db.cosmos_session import close_cosmos
from models.cosmos_documents import AdminDocument
from repositories.cosmos_admin_repository import CosmosAdminRepository


async def create_admin(email: str, password: str, display_name: str | None = None) -> int:
    """Create the admin; returns a process exit code."""
    repo = CosmosAdminRepository()
    email = email.strip().lower()

    try:
        if await repo.get_by_email(email):
            print(f"- Admin {email} already exists")
            return 1

        admin = await repo.create(
            AdminDocument(
                email=email,
                password_hash=hash_password(password),
                display_name=display_name,
            )
        )
        print(f"✓ Created admin {admin.email} ({admin.id})")
        return 0
    except CosmosResourceExistsError:
        print(f"- Admin {email} already exists")
        return 1
    finally:
        await close_cosmos()


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Create an election administrator")
    parser.add_argument("email", help="Admin sign-in email")
    parser.add_argument("--name", dest="display_name", default=None, help="Display name")
    parser.add_argument("--password", default=None, help="Password (prompted if omitted)")
    args = parser.parse_args()

    password = args.password or getpass.getpass("Password: ")
    if not password:
        print("Password must not be empty")
        sys.exit(2)

    sys.exit(asyncio.run(create_admin(args.email, password, args.display_name)))
