"""Script to create a user account from the command line."""

import argparse
import asyncio
import getpass
import sys

sys.path.insert(0, ".")

from pydantic import ValidationError

from src.api.auth import user_values
from src.config import get_settings
from src.db.session import create_engine, create_session_maker, init_db
from src.schemas.schemas import UserCreate
from src.services.errors import NoorError
from src.services.storage import StorageService


async def main(args: argparse.Namespace) -> int:
    """Create a user with the given credentials."""
    password = args.password or getpass.getpass("Password: ")
    try:
        payload = UserCreate(username=args.username, password=password, email=args.email, name=args.name)
    except ValidationError as e:
        print(f"Invalid input: {e}")
        return 1

    engine = create_engine(get_settings().database_url)
    try:
        print("Initializing database...")
        await init_db(engine)

        storage = StorageService(create_session_maker(engine))
        if await storage.get_user_by_username(payload.username) is not None:
            print(f"User '{payload.username}' already exists")
            return 1

        user = await storage.create_user(user_values(payload))
    except NoorError as e:
        print(f"Failed to create user: {e.message}")
        return 1
    finally:
        await engine.dispose()

    print("\n" + "=" * 60)
    print("USER CREATED SUCCESSFULLY")
    print("=" * 60)
    print(f"\nUser ID:  {user.id}")
    print(f"Username: {user.username}")
    print(f"Email:    {user.email}")
    print("=" * 60)
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create a Noor Companion user")
    parser.add_argument("username")
    parser.add_argument("email")
    parser.add_argument("--name", default=None)
    parser.add_argument("--password", default=None, help="Prompted for when omitted")
    sys.exit(asyncio.run(main(parser.parse_args())))
