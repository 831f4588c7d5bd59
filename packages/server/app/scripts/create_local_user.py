"""
Script to create a local user (and a first workspace) for development.
"""

import asyncio
import argparse
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import hash_password
from app.core.config import get_settings
from app.core.database import Database
from app.models.user import User
from app.services.accounts import get_user_by_email
from app.services.workspaces import first_workspace_id, onboard_workspace
from nct_shared.schemas.workspaces import OnboardingRequest


async def create_user(
    session: AsyncSession,
    email: str,
    password: str,
    name: Optional[str] = None,
    workspace_name: Optional[str] = None,
) -> User:
    """Create (or reuse) a user and make sure they own at least one workspace."""
    user = await get_user_by_email(session, email)
    if not user:
        user = User(
            email=email.lower(),
            name=name or email.split("@")[0],
            password_hash=hash_password(password),
        )
        session.add(user)
        await session.flush()
        print(f"Created user: {email}")
    else:
        print(f"User {email} already exists.")

    if await first_workspace_id(session, user.id) is None:
        result = await onboard_workspace(
            session,
            user.id,
            OnboardingRequest(name=workspace_name or f"{user.name}'s Workspace"),
        )
        print(f"Created workspace {result.workspace_id} owned by {email}.")

    return user


async def run(email: str, password: str, name: Optional[str], workspace_name: Optional[str]) -> None:
    settings = get_settings()
    db = Database(settings.database_url)
    try:
        await db.init_db()
        async with db.session() as session:
            await create_user(session, email, password, name, workspace_name)
    finally:
        await db.dispose()
    print("Done.")


def main() -> None:
    parser = argparse.ArgumentParser(description="Create a local user with a workspace.")
    parser.add_argument("--email", required=True, help="Email address for the user")
    parser.add_argument("--password", required=True, help="Password for the user")
    parser.add_argument("--name", help="Display name (defaults to the email's local part)")
    parser.add_argument("--workspace", help="Name of the workspace to create")

    args = parser.parse_args()
    asyncio.run(run(args.email, args.password, args.name, args.workspace))


if __name__ == "__main__":
    main()
