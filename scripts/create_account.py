"""Create an account directly, bypassing the invitation flow (Postgres only).

Usage:
    uv run python -m scripts.create_account <email> <name> [role] [password]
If password is omitted, a random one is printed.
All imports use app.*.
"""

import asyncio
import sys

from app.application.dtos.account import AccountCreate
from app.core.config import get_settings
from app.domain.enums import AccountRole
from app.domain.exceptions import AccountAlreadyExistsException
from app.infrastructure.persistence.database import transactional_session
from app.infrastructure.persistence.repositories import AccountRepository
from app.shared.utils.generators import generate_token


async def main() -> None:
    """Create one account with the given role (default: employee)."""
    if len(sys.argv) < 3:
        print(
            "Usage: uv run python -m scripts.create_account <email> <name> [role] [password]",
            file=sys.stderr,
        )
        sys.exit(1)
    email = sys.argv[1]
    name = sys.argv[2]
    role = sys.argv[3] if len(sys.argv) > 3 else AccountRole.EMPLOYEE.value
    password = sys.argv[4] if len(sys.argv) > 4 else None

    if role not in AccountRole.values():
        print(f"Unknown role {role!r}; expected one of {AccountRole.values()}", file=sys.stderr)
        sys.exit(1)
    settings = get_settings()
    if settings.database_backend != "postgres":
        print("This script requires DATABASE_BACKEND=postgres", file=sys.stderr)
        sys.exit(1)
    if password is None:
        password = generate_token()[:16]
        print(f"Generated password: {password}")
    if len(password) < settings.min_password_length:
        print(
            f"Password must be at least {settings.min_password_length} characters long",
            file=sys.stderr,
        )
        sys.exit(1)

    try:
        async with transactional_session() as session:
            account = await AccountRepository(session).create_account(
                AccountCreate(
                    email=email,
                    password=password,
                    name=name,
                    role=role,
                    department="",
                )
            )
    except AccountAlreadyExistsException as exc:
        print(exc.message, file=sys.stderr)
        sys.exit(1)
    print(f"Created account {account.id} ({account.email}, {account.role})")


if __name__ == "__main__":
    asyncio.run(main())
