"""Identity provider for the conference API."""
from __future__ import annotations

from typing import Optional

import anyio
from fastapi import Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .database import Database
from .models import Principal


class APIKeyIdentity:
    """Resolve a bearer API key to the caller's :class:`Principal`.

    Unlike a hard authentication guard this never rejects the request: a
    missing or unknown key yields ``None`` and each operation decides
    whether it needs a principal.
    """

    def __init__(self, database: Database) -> None:
        self._database = database
        self._bearer = HTTPBearer(auto_error=False)

    async def __call__(self, request: Request) -> Optional[Principal]:
        credentials: HTTPAuthorizationCredentials | None = await self._bearer(request)  # type: ignore[assignment]
        if credentials is None or credentials.scheme.lower() != "bearer":
            return None

        token = credentials.credentials.strip()
        if not token:
            return None

        account = await anyio.to_thread.run_sync(self._database.get_account_by_api_key, token)
        if account is None:
            return None
        return Principal(user_id=account.user_id, email=account.email)


__all__ = ["APIKeyIdentity"]
