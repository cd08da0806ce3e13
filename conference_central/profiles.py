"""Profile service: read and upsert the caller's profile."""
from __future__ import annotations

import logging
from typing import Optional, Tuple, Union

from .database import Database, Transaction
from .errors import Unauthorized
from .forms import ProfileForm
from .keys import profile_key
from .models import Principal, Profile, TeeShirtSize, default_display_name

logger = logging.getLogger("conference_central.profiles")


def require_principal(principal: Optional[Principal]) -> Principal:
    if principal is None:
        raise Unauthorized("Authorization required")
    return principal


def get_or_create_profile(principal: Principal, store: Union[Database, Transaction]) -> Profile:
    """Return the caller's stored profile, or an unsaved default one."""

    profile = store.get(profile_key(principal.user_id))
    if profile is None:
        profile = Profile(
            user_id=principal.user_id,
            display_name=default_display_name(principal.email),
            main_email=principal.email,
            tee_shirt_size=TeeShirtSize.NOT_SPECIFIED,
        )
    return profile  # type: ignore[return-value]


class ProfileService:
    def __init__(self, database: Database) -> None:
        self._database = database

    def get_profile(self, principal: Optional[Principal]) -> Optional[Profile]:
        principal = require_principal(principal)
        return self._database.get(profile_key(principal.user_id))  # type: ignore[return-value]

    def save_profile(self, principal: Optional[Principal], form: Optional[ProfileForm] = None) -> Profile:
        """Create the caller's profile or update its display name and tee shirt size.

        ``main_email`` is only written when the profile is first created.
        """

        principal = require_principal(principal)
        form = form or ProfileForm()
        tee_shirt_size = form.tee_shirt_size or TeeShirtSize.NOT_SPECIFIED

        def _save(txn: Transaction) -> Tuple[Profile, bool]:
            profile = txn.get(profile_key(principal.user_id))
            created = profile is None
            if profile is None:
                profile = Profile(
                    user_id=principal.user_id,
                    display_name=form.display_name or default_display_name(principal.email),
                    main_email=principal.email,
                    tee_shirt_size=tee_shirt_size,
                )
            else:
                profile.update(form.display_name, tee_shirt_size)  # type: ignore[union-attr]
            txn.put(profile)
            return profile, created  # type: ignore[return-value]

        profile, created = self._database.run_in_transaction(_save)
        if created:
            logger.info("Created profile for user %s", principal.user_id)
        return profile


__all__ = ["ProfileService", "get_or_create_profile", "require_principal"]
