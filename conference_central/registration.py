"""Seat registration for conferences.

Registering books one seat on the conference and appends the conference key
to the caller's attendance list. The conference lives in its organizer's
entity group while the profile lives in the caller's, so both writes run in
one store transaction spanning the two groups; SQLite's database-wide write
lock makes that transaction serializable. For every conference::

    seats_available + (profiles attending it) == max_attendees

The transactional functions return a :class:`RegistrationOutcome` and the
service turns failures into caller-facing errors after the transaction has
finished.
"""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import List, Optional

from .conferences import conference_not_found, decode_or_not_found
from .database import Database, Transaction
from .errors import BadRequest, Conflict, NotFound
from .keys import InvalidKeyError, Key, decode_conference_key, profile_key
from .models import Conference, Principal, Profile
from .profiles import get_or_create_profile, require_principal

logger = logging.getLogger("conference_central.registration")


class RegistrationOutcome(enum.Enum):
    SUCCESS = "success"
    NOT_FOUND = "not_found"
    ALREADY_REGISTERED = "already_registered"
    NO_SEATS = "no_seats"
    NOT_REGISTERED = "not_registered"


@dataclass(frozen=True)
class RegistrationResult:
    result: bool
    reason: str


class RegistrationService:
    def __init__(self, database: Database) -> None:
        self._database = database

    def register_for_conference(self, principal: Optional[Principal], websafe_key: str) -> RegistrationResult:
        principal = require_principal(principal)
        key = decode_or_not_found(websafe_key)
        canonical = key.urlsafe()

        def _register(txn: Transaction) -> RegistrationOutcome:
            conference = txn.get(key)
            if not isinstance(conference, Conference):
                return RegistrationOutcome.NOT_FOUND
            profile = get_or_create_profile(principal, txn)
            if profile.is_attending(canonical):
                return RegistrationOutcome.ALREADY_REGISTERED
            if conference.seats_available <= 0:
                return RegistrationOutcome.NO_SEATS
            profile.add_to_conference_keys_to_attend(canonical)
            conference.book_seats(1)
            txn.put_multi([profile, conference])
            return RegistrationOutcome.SUCCESS

        outcome = self._database.run_in_transaction(_register)
        self._raise_for_outcome(outcome, websafe_key)
        logger.info("User %s registered for conference %s", principal.user_id, canonical)
        return RegistrationResult(result=True, reason="Registration successful")

    def unregister_from_conference(self, principal: Optional[Principal], websafe_key: str) -> RegistrationResult:
        principal = require_principal(principal)
        key = decode_or_not_found(websafe_key)
        canonical = key.urlsafe()

        def _unregister(txn: Transaction) -> RegistrationOutcome:
            conference = txn.get(key)
            if not isinstance(conference, Conference):
                return RegistrationOutcome.NOT_FOUND
            profile = txn.get(profile_key(principal.user_id))
            if not isinstance(profile, Profile) or not profile.is_attending(canonical):
                return RegistrationOutcome.NOT_REGISTERED
            profile.unregister_from_conference(canonical)
            conference.give_back_seats(1)
            txn.put_multi([profile, conference])
            return RegistrationOutcome.SUCCESS

        outcome = self._database.run_in_transaction(_unregister)
        self._raise_for_outcome(outcome, websafe_key)
        logger.info("User %s released their seat for conference %s", principal.user_id, canonical)
        return RegistrationResult(result=True, reason="Unregistration successful")

    def get_conferences_to_attend(self, principal: Optional[Principal]) -> List[Conference]:
        """Return the conferences the caller registered for, in registration order."""

        principal = require_principal(principal)
        profile = self._database.get(profile_key(principal.user_id))
        if not isinstance(profile, Profile):
            raise NotFound("Profile doesn't exist.")

        keys: List[Key] = []
        skipped = 0
        for websafe_key in profile.conference_keys_to_attend:
            try:
                keys.append(decode_conference_key(websafe_key))
            except InvalidKeyError:
                skipped += 1

        conferences: List[Conference] = []
        for conference in self._database.get_multi(keys):
            if isinstance(conference, Conference):
                conferences.append(conference)
            else:
                skipped += 1

        if skipped:
            logger.warning(
                "Skipped %s missing conference(s) in the attendance list of user %s",
                skipped,
                principal.user_id,
            )
        return conferences

    @staticmethod
    def _raise_for_outcome(outcome: RegistrationOutcome, websafe_key: str) -> None:
        if outcome is RegistrationOutcome.SUCCESS:
            return
        if outcome is RegistrationOutcome.NOT_FOUND:
            raise conference_not_found(websafe_key)
        if outcome is RegistrationOutcome.ALREADY_REGISTERED:
            raise Conflict("Already registered")
        if outcome is RegistrationOutcome.NO_SEATS:
            raise Conflict("No seats available")
        if outcome is RegistrationOutcome.NOT_REGISTERED:
            raise BadRequest("Invalid conferenceKey")
        raise RuntimeError(f"Unhandled registration outcome {outcome!r}")


__all__ = ["RegistrationOutcome", "RegistrationResult", "RegistrationService"]
