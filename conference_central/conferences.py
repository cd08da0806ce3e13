"""Conference service: create, update and read conferences owned by the caller."""
from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional

from .database import Database, Transaction
from .errors import BadRequest, Conflict, Forbidden, NotFound
from .forms import ConferenceForm
from .keys import CONFERENCE_KIND, InvalidKeyError, Key, decode_conference_key, profile_key
from .models import Conference, Principal, Profile
from .profiles import get_or_create_profile, require_principal

logger = logging.getLogger("conference_central.conferences")


def conference_not_found(websafe_key: str) -> NotFound:
    return NotFound(f"No Conference found with key: {websafe_key}")


def decode_or_not_found(websafe_key: str) -> Key:
    try:
        return decode_conference_key(websafe_key)
    except InvalidKeyError as exc:
        raise conference_not_found(websafe_key) from exc


def organizer_display_names(database: Database, conferences: Iterable[Conference]) -> Dict[str, Optional[str]]:
    """Batch-load the organizers of ``conferences`` and map user id to display name."""

    organizer_ids: List[str] = []
    for conference in conferences:
        if conference.organizer_user_id not in organizer_ids:
            organizer_ids.append(conference.organizer_user_id)
    if not organizer_ids:
        return {}

    profiles = database.get_multi([profile_key(user_id) for user_id in organizer_ids])
    names: Dict[str, Optional[str]] = {}
    for user_id, profile in zip(organizer_ids, profiles):
        names[user_id] = profile.display_name if isinstance(profile, Profile) else None
    return names


class ConferenceService:
    def __init__(self, database: Database) -> None:
        self._database = database

    def create_conference(self, principal: Optional[Principal], form: ConferenceForm) -> Conference:
        """Create a conference under the caller's profile.

        A first-time organizer's default profile is written in the same
        transaction as the conference.
        """

        principal = require_principal(principal)
        if not form.name:
            raise BadRequest("Conference 'name' field required")

        key = self._database.allocate_child_id(profile_key(principal.user_id), CONFERENCE_KIND)
        conference_id = int(key.id)

        def _create(txn: Transaction) -> Conference:
            profile = get_or_create_profile(principal, txn)
            conference = Conference.from_form(conference_id, principal.user_id, form)
            txn.put_multi([profile, conference])
            return conference

        conference = self._database.run_in_transaction(_create)
        logger.info(
            "User %s created conference %s (%s) with %s seats",
            principal.user_id,
            conference.conference_id,
            conference.name,
            conference.max_attendees,
        )
        return conference

    def update_conference(
        self,
        principal: Optional[Principal],
        websafe_key: str,
        form: ConferenceForm,
    ) -> Conference:
        principal = require_principal(principal)
        key = decode_or_not_found(websafe_key)

        def _update(txn: Transaction) -> Conference:
            conference = txn.get(key)
            if not isinstance(conference, Conference):
                raise conference_not_found(websafe_key)
            if conference.organizer_user_id != principal.user_id:
                raise Forbidden("Only the owner can update the conference.")
            try:
                conference.update_with_form(form)
            except ValueError as exc:
                raise Conflict(str(exc)) from exc
            if conference.start_date and conference.end_date and conference.end_date < conference.start_date:
                raise BadRequest("endDate must not be before startDate")
            txn.put(conference)
            return conference

        conference = self._database.run_in_transaction(_update)
        logger.info("User %s updated conference %s", principal.user_id, conference.conference_id)
        return conference

    def get_conference(self, websafe_key: str) -> Conference:
        key = decode_or_not_found(websafe_key)
        conference = self._database.get(key)
        if not isinstance(conference, Conference):
            raise conference_not_found(websafe_key)
        return conference

    def get_conferences_created(self, principal: Optional[Principal]) -> List[Conference]:
        principal = require_principal(principal)
        query = self._database.query(
            CONFERENCE_KIND,
            order=["name"],
            ancestor=profile_key(principal.user_id),
        )
        return [conference for conference in query if isinstance(conference, Conference)]


__all__ = [
    "ConferenceService",
    "conference_not_found",
    "decode_or_not_found",
    "organizer_display_names",
]
