"""Domain entities for profiles and conferences."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import TYPE_CHECKING, List, Optional

from .keys import Key, conference_key, profile_key

if TYPE_CHECKING:  # pragma: no cover
    from .forms import ConferenceForm


class TeeShirtSize(str, enum.Enum):
    NOT_SPECIFIED = "NOT_SPECIFIED"
    XS = "XS"
    SMALL = "SMALL"
    MEDIUM = "MEDIUM"
    LARGE = "LARGE"
    XL = "XL"
    XXL = "XXL"
    XXXL = "XXXL"


@dataclass(frozen=True)
class Principal:
    """Authenticated identity attached to a request."""

    user_id: str
    email: str


@dataclass(frozen=True)
class Account:
    """Represents an API account stored in the conference database."""

    user_id: str
    email: str
    api_key_prefix: str
    created_at: datetime


def default_display_name(email: Optional[str]) -> Optional[str]:
    """Return the local part of ``email`` (``lemoncake@example.com`` -> ``lemoncake``)."""

    if email is None:
        return None
    local, _, _ = email.partition("@")
    return local


@dataclass
class Profile:
    """A user's durable state, keyed by the identity provider's user id."""

    user_id: str
    display_name: Optional[str]
    main_email: Optional[str]
    tee_shirt_size: TeeShirtSize = TeeShirtSize.NOT_SPECIFIED
    conference_keys_to_attend: List[str] = field(default_factory=list)

    @property
    def key(self) -> Key:
        return profile_key(self.user_id)

    def update(self, display_name: Optional[str], tee_shirt_size: TeeShirtSize) -> None:
        if display_name is not None:
            self.display_name = display_name
        self.tee_shirt_size = tee_shirt_size

    def is_attending(self, websafe_conference_key: str) -> bool:
        return websafe_conference_key in self.conference_keys_to_attend

    def add_to_conference_keys_to_attend(self, websafe_conference_key: str) -> None:
        if self.is_attending(websafe_conference_key):
            raise ValueError(f"Already registered: {websafe_conference_key}")
        self.conference_keys_to_attend.append(websafe_conference_key)

    def unregister_from_conference(self, websafe_conference_key: str) -> None:
        if not self.is_attending(websafe_conference_key):
            raise ValueError("Invalid conferenceKey")
        self.conference_keys_to_attend.remove(websafe_conference_key)


@dataclass
class Conference:
    """An event organised by a user, stored under the organizer's profile."""

    conference_id: int
    organizer_user_id: str
    name: str
    description: Optional[str] = None
    city: Optional[str] = None
    topics: List[str] = field(default_factory=list)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    month: int = 0
    max_attendees: int = 0
    seats_available: int = 0

    @property
    def key(self) -> Key:
        return conference_key(self.organizer_user_id, self.conference_id)

    @property
    def websafe_key(self) -> str:
        return self.key.urlsafe()

    @property
    def seats_booked(self) -> int:
        return self.max_attendees - self.seats_available

    @classmethod
    def from_form(cls, conference_id: int, organizer_user_id: str, form: "ConferenceForm") -> "Conference":
        conference = cls(
            conference_id=conference_id,
            organizer_user_id=organizer_user_id,
            name=form.name or "",
            description=form.description,
            city=form.city,
            topics=list(form.topics),
            start_date=form.start_date,
            end_date=form.end_date,
            max_attendees=form.max_attendees,
            seats_available=form.max_attendees,
        )
        conference.month = conference.start_date.month if conference.start_date else 0
        return conference

    def update_with_form(self, form: "ConferenceForm") -> None:
        """Copy the fields supplied in ``form`` onto this conference."""

        supplied = form.model_fields_set
        if "name" in supplied and form.name:
            self.name = form.name
        if "description" in supplied:
            self.description = form.description
        if "city" in supplied:
            self.city = form.city
        if "topics" in supplied:
            self.topics = list(form.topics)
        if "start_date" in supplied:
            self.start_date = form.start_date
            self.month = form.start_date.month if form.start_date else 0
        if "end_date" in supplied:
            self.end_date = form.end_date
        if "max_attendees" in supplied:
            self.resize(form.max_attendees)

    def resize(self, max_attendees: int) -> None:
        booked = self.seats_booked
        if max_attendees < booked:
            raise ValueError(
                f"Cannot lower maxAttendees to {max_attendees}; {booked} seats are already booked"
            )
        self.max_attendees = max_attendees
        self.seats_available = max_attendees - booked

    def book_seats(self, number: int) -> None:
        if self.seats_available < number:
            raise ValueError("There are no seats available.")
        self.seats_available -= number

    def give_back_seats(self, number: int) -> None:
        self.seats_available = min(self.seats_available + number, self.max_attendees)


__all__ = [
    "Account",
    "Conference",
    "Principal",
    "Profile",
    "TeeShirtSize",
    "default_display_name",
]
