"""Structured filtering and ordering over conferences."""
from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from .database import Database, Filter, InvalidQueryError
from .errors import BadRequest
from .forms import ConferenceQueryForm, QueryFilter
from .keys import CONFERENCE_KIND, MAX_INTEGER_ID
from .models import Conference

OPERATORS = {
    "=": "=",
    "EQ": "=",
    ">": ">",
    "GT": ">",
    ">=": ">=",
    "GTEQ": ">=",
    "<": "<",
    "LT": "<",
    "<=": "<=",
    "LTEQ": "<=",
}

FIELDS = {
    "city": "city",
    "CITY": "city",
    "topic": "topics",
    "topics": "topics",
    "TOPIC": "topics",
    "month": "month",
    "MONTH": "month",
    "organizerUserId": "organizer_user_id",
    "ORGANIZER": "organizer_user_id",
    "maxAttendees": "max_attendees",
    "MAX_ATTENDEES": "max_attendees",
    "seatsAvailable": "seats_available",
    "SEATS_AVAILABLE": "seats_available",
}

ORDER_FIELDS = {
    "name": "name",
    "city": "city",
    "month": "month",
    "startDate": "start_date",
    "organizerUserId": "organizer_user_id",
    "maxAttendees": "max_attendees",
    "seatsAvailable": "seats_available",
}

INTEGER_FIELDS = frozenset({"month", "max_attendees", "seats_available"})


def _format_filters(filters: Sequence[QueryFilter]) -> Tuple[Optional[str], List[Filter]]:
    """Check the user supplied filters and translate them to store filters."""

    formatted: List[Filter] = []
    inequality_field: Optional[str] = None
    for clause in filters:
        try:
            field = FIELDS[clause.field.strip()]
            operator = OPERATORS[clause.operator.strip().upper()]
        except KeyError:
            raise BadRequest("Filter contains invalid field or operator.") from None

        value: object = clause.value
        if field in INTEGER_FIELDS:
            try:
                number = int(value)  # type: ignore[arg-type]
            except (TypeError, ValueError):
                raise BadRequest(f"Non-integer value for integer field '{clause.field}'.") from None
            if not -MAX_INTEGER_ID - 1 <= number <= MAX_INTEGER_ID:
                raise BadRequest(f"Value out of range for integer field '{clause.field}'.")
            value = number
        elif isinstance(value, int):
            value = str(value)

        if operator != "=":
            if field not in INTEGER_FIELDS:
                raise BadRequest(f"Inequality filters are only allowed on numeric fields, not '{clause.field}'.")
            if inequality_field and inequality_field != field:
                raise BadRequest("Inequality filter is allowed on only one field.")
            inequality_field = field
        formatted.append(Filter(field, operator, value))
    return inequality_field, formatted


def _format_order(inequality_field: Optional[str], order: Sequence[str]) -> List[str]:
    ordering: List[str] = []
    for item in order:
        cleaned = item.strip()
        descending = cleaned.startswith("-")
        try:
            field = ORDER_FIELDS[cleaned.lstrip("-")]
        except KeyError:
            raise BadRequest(f"Cannot order by '{cleaned}'.") from None
        ordering.append(f"-{field}" if descending else field)

    if not ordering:
        ordering = ["name"]

    if inequality_field is not None:
        fields = [item.lstrip("-") for item in ordering]
        if inequality_field not in fields:
            # Sort on the inequality field first, as the store requires.
            ordering.insert(0, inequality_field)
        elif fields[0] != inequality_field:
            raise BadRequest("The inequality field must be the first sort order.")
    return ordering


class QueryService:
    def __init__(self, database: Database) -> None:
        self._database = database

    def query_conferences(self, form: Optional[ConferenceQueryForm] = None) -> List[Conference]:
        form = form or ConferenceQueryForm()
        inequality_field, filters = _format_filters(form.filters)
        order = _format_order(inequality_field, form.order)
        return self._run(filters, order)

    def get_conferences_filtered(self) -> List[Conference]:
        filters = [
            Filter("max_attendees", ">", 10),
            Filter("city", "=", "London"),
            Filter("topics", "=", "Web Technologies"),
            Filter("month", "=", 1),
        ]
        return self._run(filters, ["max_attendees", "name"])

    def _run(self, filters: Sequence[Filter], order: Sequence[str]) -> List[Conference]:
        try:
            results = self._database.query(CONFERENCE_KIND, filters, order)
        except InvalidQueryError as exc:
            raise BadRequest(str(exc)) from exc
        return [conference for conference in results if isinstance(conference, Conference)]


__all__ = ["FIELDS", "OPERATORS", "QueryService"]
