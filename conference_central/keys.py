"""Entity keys and their URL-safe string encoding."""
from __future__ import annotations

import base64
import binascii
import json
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

KeyId = Union[str, int]

PROFILE_KIND = "Profile"
CONFERENCE_KIND = "Conference"

# Largest value a SQLite INTEGER column can hold.
MAX_INTEGER_ID = 2**63 - 1


class InvalidKeyError(ValueError):
    """Raised when a websafe key string cannot be decoded."""


@dataclass(frozen=True)
class Key:
    """Identity of a stored entity, optionally nested under a parent key."""

    kind: str
    id: KeyId
    parent: Optional["Key"] = None

    def pairs(self) -> List[Tuple[str, KeyId]]:
        path: List[Tuple[str, KeyId]] = []
        node: Optional[Key] = self
        while node is not None:
            path.append((node.kind, node.id))
            node = node.parent
        path.reverse()
        return path

    def root(self) -> "Key":
        node = self
        while node.parent is not None:
            node = node.parent
        return node

    def urlsafe(self) -> str:
        """Return the URL-safe string form of this key."""

        payload = json.dumps([list(pair) for pair in self.pairs()], separators=(",", ":"))
        encoded = base64.urlsafe_b64encode(payload.encode("utf-8")).decode("ascii")
        return encoded.rstrip("=")

    @classmethod
    def from_urlsafe(cls, value: str) -> "Key":
        """Decode a string produced by :meth:`urlsafe`."""

        if not isinstance(value, str) or not value.strip():
            raise InvalidKeyError("Key must be a non-empty string")
        cleaned = value.strip()
        padding = "=" * (-len(cleaned) % 4)
        try:
            raw = base64.urlsafe_b64decode(cleaned + padding)
            path = json.loads(raw.decode("utf-8"))
        except (binascii.Error, UnicodeDecodeError, ValueError) as exc:
            raise InvalidKeyError(f"Malformed key: {value!r}") from exc

        if not isinstance(path, list) or not path:
            raise InvalidKeyError(f"Malformed key: {value!r}")

        kind, key_id = _parse_pair(path[0], value)
        key = cls(kind=kind, id=key_id)
        for element in path[1:]:
            kind, key_id = _parse_pair(element, value)
            key = cls(kind=kind, id=key_id, parent=key)
        return key


def _parse_pair(element: object, value: str) -> Tuple[str, KeyId]:
    if not isinstance(element, list) or len(element) != 2:
        raise InvalidKeyError(f"Malformed key: {value!r}")
    kind, key_id = element
    if not isinstance(kind, str) or not kind:
        raise InvalidKeyError(f"Malformed key: {value!r}")
    # bool is an int subclass; reject it explicitly
    if isinstance(key_id, bool) or not isinstance(key_id, (str, int)):
        raise InvalidKeyError(f"Malformed key: {value!r}")
    # Integer ids are stored as SQLite INTEGER values.
    if isinstance(key_id, int) and not 1 <= key_id <= MAX_INTEGER_ID:
        raise InvalidKeyError(f"Key id out of range: {value!r}")
    return kind, key_id


def profile_key(user_id: str) -> Key:
    return Key(PROFILE_KIND, user_id)


def conference_key(organizer_user_id: str, conference_id: int) -> Key:
    return Key(CONFERENCE_KIND, conference_id, parent=profile_key(organizer_user_id))


def decode_conference_key(websafe_key: str) -> Key:
    """Decode ``websafe_key`` and check that it names a conference."""

    key = Key.from_urlsafe(websafe_key)
    if (
        key.kind != CONFERENCE_KIND
        or not isinstance(key.id, int)
        or key.parent is None
        or key.parent.kind != PROFILE_KIND
        or not isinstance(key.parent.id, str)
        or key.parent.parent is not None
    ):
        raise InvalidKeyError(f"Not a conference key: {websafe_key!r}")
    return key


__all__ = [
    "CONFERENCE_KIND",
    "MAX_INTEGER_ID",
    "InvalidKeyError",
    "Key",
    "PROFILE_KIND",
    "conference_key",
    "decode_conference_key",
    "profile_key",
]
