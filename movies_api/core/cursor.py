"""
Opaque pagination tokens for the movie listing.

A cursor is the ``(created_at, id)`` key of the last movie on a page, encoded
as base64 JSON. Listing order and cursor comparison both use this tuple.
"""

import base64
import binascii
import json
from datetime import datetime
from typing import NamedTuple, Optional

from movies_api.database.types import as_utc
from movies_api.exceptions import InvalidCursorError


class MovieCursor(NamedTuple):
    """Composite sort key of a movie: compared as a tuple, never field by field."""

    created_at: datetime
    id: str

    @classmethod
    def from_movie(cls, movie) -> "MovieCursor":
        return cls(created_at=as_utc(movie.created_at), id=movie.id)


def encode_cursor(cursor: MovieCursor) -> str:
    """
    Encode a cursor into an opaque token.

    Args:
        cursor: Sort key of the last item on a page

    Returns:
        Base64 token that decode_cursor() turns back into an equal cursor
    """
    payload = {
        'createdAt': as_utc(cursor.created_at).isoformat(timespec='microseconds'),
        'id': cursor.id,
    }
    raw = json.dumps(payload, separators=(',', ':')).encode('utf-8')
    return base64.b64encode(raw).decode('ascii')


def decode_cursor(token: Optional[str]) -> Optional[MovieCursor]:
    """
    Decode an opaque token produced by encode_cursor().

    Args:
        token: Cursor token, or None/blank for the first page

    Returns:
        MovieCursor, or None when no token was supplied

    Raises:
        InvalidCursorError: If the token is not a valid cursor
    """
    if token is None or not token.strip():
        return None

    try:
        raw = base64.b64decode(token.strip(), validate=True)
        payload = json.loads(raw.decode('utf-8'))
    except (binascii.Error, UnicodeDecodeError, ValueError) as e:
        raise InvalidCursorError(details=str(e)) from e

    if not isinstance(payload, dict):
        raise InvalidCursorError(details="cursor payload must be an object")
    created_at = payload.get('createdAt')
    movie_id = payload.get('id')
    if not isinstance(created_at, str) or not isinstance(movie_id, str) or not movie_id:
        raise InvalidCursorError(details="cursor payload requires createdAt and id")

    try:
        parsed = datetime.fromisoformat(created_at)
    except ValueError as e:
        raise InvalidCursorError(details=str(e)) from e

    return MovieCursor(created_at=as_utc(parsed), id=movie_id)
