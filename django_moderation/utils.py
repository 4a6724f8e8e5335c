import logging
import uuid
from typing import Any, Optional

import bleach

from .conf import moderation_settings
from .exceptions import ValidationFailed

logger = logging.getLogger(moderation_settings.LOGGER_NAME)


def clean_notes(notes: Any) -> str:
    """
    Sanitize moderator notes.

    All markup is stripped with bleach; the result must fit within
    ``NOTES_MAX_LENGTH``. ``None`` becomes an empty string.

    Raises:
        ValidationFailed: If notes are not a string or are too long
    """
    if notes is None:
        return ''

    if not isinstance(notes, str):
        raise ValidationFailed('notes must be a string', error='invalid_input')

    cleaned = bleach.clean(notes, tags=[], attributes={}, strip=True).strip()

    max_length = moderation_settings.NOTES_MAX_LENGTH
    if len(cleaned) > max_length:
        raise ValidationFailed(
            f'notes must be at most {max_length} characters',
            error='invalid_input'
        )

    return cleaned


def parse_content_id(value: Any) -> Optional[uuid.UUID]:
    """Return ``value`` as a UUID, or None when it is not a valid UUID."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError, AttributeError):
        return None


def validate_id_list(ids: Any, max_count: Optional[int] = None) -> list:
    """
    Validate the ID list of a bulk request.

    Raises:
        ValidationFailed: If ``ids`` is not a non-empty list or exceeds the limit
    """
    if max_count is None:
        max_count = moderation_settings.BULK_MAX_ITEMS

    if not isinstance(ids, (list, tuple)) or not ids:
        raise ValidationFailed('ids must be a non-empty array', error='invalid_input')

    if len(ids) > max_count:
        raise ValidationFailed(
            f'Maximum {max_count} items per bulk operation',
            error='too_many_items'
        )

    return list(ids)


def parse_limit(value: Any) -> int:
    """
    Parse a page-size parameter.

    Missing, non-numeric or non-positive values fall back to ``PAGE_SIZE``;
    values above ``MAX_PAGE_SIZE`` are clamped.
    """
    default = moderation_settings.PAGE_SIZE
    if value is None or value == '':
        return default
    try:
        limit = int(value)
    except (TypeError, ValueError):
        return default
    if limit < 1:
        return default
    return min(limit, moderation_settings.MAX_PAGE_SIZE)


def get_author_info(user) -> Optional[dict]:
    """Return a public profile mapping for a user, or None."""
    if user is None:
        return None

    name = ''
    if hasattr(user, 'get_full_name'):
        name = user.get_full_name()
    if not name:
        name = user.get_username() if hasattr(user, 'get_username') else str(user)

    avatar_field = moderation_settings.AUTHOR_AVATAR_FIELD
    avatar_url = getattr(user, avatar_field, None) if avatar_field else None

    return {
        'userId': str(user.pk),
        'name': name,
        'email': getattr(user, 'email', None) or None,
        'avatarUrl': avatar_url or None,
    }
