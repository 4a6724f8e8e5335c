from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

# Default settings that can be overridden through DJANGO_MODERATION_CONFIG
DEFAULTS = {
    # ============================================================================
    # LOGGING
    # ============================================================================

    # Logger name for django-moderation
    'LOGGER_NAME': 'django_moderation',

    # ============================================================================
    # MODERATION QUEUE
    # ============================================================================

    # Default number of items per page for queue and report listings
    'PAGE_SIZE': 20,

    # Hard upper bound for the ``limit`` query parameter
    'MAX_PAGE_SIZE': 100,

    # Status filter used when the client does not send one
    # Options: 'flagged', 'pending', 'reported', 'all'
    'DEFAULT_QUEUE_STATUS': 'flagged',

    # Sort key used when the client sends none or an unknown one
    # Options: 'createdAt', 'severity'
    'DEFAULT_QUEUE_SORT': 'createdAt',

    # ============================================================================
    # DECISIONS
    # ============================================================================

    # Maximum number of IDs accepted by a single bulk moderation request
    'BULK_MAX_ITEMS': 100,

    # Maximum length of moderator notes (after HTML is stripped)
    'NOTES_MAX_LENGTH': 1000,

    # ============================================================================
    # STORE ACCESS
    # ============================================================================

    # Per-operation statement timeout in milliseconds (PostgreSQL only, None = off)
    'STORE_TIMEOUT_MS': 5000,

    # ============================================================================
    # COUNTER OUTBOX
    # ============================================================================

    # Attempts before a pending counter adjustment is abandoned
    'COUNTER_RETRY_MAX_ATTEMPTS': 5,

    # Base delay in seconds for exponential backoff between attempts
    'COUNTER_RETRY_BASE_DELAY': 30,

    # Upper bound in seconds for the backoff delay
    'COUNTER_RETRY_MAX_DELAY': 3600,

    # ============================================================================
    # PERMISSIONS & PROFILES
    # ============================================================================

    # Members of these groups are treated as moderators by the API
    'MODERATOR_GROUPS': ['Moderators'],

    # Attribute on the user model holding an avatar URL (missing = null)
    'AUTHOR_AVATAR_FIELD': 'avatar_url',
}

VALID_QUEUE_STATUSES = ('flagged', 'pending', 'reported', 'all')
VALID_QUEUE_SORTS = ('createdAt', 'severity')


class ModerationSettings:
    """
    A settings object for django-moderation that handles default vs user settings.

    User settings are read from ``settings.DJANGO_MODERATION_CONFIG`` on every
    access, so ``override_settings`` takes effect without reloading.

    Usage:
        from django_moderation.conf import moderation_settings

        page_size = moderation_settings.PAGE_SIZE
    """

    def __init__(self, user_settings=None, defaults=None):
        self._user_settings = user_settings
        self.defaults = defaults or DEFAULTS

    @property
    def user_settings(self):
        if self._user_settings is not None:
            return self._user_settings
        return getattr(settings, 'DJANGO_MODERATION_CONFIG', {}) or {}

    def __getattr__(self, attr):
        if attr not in self.defaults:
            raise AttributeError(f"Invalid django-moderation setting: '{attr}'")

        return self.user_settings.get(attr, self.defaults[attr])

    @property
    def as_dict(self):
        """
        Return all settings as a dictionary.
        """
        return {key: getattr(self, key) for key in self.defaults.keys()}

    def validate(self):
        """
        Validate settings for common configuration errors.
        Raises ImproperlyConfigured for invalid settings.
        """
        errors = []

        for key in ('PAGE_SIZE', 'MAX_PAGE_SIZE', 'BULK_MAX_ITEMS', 'NOTES_MAX_LENGTH',
                    'COUNTER_RETRY_MAX_ATTEMPTS'):
            value = getattr(self, key)
            if not isinstance(value, int) or value <= 0:
                errors.append(f"{key} must be a positive integer, got {value!r}")

        if not errors and self.MAX_PAGE_SIZE < self.PAGE_SIZE:
            errors.append(
                f"MAX_PAGE_SIZE ({self.MAX_PAGE_SIZE}) must be >= "
                f"PAGE_SIZE ({self.PAGE_SIZE})"
            )

        if self.DEFAULT_QUEUE_STATUS not in VALID_QUEUE_STATUSES:
            errors.append(
                f"DEFAULT_QUEUE_STATUS must be one of {list(VALID_QUEUE_STATUSES)}, "
                f"got '{self.DEFAULT_QUEUE_STATUS}'"
            )

        if self.DEFAULT_QUEUE_SORT not in VALID_QUEUE_SORTS:
            errors.append(
                f"DEFAULT_QUEUE_SORT must be one of {list(VALID_QUEUE_SORTS)}, "
                f"got '{self.DEFAULT_QUEUE_SORT}'"
            )

        timeout = self.STORE_TIMEOUT_MS
        if timeout is not None and (not isinstance(timeout, int) or timeout <= 0):
            errors.append(f"STORE_TIMEOUT_MS must be a positive integer or None, got {timeout!r}")

        base_delay = self.COUNTER_RETRY_BASE_DELAY
        max_delay = self.COUNTER_RETRY_MAX_DELAY
        if not isinstance(base_delay, (int, float)) or base_delay <= 0:
            errors.append(f"COUNTER_RETRY_BASE_DELAY must be positive, got {base_delay!r}")
        elif not isinstance(max_delay, (int, float)) or max_delay < base_delay:
            errors.append(
                f"COUNTER_RETRY_MAX_DELAY ({max_delay!r}) must be >= "
                f"COUNTER_RETRY_BASE_DELAY ({base_delay!r})"
            )

        if errors:
            raise ImproperlyConfigured(
                "Invalid django-moderation configuration:\n" +
                "\n".join(f"  - {error}" for error in errors)
            )


# Create the settings object
moderation_settings = ModerationSettings(defaults=DEFAULTS)
