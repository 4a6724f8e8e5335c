"""
Outbox for the denormalized story comment counter.

An approval enqueues a ``CounterAdjustment`` in the decision transaction. The
adjustment is applied after the decision commits; a failure never undoes the
decision, it schedules a retry with exponential backoff instead.
"""
import logging
from datetime import timedelta

from django.db import DatabaseError, transaction
from django.db.models import F
from django.utils import timezone

from .conf import moderation_settings
from .models import CounterAdjustment, Story
from .utils import parse_content_id

logger = logging.getLogger(moderation_settings.LOGGER_NAME)


def enqueue_story_comment_increment(story_id, delta=1):
    """
    Record a pending increment of a story's comment counter.
    Must be called inside the transaction of the decision that caused it.
    """
    return CounterAdjustment.objects.create(story_id=str(story_id), delta=delta)


def backoff_delay(attempts):
    """Seconds to wait before the next attempt after ``attempts`` failures."""
    base = moderation_settings.COUNTER_RETRY_BASE_DELAY
    maximum = moderation_settings.COUNTER_RETRY_MAX_DELAY
    return min(base * (2 ** max(attempts - 1, 0)), maximum)


def _abandon(adjustment, reason):
    adjustment.status = CounterAdjustment.STATUS_ABANDONED
    adjustment.last_error = reason
    adjustment.save(update_fields=['status', 'attempts', 'last_error'])
    logger.warning(
        f"Abandoned counter adjustment {adjustment.pk} for story {adjustment.story_id}: {reason}"
    )


def apply_adjustment(adjustment):
    """
    Apply one pending adjustment.

    The increment runs in its own savepoint with an F() expression. Failures
    are logged and recorded on the adjustment, never raised.

    Returns:
        True if the counter was updated, False otherwise
    """
    if adjustment.status != CounterAdjustment.STATUS_PENDING:
        return False

    adjustment.attempts += 1
    story_pk = parse_content_id(adjustment.story_id)

    try:
        with transaction.atomic():
            updated = 0
            if story_pk is not None:
                updated = Story.objects.filter(pk=story_pk).update(
                    comments_count=F('comments_count') + adjustment.delta
                )
            if updated:
                adjustment.status = CounterAdjustment.STATUS_APPLIED
                adjustment.applied_at = timezone.now()
                adjustment.last_error = ''
                adjustment.save(update_fields=['status', 'attempts', 'applied_at', 'last_error'])
    except DatabaseError as e:
        logger.error(
            f"Failed to apply counter adjustment {adjustment.pk} "
            f"(attempt {adjustment.attempts}): {e}"
        )
        if adjustment.attempts >= moderation_settings.COUNTER_RETRY_MAX_ATTEMPTS:
            _abandon(adjustment, str(e))
        else:
            adjustment.last_error = str(e)
            adjustment.next_attempt_at = timezone.now() + timedelta(
                seconds=backoff_delay(adjustment.attempts)
            )
            adjustment.save(update_fields=['attempts', 'last_error', 'next_attempt_at'])
        return False

    if not updated:
        _abandon(adjustment, 'Story does not exist')
        return False

    logger.debug(f"Applied counter adjustment {adjustment.pk} to story {adjustment.story_id}")
    return True


def apply_pending_for(adjustment_ids):
    """Apply freshly enqueued adjustments right after their decision committed."""
    applied = 0
    for adjustment in CounterAdjustment.objects.pending().filter(pk__in=list(adjustment_ids)):
        if apply_adjustment(adjustment):
            applied += 1
    return applied


def retry_due_adjustments(limit=None, now=None):
    """
    Retry pending adjustments whose backoff has expired.

    Returns:
        Tuple of (processed, applied)
    """
    due = CounterAdjustment.objects.due(now)
    if limit:
        due = due[:limit]

    processed = applied = 0
    for adjustment in due:
        processed += 1
        if apply_adjustment(adjustment):
            applied += 1

    if processed:
        logger.info(f"Retried {processed} counter adjustments, {applied} applied")
    return processed, applied
