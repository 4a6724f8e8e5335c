"""
Moderator decisions on content items.

A decision moves a content item through the moderation states, keeps its
visibility and approval flag consistent with the new state, and is recorded
in the audit trail in the same transaction.
"""
import logging

from django.db import DatabaseError
from django.utils import timezone

from . import counters
from .audit import record_decision
from .conf import moderation_settings
from .exceptions import Conflict, ModerationError, NotFound, ValidationFailed
from .models import (
    STATUS_APPROVED,
    STATUS_DISMISSED,
    STATUS_REJECTED,
    STATUS_RESOLVED,
    VISIBILITY_HIDDEN,
    VISIBILITY_PUBLIC,
    Comment,
    Report,
    Story,
)
from .signals import content_approved, content_rejected, decision_applied, safe_send
from .store import store_access
from .utils import clean_notes, parse_content_id, validate_id_list

logger = logging.getLogger(moderation_settings.LOGGER_NAME)

ACTION_APPROVE = 'approve'
ACTION_REJECT = 'reject'
ACTION_DISMISS = 'dismiss'
ACTION_RESOLVE = 'resolve'

# action -> field values written by the decision; absent keys are left unchanged
TRANSITIONS = {
    ACTION_APPROVE: {
        'moderation_status': STATUS_APPROVED,
        'visibility': VISIBILITY_PUBLIC,
        'approved': True,
    },
    ACTION_REJECT: {
        'moderation_status': STATUS_REJECTED,
        'visibility': VISIBILITY_HIDDEN,
        'approved': False,
    },
    ACTION_DISMISS: {
        'moderation_status': STATUS_DISMISSED,
    },
    ACTION_RESOLVE: {
        'moderation_status': STATUS_RESOLVED,
    },
}

VALID_ACTIONS = tuple(TRANSITIONS)

CONTENT_MODELS = {
    'comment': Comment,
    'story': Story,
}


def validate_action(action):
    if not isinstance(action, str) or action not in TRANSITIONS:
        raise ValidationFailed(
            f"action must be one of: {', '.join(VALID_ACTIONS)}",
            error='invalid_action'
        )
    return action


def _not_found(kind):
    return NotFound(f'{kind.capitalize()} not found', error=f'{kind}_not_found')


def _load_content(model, pk):
    return model.objects.get(pk=pk)


def _apply_decision(principal, kind, pk, action, notes, bulk_operation=False):
    """
    Apply one decision inside the current transaction.

    Returns:
        Tuple of (content, audit record, previous status, enqueued adjustment IDs)
    """
    model = CONTENT_MODELS[kind]
    try:
        content = _load_content(model, pk)
    except model.DoesNotExist:
        raise _not_found(kind)

    previous_status = content.current_status
    was_approved = content.approved
    now = timezone.now()

    changes = dict(TRANSITIONS[action])
    changes.update({
        'moderation_notes': notes,
        'moderated_by': principal.id,
        'moderated_at': now,
        'updated_at': now,
    })

    # Compare-and-swap on the state that was read
    updated = model.objects.filter(
        pk=content.pk,
        moderation_status=content.moderation_status,
        approved=was_approved,
    ).update(**changes)
    if not updated:
        logger.warning(
            f"Conflicting decision on {kind} {content.pk}: state changed since it was read"
        )
        raise Conflict(
            f'{kind.capitalize()} {content.pk} was modified concurrently',
            error='conflict'
        )

    for field, value in changes.items():
        setattr(content, field, value)

    adjustment_ids = []
    if action == ACTION_APPROVE and not was_approved and getattr(content, 'story_id', None):
        adjustment = counters.enqueue_story_comment_increment(content.story_id)
        adjustment_ids.append(adjustment.pk)

    if action == ACTION_RESOLVE:
        resolved = Report.objects.for_content(kind, content.pk).pending().update(
            status=Report.STATUS_RESOLVED,
            resolved_by=principal.id,
            resolved_at=now,
            updated_at=now,
        )
        logger.debug(f"Resolved {resolved} pending reports for {kind} {content.pk}")

    audit = record_decision(
        principal,
        content,
        action=action,
        previous_status=previous_status,
        new_status=content.moderation_status,
        notes=notes,
        bulk_operation=bulk_operation,
        kind=kind,
    )
    return content, audit, previous_status, adjustment_ids


def _after_decision(principal, content, action, previous_status, audit, adjustment_ids):
    """Side effects that run once the decision has been written."""
    if adjustment_ids:
        # The decision is committed; a failed counter step stays pending for retry
        try:
            counters.apply_pending_for(adjustment_ids)
        except DatabaseError:
            logger.exception(
                f"Counter adjustments {adjustment_ids} for {content.pk} left pending for retry"
            )

    safe_send(
        decision_applied,
        sender=content.__class__,
        content=content,
        action=action,
        previous_status=previous_status,
        new_status=content.moderation_status,
        principal=principal,
        audit=audit,
    )
    if action == ACTION_APPROVE:
        safe_send(content_approved, sender=content.__class__, content=content, principal=principal)
    elif action == ACTION_REJECT:
        safe_send(content_rejected, sender=content.__class__, content=content, principal=principal)


def audit_summary(audit):
    return {
        'id': str(audit.pk),
        'action': audit.action,
        'previousStatus': audit.previous_status,
        'newStatus': audit.new_status,
        'moderatorId': audit.moderator_id,
    }


def moderator_decision(principal, content_id, action, notes=None, kind='comment'):
    """
    Apply a moderator decision to a single content item.

    Args:
        principal: The acting Principal
        content_id: ID of the content item
        action: approve, reject, dismiss or resolve
        notes: Optional moderator notes (markup is stripped)
        kind: 'comment' or 'story'

    Returns:
        Dict with the updated ``content`` and an ``audit`` summary

    Raises:
        ValidationFailed: Invalid action or notes (before any store access)
        NotFound: The content does not exist
        Conflict: The content changed between read and write
        StoreError: The store failed; nothing was written
    """
    validate_action(action)
    notes = clean_notes(notes)

    pk = parse_content_id(content_id)
    if pk is None:
        raise _not_found(kind)

    with store_access('moderator_decision'):
        content, audit, previous_status, adjustment_ids = _apply_decision(
            principal, kind, pk, action, notes
        )

    logger.info(
        f"{kind.capitalize()} {content.pk} {action}: {previous_status} -> "
        f"{content.moderation_status} by {principal.id}"
    )
    _after_decision(principal, content, action, previous_status, audit, adjustment_ids)

    return {'content': content, 'audit': audit_summary(audit)}


def bulk_moderation(principal, ids, action, notes=None):
    """
    Apply the same decision to a bounded list of comments.

    Input is validated before anything is written. Each ID is then processed
    in its own transaction; per-item failures are collected, not raised.

    Returns:
        Dict with ``success`` and ``failed`` lists whose lengths sum to len(ids)
    """
    ids = validate_id_list(ids)
    validate_action(action)
    notes = clean_notes(notes)

    results = {'success': [], 'failed': []}

    for raw_id in ids:
        comment_id = str(raw_id)
        pk = parse_content_id(raw_id)
        if pk is None:
            results['failed'].append({'commentId': comment_id, 'reason': 'Comment not found'})
            continue

        try:
            with store_access('bulk_moderation'):
                content, audit, previous_status, adjustment_ids = _apply_decision(
                    principal, 'comment', pk, action, notes, bulk_operation=True
                )
        except NotFound:
            results['failed'].append({'commentId': comment_id, 'reason': 'Comment not found'})
            continue
        except ModerationError as e:
            results['failed'].append({'commentId': comment_id, 'reason': e.message})
            continue
        except Exception:
            logger.exception(f"Bulk {action} failed for comment {comment_id}")
            results['failed'].append({'commentId': comment_id, 'reason': 'Internal error'})
            continue

        _after_decision(principal, content, action, previous_status, audit, adjustment_ids)
        results['success'].append({
            'commentId': comment_id,
            'action': action,
            'previousStatus': previous_status,
            'newStatus': content.moderation_status,
        })

    logger.info(
        f"Bulk {action} by {principal.id}: {len(results['success'])} succeeded, "
        f"{len(results['failed'])} failed"
    )
    return results
