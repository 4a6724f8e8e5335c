"""
Writers for the moderation audit trail.

Audit writes are part of the operation they record: any failure propagates
and rolls back the surrounding transaction.
"""
import logging

from .conf import moderation_settings
from .models import AuditRecord

logger = logging.getLogger(moderation_settings.LOGGER_NAME)


def record_decision(principal, content, action, previous_status, new_status,
                    notes='', bulk_operation=False, kind='comment'):
    """
    Append the audit record of a moderator decision on a content item.

    Args:
        principal: The acting Principal
        content: The Comment or Story the decision applied to
        action: approve, reject, dismiss or resolve
        previous_status: Status before the decision ('unknown' when empty)
        new_status: Status after the decision
        notes: Sanitized moderator notes
        bulk_operation: Whether the decision was part of a bulk request
        kind: 'comment' or 'story'

    Returns:
        AuditRecord instance
    """
    pointer = {'story_id': str(content.pk)} if kind == 'story' else {'comment_id': str(content.pk)}

    record = AuditRecord.objects.record(
        moderator_id=principal.id,
        moderator_email=principal.email or '',
        action=action,
        notes=notes,
        previous_status=previous_status,
        new_status=new_status,
        bulk_operation=bulk_operation,
        **pointer
    )
    logger.debug(f"Audit record {record.pk}: {action} on {kind} {content.pk} by {principal.id}")
    return record


def record_report_resolution(principal, report, action, notes='', previous_status='',
                             new_status='', triggered_comment_action=None):
    """
    Append the audit record of a report resolution.

    ``triggered_comment_action`` is None when the report references no content,
    True when the content status was updated, False otherwise.
    """
    fields = {
        'report_id': str(report.pk),
        'report_type': report.type,
        'moderator_id': principal.id,
        'moderator_email': principal.email or '',
        'action': f'report_{action}',
        'notes': notes,
        'previous_status': previous_status or '',
        'new_status': new_status or '',
        'triggered_comment_action': triggered_comment_action,
    }
    if report.type == report.TYPE_STORY:
        fields['story_id'] = report.story_id
    else:
        fields['comment_id'] = report.comment_id

    record = AuditRecord.objects.record(**fields)
    logger.debug(f"Audit record {record.pk}: report_{action} on report {report.pk} by {principal.id}")
    return record
