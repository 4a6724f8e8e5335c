"""
Report resolution: listing, creating and closing user reports.
"""
import logging

from django.utils import timezone

from .api.filtersets import ReportFilterSet
from .audit import record_report_resolution
from .conf import moderation_settings
from .exceptions import Conflict, NotFound, ValidationFailed
from .models import Comment, Report, Story
from .pagination import KeysetPagination
from .signals import report_resolved, safe_send
from .store import store_access
from .utils import clean_notes, parse_content_id

logger = logging.getLogger(moderation_settings.LOGGER_NAME)

REPORTED_MODELS = {
    Report.TYPE_COMMENT: Comment,
    Report.TYPE_STORY: Story,
}

REASON_MAX_LENGTH = 100


def _report_not_found():
    return NotFound('Report not found', error='report_not_found')


def _cascade_to_content(report, action):
    """
    Set the moderation status of the reported content to ``action``.

    Only the status is written; visibility and approval are left alone.

    Returns:
        Tuple (previous status, new status), or None if the content is gone
    """
    model = REPORTED_MODELS[report.type]
    pk = parse_content_id(report.content_id)
    if pk is None:
        return None

    content = model.objects.filter(pk=pk).first()
    if content is None:
        return None

    previous_status = content.current_status
    model.objects.filter(pk=content.pk).update(moderation_status=action, updated_at=timezone.now())
    return previous_status, action


def resolve_report(principal, report_id, action=None, notes=None, trigger_comment_action=False):
    """
    Resolve or dismiss a pending report.

    When ``trigger_comment_action`` is set and the reported content still
    exists, its moderation status is set to the same value. The report
    update, the content update and the audit record share one transaction.

    Raises:
        ValidationFailed: Invalid action or notes
        NotFound: The report does not exist
        Conflict: The report is no longer pending
    """
    action = action or Report.STATUS_RESOLVED
    if action not in Report.RESOLUTION_STATUSES:
        raise ValidationFailed(
            f"action must be one of: {', '.join(Report.RESOLUTION_STATUSES)}",
            error='invalid_action'
        )
    notes = clean_notes(notes)

    pk = parse_content_id(report_id)
    if pk is None:
        raise _report_not_found()

    with store_access('resolve_report'):
        try:
            report = Report.objects.get(pk=pk)
        except Report.DoesNotExist:
            raise _report_not_found()

        if not report.can_transition_to(action):
            logger.warning(f"Report {report.pk} is already {report.status}; refusing {action}")
            raise Conflict(f'Report is already {report.status}', error='conflict')

        now = timezone.now()
        updated = Report.objects.filter(pk=report.pk, status=Report.STATUS_PENDING).update(
            status=action,
            resolved_by=principal.id,
            resolved_at=now,
            resolution_notes=notes,
            updated_at=now,
        )
        if not updated:
            logger.warning(f"Report {report.pk} was resolved concurrently")
            raise Conflict('Report was resolved concurrently', error='conflict')

        report.status = action
        report.resolved_by = principal.id
        report.resolved_at = now
        report.resolution_notes = notes
        report.updated_at = now

        previous_status = new_status = ''
        triggered = None
        if report.content_id:
            triggered = False
            if trigger_comment_action:
                transition = _cascade_to_content(report, action)
                if transition is not None:
                    previous_status, new_status = transition
                    triggered = True

        record_report_resolution(
            principal,
            report,
            action=action,
            notes=notes,
            previous_status=previous_status,
            new_status=new_status,
            triggered_comment_action=triggered,
        )

    logger.info(
        f"Report {report.pk} {action} by {principal.id} "
        f"(content action triggered: {bool(triggered)})"
    )
    safe_send(
        report_resolved,
        sender=Report,
        report=report,
        action=action,
        principal=principal,
        triggered_comment_action=bool(triggered),
    )
    return report


def list_reports(status=None, report_type=None, page_token=None, limit=None):
    """
    List reports newest first with cursor pagination.

    Returns:
        Dict with ``reports`` and ``meta`` (nextPageToken, limit, hasMore)

    Raises:
        ValidationFailed: Unknown status or type
    """
    data = {
        'status': status or Report.STATUS_PENDING,
        'type': report_type or Report.TYPE_COMMENT,
    }
    paginator = KeysetPagination('created_at')

    with store_access('list_reports'):
        filterset = ReportFilterSet(data, queryset=Report.objects.all())
        if not filterset.is_valid():
            fields = ', '.join(sorted(filterset.errors))
            raise ValidationFailed(f'Invalid filter value for: {fields}', error='invalid_input')

        reports = paginator.paginate(filterset.qs, page_token, limit)

    return {'reports': reports, 'meta': paginator.get_meta()}


def create_report(principal, report_type, content_id, reason, details=None):
    """
    File a report against a comment or story on behalf of ``principal``.

    Raises:
        ValidationFailed: Missing or invalid fields, or a duplicate pending report
        NotFound: The content does not exist
    """
    if not isinstance(report_type, str) or report_type not in REPORTED_MODELS:
        raise ValidationFailed(
            f"type must be one of: {', '.join(REPORTED_MODELS)}",
            error='invalid_input'
        )

    if not content_id or not isinstance(reason, str) or not reason.strip():
        raise ValidationFailed('Content ID and reason are required', error='invalid_input')

    reason = clean_notes(reason)
    if not reason or len(reason) > REASON_MAX_LENGTH:
        raise ValidationFailed(
            f'reason must be between 1 and {REASON_MAX_LENGTH} characters',
            error='invalid_input'
        )
    details = clean_notes(details)

    model = REPORTED_MODELS[report_type]
    label = report_type.capitalize()
    pk = parse_content_id(content_id)
    if pk is None:
        raise NotFound(f'{label} not found', error=f'{report_type}_not_found')

    with store_access('create_report'):
        if not model.objects.filter(pk=pk).exists():
            raise NotFound(f'{label} not found', error=f'{report_type}_not_found')

        duplicate = (
            Report.objects.for_content(report_type, pk)
            .pending()
            .filter(reporter_id=principal.id)
            .exists()
        )
        if duplicate:
            raise ValidationFailed(
                f'You have already reported this {report_type}',
                error='duplicate_report'
            )

        pointer = {f'{report_type}_id': str(pk)}
        report = Report.objects.create(
            type=report_type,
            reporter_id=principal.id,
            reason=reason,
            details=details,
            **pointer
        )

    logger.info(f"{label} {pk} reported by {principal.id}: {reason}")
    return report
