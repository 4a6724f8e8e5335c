import uuid

from django.db import models
from django.db.models import Count, Q
from django.utils import timezone

from .exceptions import AuditTrailImmutable


def parse_uuid_list(values):
    """
    Convert string IDs to UUIDs, silently skipping values that are not UUIDs.

    Report pointers are free-form strings and may dangle, so they are matched
    against content primary keys in Python rather than with a database cast.
    """
    parsed = []
    for value in values:
        try:
            parsed.append(uuid.UUID(str(value)))
        except (TypeError, ValueError, AttributeError):
            continue
    return parsed


class ContentQuerySet(models.QuerySet):
    """
    QuerySet for moderated content (comments and stories).
    """

    def in_moderation_queue(self, statuses, extra_ids=None):
        """
        Content whose moderation status is in ``statuses`` or whose ID is in
        ``extra_ids``. Both branches are combined into a single query.
        """
        condition = Q(moderation_status__in=list(statuses))
        extra_ids = parse_uuid_list(extra_ids or [])
        if extra_ids:
            condition |= Q(pk__in=extra_ids)
        return self.filter(condition)

    def search(self, term):
        """Case-insensitive substring match on content."""
        if not term:
            return self
        return self.filter(content__icontains=term)

    def with_author(self):
        """Load the author with the content for detail views."""
        return self.select_related('author')


class ReportQuerySet(models.QuerySet):
    """
    QuerySet for user reports.
    """

    def pending(self):
        return self.filter(status='pending')

    def of_type(self, report_type):
        return self.filter(type=report_type)

    def for_content(self, report_type, content_id):
        """All reports pointing at one content item."""
        field = 'story_id' if report_type == 'story' else 'comment_id'
        return self.filter(type=report_type, **{field: str(content_id)})

    def pending_comment_ids(self):
        """Distinct comment IDs referenced by pending comment reports."""
        return list(
            self.pending()
            .of_type('comment')
            .exclude(comment_id='')
            .values_list('comment_id', flat=True)
            .distinct()
        )

    def pending_counts_for_comments(self, comment_ids):
        """
        Return ``{comment_id: count}`` of pending reports for the given
        comment IDs, computed with one grouped query.
        """
        ids = [str(pk) for pk in comment_ids]
        if not ids:
            return {}
        rows = (
            self.pending()
            .of_type('comment')
            .filter(comment_id__in=ids)
            .values('comment_id')
            .annotate(count=Count('id'))
            .order_by()
        )
        return {row['comment_id']: row['count'] for row in rows}


class ReportManager(models.Manager):
    """
    Manager for reports.
    """

    def get_queryset(self):
        return super().get_queryset().select_related('reporter')


class AuditRecordQuerySet(models.QuerySet):
    """
    QuerySet for audit records. Bulk updates and deletes are refused.
    """

    def update(self, **kwargs):
        raise AuditTrailImmutable()

    def delete(self):
        raise AuditTrailImmutable()

    def for_comment(self, comment_id):
        return self.filter(comment_id=str(comment_id))


class AuditRecordManager(models.Manager):
    """
    Manager for audit records.
    """

    def record(self, **fields):
        """Append one record to the audit trail."""
        return self.create(**fields)


class CounterAdjustmentQuerySet(models.QuerySet):
    """
    QuerySet for the story counter outbox.
    """

    def pending(self):
        return self.filter(status='pending')

    def due(self, now=None):
        """Pending adjustments whose next attempt time has passed."""
        now = now or timezone.now()
        return self.pending().filter(next_attempt_at__lte=now).order_by('next_attempt_at', 'pk')
