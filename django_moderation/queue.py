"""
Moderation queue: listing and inspecting comments that need attention.
"""
import logging

from .conf import VALID_QUEUE_SORTS, VALID_QUEUE_STATUSES, moderation_settings
from .exceptions import NotFound, ValidationFailed
from .models import (
    STATUS_FLAGGED,
    STATUS_PENDING,
    STATUS_REPORTED,
    Comment,
    Report,
)
from .pagination import KeysetPagination
from .store import store_access
from .utils import get_author_info, parse_content_id

logger = logging.getLogger(moderation_settings.LOGGER_NAME)

# Query value -> moderation statuses it selects
QUEUE_STATUSES = {
    'flagged': (STATUS_FLAGGED,),
    'pending': (STATUS_PENDING,),
    'reported': (STATUS_REPORTED,),
    'all': (STATUS_FLAGGED, STATUS_PENDING, STATUS_REPORTED),
}

# Query value -> model field
SORT_FIELDS = {
    'createdAt': 'created_at',
    'severity': 'moderation_score',
}


def resolve_queue_status(status):
    if status in (None, ''):
        return moderation_settings.DEFAULT_QUEUE_STATUS
    if status not in VALID_QUEUE_STATUSES:
        raise ValidationFailed(
            f"status must be one of: {', '.join(VALID_QUEUE_STATUSES)}",
            error='invalid_input'
        )
    return status


def resolve_sort_field(sort):
    """Unknown sort keys fall back to the configured default."""
    if sort not in VALID_QUEUE_SORTS:
        sort = moderation_settings.DEFAULT_QUEUE_SORT
    return SORT_FIELDS[sort]


def list_flagged_comments(status=None, page_token=None, limit=None, q=None, sort=None):
    """
    List comments awaiting moderation.

    Comments are selected by moderation status, plus (for ``reported`` and
    ``all``) any comment referenced by a pending report regardless of its own
    status. Results are ordered by the sort key descending and paginated with
    an opaque cursor.

    Returns:
        Dict with ``items`` (comments annotated with ``reports_count``) and
        ``meta`` (nextPageToken, limit, hasMore)
    """
    status = resolve_queue_status(status)
    sort_field = resolve_sort_field(sort)
    paginator = KeysetPagination(sort_field)

    with store_access('list_flagged_comments'):
        reported_ids = []
        if status in ('reported', 'all'):
            reported_ids = Report.objects.pending_comment_ids()

        queryset = (
            Comment.objects
            .in_moderation_queue(QUEUE_STATUSES[status], extra_ids=reported_ids)
            .search(q)
        )
        page = paginator.paginate(queryset, page_token, limit)
        counts = Report.objects.pending_counts_for_comments([c.pk for c in page])

    for comment in page:
        comment.reports_count = counts.get(str(comment.pk), 0)

    logger.debug(f"Moderation queue ({status}, {sort_field}): {len(page)} items")
    return {'items': page, 'meta': paginator.get_meta()}


def get_comment_moderation_detail(comment_id):
    """
    Return a comment with everything a moderator needs to decide on it.

    Returns:
        Dict with ``comment``, ``reports``, ``story_meta`` and ``author_info``

    Raises:
        NotFound: If the comment does not exist
    """
    pk = parse_content_id(comment_id)
    if pk is None:
        raise NotFound('Comment not found', error='comment_not_found')

    with store_access('get_comment_moderation_detail'):
        try:
            comment = Comment.objects.with_author().select_related('story').get(pk=pk)
        except Comment.DoesNotExist:
            raise NotFound('Comment not found', error='comment_not_found')

        reports = list(
            Report.objects.for_content(Report.TYPE_COMMENT, comment.pk).order_by('-created_at')
        )

    story_meta = None
    if comment.story is not None:
        story = comment.story
        story_meta = {
            'storyId': str(story.pk),
            'title': story.title,
            'category': story.category,
            'authorId': str(story.author_id) if story.author_id else None,
        }

    comment.reports_count = sum(1 for r in reports if r.is_pending)

    return {
        'comment': comment,
        'reports': reports,
        'story_meta': story_meta,
        'author_info': get_author_info(comment.author),
    }
