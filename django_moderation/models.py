from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _
import uuid
import logging

from .conf import moderation_settings
from .exceptions import AuditTrailImmutable
from .managers import (
    AuditRecordManager,
    AuditRecordQuerySet,
    ContentQuerySet,
    CounterAdjustmentQuerySet,
    ReportManager,
    ReportQuerySet,
)

logger = logging.getLogger(moderation_settings.LOGGER_NAME)


STATUS_PENDING = 'pending'
STATUS_FLAGGED = 'flagged'
STATUS_REPORTED = 'reported'
STATUS_APPROVED = 'approved'
STATUS_REJECTED = 'rejected'
STATUS_DISMISSED = 'dismissed'
STATUS_RESOLVED = 'resolved'

# Reported when a content item has no moderation status at all
STATUS_UNKNOWN = 'unknown'

MODERATION_STATUS_CHOICES = (
    (STATUS_PENDING, _('Pending')),
    (STATUS_FLAGGED, _('Flagged')),
    (STATUS_REPORTED, _('Reported')),
    (STATUS_APPROVED, _('Approved')),
    (STATUS_REJECTED, _('Rejected')),
    (STATUS_DISMISSED, _('Dismissed')),
    (STATUS_RESOLVED, _('Resolved')),
)

VISIBILITY_PUBLIC = 'public'
VISIBILITY_HIDDEN = 'hidden'

VISIBILITY_CHOICES = (
    (VISIBILITY_PUBLIC, _('Public')),
    (VISIBILITY_HIDDEN, _('Hidden')),
)


class AbstractTimestampedBase(models.Model):
    """Base class with timestamp fields."""
    created_at = models.DateTimeField(_('Created at'), default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(_('Updated at'), auto_now=True)

    class Meta:
        abstract = True


class ModeratedContent(AbstractTimestampedBase):
    """
    Fields shared by every moderatable content item.

    The moderation sub-record is stored flat (``moderation_*`` columns) and
    exposed as a nested ``moderation`` mapping by the API.
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        verbose_name=_("ID")
    )

    author = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True, blank=True,
        related_name='%(app_label)s_%(class)s_set',
        verbose_name=_('Author')
    )

    content = models.TextField(_('Content'))

    moderation_status = models.CharField(
        _('Moderation status'),
        max_length=20,
        choices=MODERATION_STATUS_CHOICES,
        default=STATUS_PENDING,
        db_index=True
    )
    moderation_score = models.FloatField(
        _('Highest score'),
        default=0.0,
        db_index=True,
        help_text=_('Highest automated classifier score for this item (0-1).')
    )
    moderation_notes = models.TextField(_('Moderation notes'), blank=True)
    moderated_by = models.CharField(
        _('Moderated by'),
        max_length=255,
        blank=True,
        help_text=_('Identifier of the moderator who made the last decision.')
    )
    moderated_at = models.DateTimeField(_('Moderated at'), null=True, blank=True)

    approved = models.BooleanField(_('Approved'), default=False)
    visibility = models.CharField(
        _('Visibility'),
        max_length=10,
        choices=VISIBILITY_CHOICES,
        default=VISIBILITY_PUBLIC
    )

    objects = ContentQuerySet.as_manager()

    class Meta:
        abstract = True

    def clean(self):
        super().clean()

        if not self.content or not self.content.strip():
            raise ValidationError({
                'content': _('Content cannot be empty or contain only whitespace.')
            })

        if self.moderation_status == STATUS_REJECTED and self.visibility != VISIBILITY_HIDDEN:
            raise ValidationError({
                'visibility': _('Rejected content must be hidden.')
            })

    @property
    def current_status(self):
        """Return the moderation status, or 'unknown' when none is recorded."""
        return self.moderation_status or STATUS_UNKNOWN

    @property
    def moderation(self):
        """Return the moderation sub-record as a mapping."""
        return {
            'status': self.moderation_status,
            'highestScore': self.moderation_score,
            'notes': self.moderation_notes,
            'moderatedBy': self.moderated_by or None,
            'moderatedAt': self.moderated_at,
        }


class Story(ModeratedContent):
    """
    A story that comments are attached to.
    Carries the denormalized ``comments_count`` counter.
    """

    title = models.CharField(_('Title'), max_length=255)
    category = models.CharField(_('Category'), max_length=100, blank=True)
    comments_count = models.PositiveIntegerField(_('Comments count'), default=0)

    class Meta:
        verbose_name = _('Story')
        verbose_name_plural = _('Stories')
        ordering = ('-created_at',)
        indexes = [
            models.Index(fields=['moderation_status', 'created_at'], name='story_status_created_idx'),
        ]

    def __str__(self):
        return self.title


class Comment(ModeratedContent):
    """
    A comment on a story. The primary subject of the moderation queue.
    """

    story = models.ForeignKey(
        Story,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='comments',
        verbose_name=_('Story')
    )

    class Meta:
        verbose_name = _('Comment')
        verbose_name_plural = _('Comments')
        ordering = ('-created_at',)
        permissions = [('can_moderate', _('Can moderate content'))]
        indexes = [
            models.Index(fields=['moderation_status', 'created_at'], name='comment_status_created_idx'),
            models.Index(fields=['moderation_status', 'moderation_score'], name='comment_status_score_idx'),
        ]

    def __str__(self):
        snippet = self.content[:40] + '...' if len(self.content) > 40 else self.content
        return _("Comment {id}: {snippet}").format(id=self.pk, snippet=snippet)


class Report(models.Model):
    """
    A user-submitted report pointing at exactly one content item.

    The pointer is stored as a string so a report survives the deletion of
    the content it references.
    """

    TYPE_COMMENT = 'comment'
    TYPE_STORY = 'story'

    TYPE_CHOICES = (
        (TYPE_COMMENT, _('Comment')),
        (TYPE_STORY, _('Story')),
    )

    STATUS_PENDING = 'pending'
    STATUS_RESOLVED = 'resolved'
    STATUS_DISMISSED = 'dismissed'

    STATUS_CHOICES = (
        (STATUS_PENDING, _('Pending')),
        (STATUS_RESOLVED, _('Resolved')),
        (STATUS_DISMISSED, _('Dismissed')),
    )

    # Terminal states reachable from pending
    RESOLUTION_STATUSES = (STATUS_RESOLVED, STATUS_DISMISSED)

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        verbose_name=_("ID")
    )

    type = models.CharField(
        _('Type'),
        max_length=20,
        choices=TYPE_CHOICES,
        default=TYPE_COMMENT,
        db_index=True
    )
    comment_id = models.CharField(_('Comment ID'), max_length=255, blank=True, db_index=True)
    story_id = models.CharField(_('Story ID'), max_length=255, blank=True, db_index=True)

    reporter = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='moderation_reports',
        verbose_name=_('Reporter')
    )

    reason = models.CharField(_('Reason'), max_length=100)
    details = models.TextField(_('Details'), blank=True)

    status = models.CharField(
        _('Status'),
        max_length=20,
        choices=STATUS_CHOICES,
        default=STATUS_PENDING,
        db_index=True
    )
    resolved_by = models.CharField(_('Resolved by'), max_length=255, blank=True)
    resolved_at = models.DateTimeField(_('Resolved at'), null=True, blank=True)
    resolution_notes = models.TextField(_('Resolution notes'), blank=True)

    created_at = models.DateTimeField(_('Created at'), default=timezone.now)
    updated_at = models.DateTimeField(_('Updated at'), auto_now=True)

    objects = ReportManager.from_queryset(ReportQuerySet)()

    class Meta:
        verbose_name = _('Report')
        verbose_name_plural = _('Reports')
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['type', 'status', 'created_at'], name='report_listing_idx'),
            models.Index(fields=['comment_id', 'status'], name='report_comment_status_idx'),
            models.Index(fields=['story_id', 'status'], name='report_story_status_idx'),
        ]

    def __str__(self):
        return _("Report on {type} {content_id} ({status})").format(
            type=self.type,
            content_id=self.content_id,
            status=self.status
        )

    def clean(self):
        super().clean()

        if not self.content_id:
            raise ValidationError({
                f'{self.type}_id': _('A report must reference the content it is about.')
            })

        if not self.reason or not self.reason.strip():
            raise ValidationError({'reason': _('Report reason cannot be empty.')})

    @property
    def content_id(self):
        """Return the ID of the referenced content, according to ``type``."""
        if self.type == self.TYPE_STORY:
            return self.story_id
        return self.comment_id

    @property
    def is_pending(self):
        return self.status == self.STATUS_PENDING

    def can_transition_to(self, new_status):
        """Reports only move from pending to resolved or dismissed."""
        return self.is_pending and new_status in self.RESOLUTION_STATUSES


class AuditRecord(models.Model):
    """
    Immutable compliance log entry for a moderation decision or report resolution.

    Records are written once and never updated or deleted; ``save`` on an
    existing record and ``delete`` raise ``AuditTrailImmutable``.
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        verbose_name=_("ID")
    )

    comment_id = models.CharField(_('Comment ID'), max_length=255, blank=True, db_index=True)
    story_id = models.CharField(_('Story ID'), max_length=255, blank=True, db_index=True)
    report_id = models.CharField(_('Report ID'), max_length=255, blank=True, db_index=True)
    report_type = models.CharField(_('Report type'), max_length=20, blank=True)

    moderator_id = models.CharField(_('Moderator ID'), max_length=255)
    moderator_email = models.CharField(_('Moderator email'), max_length=254, blank=True)

    action = models.CharField(_('Action'), max_length=40)
    notes = models.TextField(_('Notes'), blank=True)
    previous_status = models.CharField(_('Previous status'), max_length=20, blank=True)
    new_status = models.CharField(_('New status'), max_length=20, blank=True)

    bulk_operation = models.BooleanField(_('Bulk operation'), default=False)
    triggered_comment_action = models.BooleanField(
        _('Triggered content action'),
        null=True,
        blank=True,
        help_text=_('For report resolutions: whether the referenced content was updated.')
    )

    timestamp = models.DateTimeField(_('Timestamp'), default=timezone.now, db_index=True)

    objects = AuditRecordManager.from_queryset(AuditRecordQuerySet)()

    class Meta:
        verbose_name = _('Audit record')
        verbose_name_plural = _('Audit records')
        ordering = ['-timestamp']
        indexes = [
            models.Index(fields=['moderator_id', 'action'], name='audit_moderator_idx'),
        ]

    def __str__(self):
        target = self.report_id or self.comment_id or self.story_id
        return _("{moderator} {action} {target} at {time}").format(
            moderator=self.moderator_email or self.moderator_id,
            action=self.action,
            target=target,
            time=self.timestamp.strftime('%Y-%m-%d %H:%M')
        )

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise AuditTrailImmutable()
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise AuditTrailImmutable()


class CounterAdjustment(models.Model):
    """
    Outbox entry for a pending increment of a story's comment counter.

    Written in the same transaction as the decision that caused it and
    applied afterwards; failed attempts are retried with backoff.
    """

    STATUS_PENDING = 'pending'
    STATUS_APPLIED = 'applied'
    STATUS_ABANDONED = 'abandoned'

    STATUS_CHOICES = (
        (STATUS_PENDING, _('Pending')),
        (STATUS_APPLIED, _('Applied')),
        (STATUS_ABANDONED, _('Abandoned')),
    )

    story_id = models.CharField(_('Story ID'), max_length=255, db_index=True)
    delta = models.IntegerField(_('Delta'), default=1)
    status = models.CharField(
        _('Status'),
        max_length=20,
        choices=STATUS_CHOICES,
        default=STATUS_PENDING
    )
    attempts = models.PositiveIntegerField(_('Attempts'), default=0)
    last_error = models.TextField(_('Last error'), blank=True)
    next_attempt_at = models.DateTimeField(_('Next attempt at'), default=timezone.now)
    applied_at = models.DateTimeField(_('Applied at'), null=True, blank=True)
    created_at = models.DateTimeField(_('Created at'), auto_now_add=True)

    objects = CounterAdjustmentQuerySet.as_manager()

    class Meta:
        verbose_name = _('Counter adjustment')
        verbose_name_plural = _('Counter adjustments')
        ordering = ['created_at']
        indexes = [
            models.Index(fields=['status', 'next_attempt_at'], name='counteradj_due_idx'),
        ]

    def __str__(self):
        return _("{delta:+d} comments on story {story} ({status})").format(
            delta=self.delta,
            story=self.story_id,
            status=self.status
        )
