from django.contrib import admin, messages
from django.utils.translation import gettext_lazy as _

from .conf import moderation_settings
from .counters import apply_adjustment
from .decisions import ACTION_APPROVE, ACTION_REJECT, bulk_moderation, moderator_decision
from .exceptions import ModerationError
from .models import AuditRecord, Comment, CounterAdjustment, Report, Story
from .principal import Principal


class ModeratedContentAdmin(admin.ModelAdmin):
    """
    Shared admin configuration for moderated content.
    Status fields are changed through decisions only.
    """
    list_filter = ('moderation_status', 'visibility', 'approved', 'created_at')
    search_fields = ('content',)
    date_hierarchy = 'created_at'
    raw_id_fields = ('author',)
    readonly_fields = (
        'moderation_status', 'moderation_score', 'moderation_notes',
        'moderated_by', 'moderated_at', 'approved', 'visibility',
        'created_at', 'updated_at',
    )

    def content_snippet(self, obj):
        """Display a snippet of the content."""
        if len(obj.content) > 50:
            return f"{obj.content[:50]}..."
        return obj.content
    content_snippet.short_description = _('Content')


@admin.register(Comment)
class CommentAdmin(ModeratedContentAdmin):
    list_display = (
        'id', 'content_snippet', 'author', 'story', 'moderation_status',
        'moderation_score', 'visibility', 'approved', 'created_at',
    )
    raw_id_fields = ('author', 'story')
    actions = ['approve_comments', 'reject_comments']

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('author', 'story')

    def _bulk_decision(self, request, queryset, action):
        ids = [str(pk) for pk in queryset.values_list('pk', flat=True)]
        principal = Principal.from_user(request.user)
        succeeded = failed = 0
        # Bulk requests are bounded; large selections are processed in chunks
        size = moderation_settings.BULK_MAX_ITEMS
        for start in range(0, len(ids), size):
            results = bulk_moderation(principal, ids[start:start + size], action)
            succeeded += len(results['success'])
            failed += len(results['failed'])
        return succeeded, failed

    def approve_comments(self, request, queryset):
        """Admin action to approve selected comments."""
        succeeded, failed = self._bulk_decision(request, queryset, ACTION_APPROVE)
        self.message_user(
            request,
            _("Successfully approved %(count)d comments.") % {'count': succeeded}
        )
        if failed:
            self.message_user(
                request,
                _("%(count)d comments could not be approved.") % {'count': failed},
                level=messages.WARNING
            )
    approve_comments.short_description = _("Approve selected comments")

    def reject_comments(self, request, queryset):
        """Admin action to reject selected comments."""
        succeeded, failed = self._bulk_decision(request, queryset, ACTION_REJECT)
        self.message_user(
            request,
            _("Successfully rejected %(count)d comments.") % {'count': succeeded}
        )
        if failed:
            self.message_user(
                request,
                _("%(count)d comments could not be rejected.") % {'count': failed},
                level=messages.WARNING
            )
    reject_comments.short_description = _("Reject selected comments")


@admin.register(Story)
class StoryAdmin(ModeratedContentAdmin):
    list_display = (
        'title', 'category', 'author', 'moderation_status', 'visibility',
        'comments_count', 'created_at',
    )
    search_fields = ('title', 'content')
    readonly_fields = ModeratedContentAdmin.readonly_fields + ('comments_count',)
    actions = ['approve_stories', 'reject_stories']

    def _decide(self, request, queryset, action):
        principal = Principal.from_user(request.user)
        succeeded = 0
        for story in queryset:
            try:
                moderator_decision(principal, story.pk, action, kind='story')
            except ModerationError as e:
                self.message_user(request, f"{story}: {e.message}", level=messages.ERROR)
            else:
                succeeded += 1
        return succeeded

    def approve_stories(self, request, queryset):
        """Admin action to approve selected stories."""
        count = self._decide(request, queryset, ACTION_APPROVE)
        self.message_user(
            request,
            _("Successfully approved %(count)d stories.") % {'count': count}
        )
    approve_stories.short_description = _("Approve selected stories")

    def reject_stories(self, request, queryset):
        """Admin action to reject selected stories."""
        count = self._decide(request, queryset, ACTION_REJECT)
        self.message_user(
            request,
            _("Successfully rejected %(count)d stories.") % {'count': count}
        )
    reject_stories.short_description = _("Reject selected stories")


@admin.register(Report)
class ReportAdmin(admin.ModelAdmin):
    list_display = ('id', 'type', 'comment_id', 'story_id', 'reporter', 'reason', 'status', 'created_at')
    list_filter = ('type', 'status', 'created_at')
    search_fields = ('comment_id', 'story_id', 'reason', 'details')
    raw_id_fields = ('reporter',)
    readonly_fields = ('resolved_by', 'resolved_at', 'resolution_notes', 'created_at', 'updated_at')
    date_hierarchy = 'created_at'


@admin.register(AuditRecord)
class AuditRecordAdmin(admin.ModelAdmin):
    """
    Read-only view of the audit trail.
    """
    list_display = (
        'timestamp', 'moderator_email', 'moderator_id', 'action',
        'comment_id', 'story_id', 'report_id', 'previous_status', 'new_status',
        'bulk_operation',
    )
    list_filter = ('action', 'bulk_operation', 'timestamp')
    search_fields = ('moderator_id', 'moderator_email', 'comment_id', 'story_id', 'report_id', 'notes')
    date_hierarchy = 'timestamp'

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(CounterAdjustment)
class CounterAdjustmentAdmin(admin.ModelAdmin):
    list_display = ('id', 'story_id', 'delta', 'status', 'attempts', 'next_attempt_at', 'applied_at')
    list_filter = ('status',)
    search_fields = ('story_id',)
    readonly_fields = (
        'story_id', 'delta', 'status', 'attempts', 'last_error',
        'next_attempt_at', 'applied_at', 'created_at',
    )
    actions = ['retry_adjustments']

    def has_add_permission(self, request):
        return False

    def retry_adjustments(self, request, queryset):
        """Admin action to apply selected pending adjustments now."""
        applied = 0
        for adjustment in queryset.filter(status=CounterAdjustment.STATUS_PENDING):
            if apply_adjustment(adjustment):
                applied += 1
        self.message_user(
            request,
            _("Applied %(count)d counter adjustments.") % {'count': applied}
        )
    retry_adjustments.short_description = _("Retry selected adjustments now")
