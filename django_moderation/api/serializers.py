from rest_framework import serializers

from ..models import Comment, Report


class ModerationSerializer(serializers.Serializer):
    """
    The moderation sub-record of a content item.
    """
    status = serializers.CharField(source='moderation_status')
    highestScore = serializers.FloatField(source='moderation_score')
    notes = serializers.CharField(source='moderation_notes')
    moderatedBy = serializers.SerializerMethodField()
    moderatedAt = serializers.DateTimeField(source='moderated_at')

    def get_moderatedBy(self, obj):
        return obj.moderated_by or None


class QueueItemSerializer(serializers.ModelSerializer):
    """
    Serializer for comments in the moderation queue.
    """
    commentId = serializers.CharField(source='pk', read_only=True)
    storyId = serializers.CharField(source='story_id', read_only=True)
    authorId = serializers.CharField(source='author_id', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    moderation = ModerationSerializer(source='*', read_only=True)
    reportsCount = serializers.IntegerField(source='reports_count', default=0, read_only=True)

    class Meta:
        model = Comment
        fields = (
            'commentId', 'storyId', 'authorId', 'content', 'createdAt',
            'moderation', 'reportsCount',
        )
        read_only_fields = fields


class CommentDetailSerializer(QueueItemSerializer):
    """
    Full view of a comment, returned by the detail and decision endpoints.
    """
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta(QueueItemSerializer.Meta):
        fields = QueueItemSerializer.Meta.fields + ('visibility', 'approved', 'updatedAt')
        read_only_fields = fields


class ReportSerializer(serializers.ModelSerializer):
    """
    Serializer for user reports.
    """
    commentId = serializers.SerializerMethodField()
    storyId = serializers.SerializerMethodField()
    reporterId = serializers.CharField(source='reporter_id', read_only=True)
    resolvedBy = serializers.SerializerMethodField()
    resolvedAt = serializers.DateTimeField(source='resolved_at', read_only=True)
    resolutionNotes = serializers.CharField(source='resolution_notes', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = Report
        fields = (
            'id', 'type', 'commentId', 'storyId', 'reporterId', 'reason', 'details',
            'status', 'resolvedBy', 'resolvedAt', 'resolutionNotes', 'createdAt',
        )
        read_only_fields = fields

    def get_commentId(self, obj):
        return obj.comment_id or None

    def get_storyId(self, obj):
        return obj.story_id or None

    def get_resolvedBy(self, obj):
        return obj.resolved_by or None
