import logging

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import APIException, AuthenticationFailed, NotAuthenticated
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..conf import moderation_settings
from ..decisions import bulk_moderation, moderator_decision
from ..exceptions import ModerationError
from ..principal import Principal
from ..queue import get_comment_moderation_detail, list_flagged_comments
from ..resolution import create_report, list_reports, resolve_report
from .permissions import IsModerator
from .serializers import CommentDetailSerializer, QueueItemSerializer, ReportSerializer

logger = logging.getLogger(moderation_settings.LOGGER_NAME)

PAST_TENSE = {
    'approve': 'approved',
    'reject': 'rejected',
    'dismiss': 'dismissed',
    'resolve': 'resolved',
}


def get_payload(request):
    """Return the request body as a dict; non-object bodies count as empty."""
    data = request.data
    if hasattr(data, 'get'):
        return data
    return {}


def as_bool(value):
    if isinstance(value, str):
        return value.strip().lower() in ('1', 'true', 'yes', 'on')
    return bool(value)


class ModerationViewMixin:
    """
    Shared behaviour of the moderation endpoints.

    Every failure is answered with ``{"error": ..., "message": ...}``.
    """
    permission_classes = [IsAuthenticated, IsModerator]

    def get_principal(self):
        return Principal.from_user(self.request.user)

    def handle_exception(self, exc):
        if isinstance(exc, ModerationError):
            return Response(exc.as_dict(), status=exc.status_code)

        if isinstance(exc, (NotAuthenticated, AuthenticationFailed)):
            return Response(
                {'error': 'not_authenticated', 'message': 'Authentication required.'},
                status=status.HTTP_401_UNAUTHORIZED
            )

        if isinstance(exc, APIException):
            return Response(
                {'error': exc.default_code, 'message': str(exc.detail)},
                status=exc.status_code
            )

        logger.exception(f"Unexpected error in {self.__class__.__name__}: {exc}")
        return Response(
            {'error': 'internal_error', 'message': 'An unexpected error occurred.'},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR
        )


class ModerationCommentViewSet(ModerationViewMixin, viewsets.ViewSet):
    """
    Moderation queue and decisions on comments.
    """
    lookup_value_regex = '[^/]+'

    def list(self, request):
        params = request.query_params
        result = list_flagged_comments(
            status=params.get('status'),
            page_token=params.get('pageToken'),
            limit=params.get('limit'),
            q=params.get('q'),
            sort=params.get('sort'),
        )
        return Response({
            'success': True,
            'items': QueueItemSerializer(result['items'], many=True).data,
            'meta': result['meta'],
        })

    def retrieve(self, request, pk=None):
        detail = get_comment_moderation_detail(pk)
        return Response({
            'success': True,
            'comment': CommentDetailSerializer(detail['comment']).data,
            'reports': ReportSerializer(detail['reports'], many=True).data,
            'storyMeta': detail['story_meta'],
            'authorInfo': detail['author_info'],
        })

    def update(self, request, pk=None):
        """
        Apply a decision to one comment.

        Request body:
            {"action": "approve|reject|dismiss|resolve", "notes": "..."}
        """
        data = get_payload(request)
        decision_action = data.get('action')
        result = moderator_decision(
            self.get_principal(),
            pk,
            decision_action,
            notes=data.get('notes'),
        )
        return Response({
            'success': True,
            'message': f"Comment {PAST_TENSE[decision_action]} successfully",
            'comment': CommentDetailSerializer(result['content']).data,
            'audit': result['audit'],
        })

    @action(detail=False, methods=['post'], url_path='bulk')
    def bulk(self, request):
        """
        Apply one decision to many comments.

        Request body:
            {"ids": ["uuid1", "uuid2", ...], "action": "...", "notes": "..."}
        """
        data = get_payload(request)
        decision_action = data.get('action')
        results = bulk_moderation(
            self.get_principal(),
            data.get('ids'),
            decision_action,
            notes=data.get('notes'),
        )
        return Response({
            'success': True,
            'message': f"Bulk {decision_action} completed",
            'results': results,
        })


class ReportViewSet(ModerationViewMixin, viewsets.ViewSet):
    """
    Report listing and resolution for moderators; report submission for users.
    """
    lookup_value_regex = '[^/]+'

    def get_permissions(self):
        if self.action == 'create':
            return [IsAuthenticated()]
        return super().get_permissions()

    @action(detail=False, methods=['get'], url_path='comments')
    def comments(self, request):
        params = request.query_params
        result = list_reports(
            status=params.get('status'),
            report_type=params.get('type'),
            page_token=params.get('pageToken'),
            limit=params.get('limit'),
        )
        return Response({
            'success': True,
            'reports': ReportSerializer(result['reports'], many=True).data,
            'meta': result['meta'],
        })

    def update(self, request, pk=None):
        """
        Resolve or dismiss a report.

        Request body:
            {"action": "resolved|dismissed", "notes": "...", "triggerCommentAction": true}
        """
        data = get_payload(request)
        report = resolve_report(
            self.get_principal(),
            pk,
            action=data.get('action'),
            notes=data.get('notes'),
            trigger_comment_action=as_bool(data.get('triggerCommentAction', False)),
        )
        return Response({
            'success': True,
            'message': f"Report {report.status} successfully",
            'report': ReportSerializer(report).data,
        })

    def create(self, request):
        """
        Report a comment or story.

        Request body:
            {"type": "comment|story", "contentId": "...", "reason": "...", "details": "..."}
        """
        data = get_payload(request)
        report = create_report(
            self.get_principal(),
            data.get('type'),
            data.get('contentId'),
            data.get('reason'),
            details=data.get('details'),
        )
        return Response(
            {
                'success': True,
                'message': f"{report.type.capitalize()} reported successfully",
                'report': ReportSerializer(report).data,
            },
            status=status.HTTP_201_CREATED
        )
