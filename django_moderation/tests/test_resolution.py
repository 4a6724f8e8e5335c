"""
Tests for report resolution, listing and creation.
"""
import uuid
from datetime import timedelta
from unittest.mock import patch

from django.db import DatabaseError
from django.utils import timezone

from ..exceptions import Conflict, NotFound, StoreError, ValidationFailed
from ..models import AuditRecord, Comment, Report
from ..principal import Principal
from ..resolution import create_report, list_reports, resolve_report
from ..signals import report_resolved
from .base import BaseModerationTestCase


class ResolveReportTests(BaseModerationTestCase):

    def test_resolve_with_cascade(self):
        comment = self.create_comment(moderation_status='reported', visibility='public', approved=False)
        report = self.create_report(comment)

        result = resolve_report(self.principal, str(report.pk), 'resolved', 'handled', True)

        report = self.refresh(report)
        self.assertEqual(result.pk, report.pk)
        self.assertEqual(report.status, Report.STATUS_RESOLVED)
        self.assertEqual(report.resolved_by, str(self.moderator.pk))
        self.assertEqual(report.resolution_notes, 'handled')
        self.assertIsNotNone(report.resolved_at)

        # Only the status of the content changes
        comment = self.refresh(comment)
        self.assertEqual(comment.moderation_status, 'resolved')
        self.assertEqual(comment.visibility, 'public')
        self.assertFalse(comment.approved)

        audit = self.assertAuditRecorded(report_id=str(report.pk))
        self.assertEqual(audit.action, 'report_resolved')
        self.assertEqual(audit.report_type, 'comment')
        self.assertEqual(audit.comment_id, str(comment.pk))
        self.assertEqual(audit.previous_status, 'reported')
        self.assertEqual(audit.new_status, 'resolved')
        self.assertTrue(audit.triggered_comment_action)

    def test_dismiss_without_cascade(self):
        comment = self.create_comment(moderation_status='reported')
        report = self.create_report(comment)

        resolve_report(self.principal, report.pk, 'dismissed')

        self.assertEqual(self.refresh(report).status, Report.STATUS_DISMISSED)
        self.assertEqual(self.refresh(comment).moderation_status, 'reported')
        audit = self.assertAuditRecorded(report_id=str(report.pk))
        self.assertEqual(audit.action, 'report_dismissed')
        self.assertFalse(audit.triggered_comment_action)

    def test_dismiss_cascade_sets_dismissed(self):
        comment = self.create_comment(moderation_status='reported')
        report = self.create_report(comment)

        resolve_report(self.principal, report.pk, 'dismissed', trigger_comment_action=True)

        self.assertEqual(self.refresh(comment).moderation_status, 'dismissed')

    def test_cascade_updates_content_timestamp(self):
        comment = self.create_comment(moderation_status='reported')
        earlier = timezone.now() - timedelta(days=1)
        Comment.objects.filter(pk=comment.pk).update(updated_at=earlier)
        report = self.create_report(comment)

        resolve_report(self.principal, report.pk, 'resolved', trigger_comment_action=True)

        self.assertGreater(self.refresh(comment).updated_at, earlier)

    def test_action_defaults_to_resolved(self):
        report = self.create_report(self.create_comment())
        resolve_report(self.principal, report.pk)
        self.assertEqual(self.refresh(report).status, Report.STATUS_RESOLVED)

    def test_cascade_on_deleted_comment(self):
        report = self.create_report(comment_id=str(uuid.uuid4()))

        resolve_report(self.principal, report.pk, 'resolved', trigger_comment_action=True)

        self.assertEqual(self.refresh(report).status, Report.STATUS_RESOLVED)
        audit = self.assertAuditRecorded(report_id=str(report.pk))
        self.assertFalse(audit.triggered_comment_action)
        self.assertEqual(audit.previous_status, '')

    def test_story_report_cascade(self):
        report = self.create_story_report()

        resolve_report(self.principal, report.pk, 'resolved', trigger_comment_action=True)

        self.assertEqual(self.refresh(self.story).moderation_status, 'resolved')
        audit = self.assertAuditRecorded(report_id=str(report.pk))
        self.assertEqual(audit.story_id, str(self.story.pk))
        self.assertEqual(audit.report_type, 'story')

    def test_resolving_closed_report_conflicts(self):
        report = self.create_report(self.create_comment())
        resolve_report(self.principal, report.pk, 'resolved')

        with self.assertRaises(Conflict):
            resolve_report(self.principal, report.pk, 'dismissed')

        self.assertEqual(self.refresh(report).status, Report.STATUS_RESOLVED)
        self.assertAuditCount(1)

    def test_concurrent_resolution_conflicts(self):
        report = self.create_report(self.create_comment())
        stale = Report.objects.get(pk=report.pk)
        Report.objects.filter(pk=report.pk).update(status=Report.STATUS_DISMISSED)

        with patch('django_moderation.resolution.Report.objects.get', return_value=stale):
            with self.assertRaises(Conflict):
                resolve_report(self.principal, report.pk, 'resolved')

        self.assertEqual(self.refresh(report).status, Report.STATUS_DISMISSED)
        self.assertNoAudit()

    def test_invalid_action(self):
        report = self.create_report(self.create_comment())
        with self.assertRaises(ValidationFailed) as ctx:
            resolve_report(self.principal, report.pk, 'approve')
        self.assertEqual(ctx.exception.error, 'invalid_action')

    def test_unknown_report(self):
        with self.assertRaises(NotFound) as ctx:
            resolve_report(self.principal, uuid.uuid4())
        self.assertEqual(ctx.exception.error, 'report_not_found')

    def test_audit_failure_rolls_back_resolution(self):
        comment = self.create_comment(moderation_status='reported')
        report = self.create_report(comment)

        with patch('django_moderation.audit.AuditRecord.objects.record', side_effect=DatabaseError('nope')):
            with self.assertRaises(StoreError):
                resolve_report(self.principal, report.pk, 'resolved', trigger_comment_action=True)

        self.assertEqual(self.refresh(report).status, Report.STATUS_PENDING)
        self.assertEqual(self.refresh(comment).moderation_status, 'reported')

    def test_sends_report_resolved_signal(self):
        report = self.create_report(self.create_comment())
        received = []

        def on_resolved(sender, report, action, triggered_comment_action, **kwargs):
            received.append((report.pk, action, triggered_comment_action))

        report_resolved.connect(on_resolved)
        try:
            resolve_report(self.principal, report.pk, 'dismissed')
        finally:
            report_resolved.disconnect(on_resolved)

        self.assertEqual(received, [(report.pk, 'dismissed', False)])


class ListReportsTests(BaseModerationTestCase):

    def setUp(self):
        super().setUp()
        self.comment = self.create_comment()
        now = timezone.now()
        self.reports = [
            self.create_report(self.comment, created_at=now - timedelta(minutes=i))
            for i in range(5)
        ]
        self.create_report(self.comment, status=Report.STATUS_RESOLVED)
        self.create_story_report()

    def test_defaults_to_pending_comment_reports_newest_first(self):
        result = list_reports()

        self.assertEqual([r.pk for r in result['reports']], [r.pk for r in self.reports])
        self.assertFalse(result['meta']['hasMore'])
        self.assertIsNone(result['meta']['nextPageToken'])
        self.assertEqual(result['meta']['limit'], 20)

    def test_status_all(self):
        result = list_reports(status='all')
        self.assertEqual(len(result['reports']), 6)

    def test_story_type(self):
        result = list_reports(report_type='story')
        self.assertEqual(len(result['reports']), 1)
        self.assertEqual(result['reports'][0].type, 'story')

    def test_paginates_to_exhaustion(self):
        seen = []
        token = None
        while True:
            result = list_reports(page_token=token, limit=2)
            seen.extend(r.pk for r in result['reports'])
            token = result['meta']['nextPageToken']
            if not result['meta']['hasMore']:
                break

        self.assertEqual(seen, [r.pk for r in self.reports])

    def test_invalid_status(self):
        with self.assertRaises(ValidationFailed):
            list_reports(status='archived')

    def test_invalid_type(self):
        with self.assertRaises(ValidationFailed):
            list_reports(report_type='user')


class CreateReportTests(BaseModerationTestCase):

    def setUp(self):
        super().setUp()
        self.reporter = Principal.from_user(self.regular_user)

    def test_report_comment(self):
        comment = self.create_comment(moderation_status='approved')

        report = create_report(self.reporter, 'comment', str(comment.pk), 'spam', 'buy now')
        report = self.refresh(report)

        self.assertEqual(report.status, Report.STATUS_PENDING)
        self.assertEqual(report.comment_id, str(comment.pk))
        self.assertEqual(report.reporter_id, self.regular_user.pk)
        self.assertEqual(report.details, 'buy now')

    def test_report_story(self):
        report = create_report(self.reporter, 'story', self.story.pk, 'inappropriate')
        self.assertEqual(report.story_id, str(self.story.pk))
        self.assertEqual(report.type, 'story')

    def test_missing_reason(self):
        with self.assertRaises(ValidationFailed):
            create_report(self.reporter, 'story', self.story.pk, '  ')

    def test_invalid_type(self):
        with self.assertRaises(ValidationFailed):
            create_report(self.reporter, 'user', self.story.pk, 'spam')

    def test_unknown_content(self):
        with self.assertRaises(NotFound) as ctx:
            create_report(self.reporter, 'story', uuid.uuid4(), 'spam')
        self.assertEqual(ctx.exception.error, 'story_not_found')

    def test_duplicate_pending_report_refused(self):
        comment = self.create_comment()
        create_report(self.reporter, 'comment', comment.pk, 'spam')

        with self.assertRaises(ValidationFailed) as ctx:
            create_report(self.reporter, 'comment', comment.pk, 'spam again')

        self.assertEqual(ctx.exception.error, 'duplicate_report')
        self.assertEqual(Report.objects.count(), 1)

    def test_reporting_again_after_resolution_allowed(self):
        comment = self.create_comment()
        first = create_report(self.reporter, 'comment', comment.pk, 'spam')
        resolve_report(self.principal, first.pk)

        second = create_report(self.reporter, 'comment', comment.pk, 'spam')
        self.assertNotEqual(first.pk, second.pk)
        self.assertFalse(AuditRecord.objects.filter(report_id=str(second.pk)).exists())
