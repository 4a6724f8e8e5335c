from datetime import timedelta

from django.contrib.auth import get_user_model
from django.contrib.auth.models import Group
from django.test import TestCase
from django.utils import timezone

from ..models import AuditRecord, Comment, CounterAdjustment, Report, Story
from ..principal import Principal

User = get_user_model()


class BaseModerationTestCase(TestCase):
    """
    Base test case with common setup for moderation tests.

    Provides:
    - Standard test users (regular user, moderator, group moderator, admin)
    - A story to attach comments to
    - Helper methods for creating comments and reports
    - Assertion helpers for audit records
    """

    @classmethod
    def setUpTestData(cls):
        """
        Set up test data once for the entire test class.
        """
        cls.regular_user = User.objects.create_user(
            username='john_doe',
            email='john@example.com',
            password='testpass123',
            first_name='John',
            last_name='Doe'
        )

        cls.another_user = User.objects.create_user(
            username='alice',
            email='alice@example.com',
            password='testpass123',
            first_name='Alice',
            last_name='Johnson'
        )

        cls.moderator = User.objects.create_user(
            username='jane_moderator',
            email='jane@example.com',
            password='testpass123',
            first_name='Jane',
            last_name='Smith',
            is_staff=True
        )

        cls.group_moderator = User.objects.create_user(
            username='group_mod',
            email='groupmod@example.com',
            password='testpass123'
        )
        moderators, _ = Group.objects.get_or_create(name='Moderators')
        cls.group_moderator.groups.add(moderators)

        cls.admin_user = User.objects.create_user(
            username='admin',
            email='admin@example.com',
            password='testpass123',
            is_staff=True,
            is_superuser=True
        )

    def setUp(self):
        self.principal = Principal.from_user(self.moderator)
        self.story = self.create_story()

    def create_story(self, **kwargs):
        defaults = {
            'title': 'A story about moderation',
            'category': 'news',
            'content': 'Once upon a time there was a queue.',
            'author': self.another_user,
            'moderation_status': 'approved',
            'approved': True,
        }
        defaults.update(kwargs)
        return Story.objects.create(**defaults)

    def create_comment(self, **kwargs):
        """
        Helper to create a comment with sensible defaults (flagged, on self.story).
        """
        defaults = {
            'story': self.story,
            'author': self.regular_user,
            'content': 'This is a test comment with real-world content.',
            'moderation_status': 'flagged',
            'moderation_score': 0.5,
        }
        defaults.update(kwargs)
        return Comment.objects.create(**defaults)

    def create_comments(self, count, **kwargs):
        """Create comments with strictly increasing created_at, oldest first."""
        start = timezone.now() - timedelta(hours=1)
        return [
            self.create_comment(created_at=start + timedelta(seconds=i), content=f'Comment {i}', **kwargs)
            for i in range(count)
        ]

    def create_report(self, comment=None, **kwargs):
        """Helper to create a pending report on a comment."""
        defaults = {
            'type': Report.TYPE_COMMENT,
            'comment_id': str(comment.pk) if comment else '',
            'reporter': self.another_user,
            'reason': 'spam',
            'details': 'Looks like spam to me.',
        }
        defaults.update(kwargs)
        return Report.objects.create(**defaults)

    def create_story_report(self, story=None, **kwargs):
        story = story or self.story
        defaults = {
            'type': Report.TYPE_STORY,
            'story_id': str(story.pk),
            'reporter': self.regular_user,
            'reason': 'inappropriate',
        }
        defaults.update(kwargs)
        return Report.objects.create(**defaults)

    def refresh(self, obj):
        obj.refresh_from_db()
        return obj

    def assertAuditCount(self, expected, **filters):
        self.assertEqual(AuditRecord.objects.filter(**filters).count(), expected)

    def assertAuditRecorded(self, **filters):
        """Assert exactly one audit record matches and return it."""
        records = list(AuditRecord.objects.filter(**filters))
        self.assertEqual(len(records), 1, f"Expected one audit record matching {filters}, got {len(records)}")
        return records[0]

    def assertNoAudit(self):
        self.assertEqual(AuditRecord.objects.count(), 0)

    def assertNoCounterAdjustments(self):
        self.assertEqual(CounterAdjustment.objects.count(), 0)
