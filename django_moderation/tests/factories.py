"""
Factories for creating moderation test data.
"""
from datetime import timedelta

import factory
from django.contrib.auth import get_user_model
from django.utils import timezone
from factory import fuzzy
from factory.django import DjangoModelFactory

from ..models import Comment, Report, Story

User = get_user_model()


class UserFactory(DjangoModelFactory):
    """
    Factory for creating User instances with realistic data.
    """

    username = factory.Sequence(lambda n: f'user_{n}')
    email = factory.LazyAttribute(lambda obj: f'{obj.username}@example.com')
    first_name = factory.Faker('first_name')
    last_name = factory.Faker('last_name')
    password = factory.PostGenerationMethodCall('set_password', 'testpass123')
    is_active = True
    is_staff = False
    is_superuser = False

    class Meta:
        model = User
        django_get_or_create = ('username',)
        skip_postgeneration_save = True


class StaffUserFactory(UserFactory):
    """Factory for staff users (moderators)."""
    is_staff = True


class SuperUserFactory(UserFactory):
    """Factory for superusers."""
    is_staff = True
    is_superuser = True


class StoryFactory(DjangoModelFactory):
    """
    Factory for stories that comments attach to.
    """

    title = factory.Faker('sentence', nb_words=6, variable_nb_words=True)
    category = fuzzy.FuzzyChoice(['news', 'fiction', 'opinion', 'travel'])
    content = factory.Faker('paragraph', nb_sentences=5)
    author = factory.SubFactory(UserFactory)
    moderation_status = 'approved'
    approved = True
    comments_count = 0

    class Meta:
        model = Story


class CommentFactory(DjangoModelFactory):
    """
    Factory for comments. Defaults to a flagged comment on a story.
    """

    story = factory.SubFactory(StoryFactory)
    author = factory.SubFactory(UserFactory)
    content = factory.Faker('paragraph', nb_sentences=2)
    moderation_status = 'flagged'
    moderation_score = fuzzy.FuzzyFloat(0.0, 1.0)
    approved = False
    visibility = 'public'
    created_at = factory.LazyFunction(timezone.now)

    class Meta:
        model = Comment


class PendingCommentFactory(CommentFactory):
    moderation_status = 'pending'


class ApprovedCommentFactory(CommentFactory):
    moderation_status = 'approved'
    approved = True


class ReportFactory(DjangoModelFactory):
    """
    Factory for pending comment reports.

    Pass ``comment=<Comment>`` to point the report at an existing comment, or
    ``comment=None, comment_id='...'`` for a report whose comment is gone.
    """

    class Meta:
        model = Report
        exclude = ('comment',)

    comment = factory.SubFactory(CommentFactory)
    type = Report.TYPE_COMMENT
    comment_id = factory.LazyAttribute(lambda obj: str(obj.comment.pk) if obj.comment else '')
    reporter = factory.SubFactory(UserFactory)
    reason = fuzzy.FuzzyChoice(['spam', 'harassment', 'offensive', 'off-topic'])
    details = factory.Faker('sentence')
    status = Report.STATUS_PENDING


class StoryReportFactory(DjangoModelFactory):
    """
    Factory for pending story reports.
    """

    class Meta:
        model = Report
        exclude = ('story',)

    story = factory.SubFactory(StoryFactory)
    type = Report.TYPE_STORY
    story_id = factory.LazyAttribute(lambda obj: str(obj.story.pk) if obj.story else '')
    reporter = factory.SubFactory(UserFactory)
    reason = 'inappropriate'
    details = ''
    status = Report.STATUS_PENDING


def create_queue(count, start=None, step=timedelta(minutes=1), **kwargs):
    """
    Create ``count`` comments with strictly increasing ``created_at``.

    Returns:
        List of comments, oldest first
    """
    start = start or timezone.now() - timedelta(days=1)
    return [
        CommentFactory(created_at=start + step * i, **kwargs)
        for i in range(count)
    ]
