"""
Pytest fixtures for django_moderation tests.
"""
import pytest
from django.contrib.auth.models import Group, Permission
from rest_framework.test import APIClient

from ..principal import Principal
from .factories import (
    CommentFactory,
    ReportFactory,
    StaffUserFactory,
    StoryFactory,
    UserFactory,
)


# ============================================================================
# Database and Environment Setup
# ============================================================================

@pytest.fixture
def moderators_group(db):
    group, _ = Group.objects.get_or_create(name='Moderators')
    return group


# ============================================================================
# Users
# ============================================================================

@pytest.fixture
def user(db):
    """Return a regular user."""
    return UserFactory()


@pytest.fixture
def moderator_user(db):
    """Return a staff user, who is a moderator."""
    return StaffUserFactory(email='moderator@example.com')


@pytest.fixture
def permission_moderator(db):
    """Return a non-staff user holding the can_moderate permission."""
    moderator = UserFactory()
    permission = Permission.objects.get(
        codename='can_moderate',
        content_type__app_label='django_moderation'
    )
    moderator.user_permissions.add(permission)
    return moderator


@pytest.fixture
def group_moderator(moderators_group):
    """Return a non-staff user in the Moderators group."""
    moderator = UserFactory()
    moderator.groups.add(moderators_group)
    return moderator


@pytest.fixture
def principal(moderator_user):
    """Return the Principal of the moderator user."""
    return Principal.from_user(moderator_user)


# ============================================================================
# API clients
# ============================================================================

@pytest.fixture
def api_client():
    """Return an unauthenticated DRF API client."""
    return APIClient()


@pytest.fixture
def moderator_client(moderator_user):
    """Return an API client authenticated as a moderator."""
    client = APIClient()
    client.force_authenticate(user=moderator_user)
    return client


@pytest.fixture
def user_client(user):
    """Return an API client authenticated as a regular user."""
    client = APIClient()
    client.force_authenticate(user=user)
    return client


# ============================================================================
# Content
# ============================================================================

@pytest.fixture
def story(db):
    return StoryFactory()


@pytest.fixture
def flagged_comment(story):
    return CommentFactory(story=story, moderation_status='flagged')


@pytest.fixture
def pending_report(flagged_comment, user):
    return ReportFactory(comment=flagged_comment, reporter=user)
