from rest_framework import permissions

from ..principal import user_is_moderator


class IsModerator(permissions.BasePermission):
    """
    Permission for moderator-only endpoints.
    - Staff and superusers are moderators
    - Users with the ``django_moderation.can_moderate`` permission are moderators
    - Members of a group listed in ``MODERATOR_GROUPS`` are moderators
    """
    message = 'Moderator access required.'

    def has_permission(self, request, view):
        return user_is_moderator(request.user)
