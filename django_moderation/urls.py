from django.urls import path, include

app_name = 'django_moderation'

urlpatterns = [
    # Mount under the admin moderation prefix of the host project, e.g. /api/admin/moderation/
    path('', include('django_moderation.api.urls', namespace='api')),
]
