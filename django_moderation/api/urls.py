from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'django_moderation_api'

router = DefaultRouter(trailing_slash=False)
router.include_root_view = False
router.register(r'comments', views.ModerationCommentViewSet, basename='comment')
router.register(r'reports', views.ReportViewSet, basename='report')

urlpatterns = [
    path('', include(router.urls)),
]
