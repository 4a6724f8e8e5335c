# Initial schema for django_moderation

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone
import uuid


MODERATION_STATUS_CHOICES = [
    ('pending', 'Pending'),
    ('flagged', 'Flagged'),
    ('reported', 'Reported'),
    ('approved', 'Approved'),
    ('rejected', 'Rejected'),
    ('dismissed', 'Dismissed'),
    ('resolved', 'Resolved'),
]

VISIBILITY_CHOICES = [('public', 'Public'), ('hidden', 'Hidden')]


def moderated_content_fields():
    """Fields shared by Story and Comment."""
    return [
        ('created_at', models.DateTimeField(db_index=True, default=django.utils.timezone.now, verbose_name='Created at')),
        ('updated_at', models.DateTimeField(auto_now=True, verbose_name='Updated at')),
        ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False, verbose_name='ID')),
        ('content', models.TextField(verbose_name='Content')),
        ('moderation_status', models.CharField(choices=MODERATION_STATUS_CHOICES, db_index=True, default='pending', max_length=20, verbose_name='Moderation status')),
        ('moderation_score', models.FloatField(db_index=True, default=0.0, help_text='Highest automated classifier score for this item (0-1).', verbose_name='Highest score')),
        ('moderation_notes', models.TextField(blank=True, verbose_name='Moderation notes')),
        ('moderated_by', models.CharField(blank=True, help_text='Identifier of the moderator who made the last decision.', max_length=255, verbose_name='Moderated by')),
        ('moderated_at', models.DateTimeField(blank=True, null=True, verbose_name='Moderated at')),
        ('approved', models.BooleanField(default=False, verbose_name='Approved')),
        ('visibility', models.CharField(choices=VISIBILITY_CHOICES, default='public', max_length=10, verbose_name='Visibility')),
    ]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Story',
            fields=moderated_content_fields() + [
                ('title', models.CharField(max_length=255, verbose_name='Title')),
                ('category', models.CharField(blank=True, max_length=100, verbose_name='Category')),
                ('comments_count', models.PositiveIntegerField(default=0, verbose_name='Comments count')),
                ('author', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='%(app_label)s_%(class)s_set', to=settings.AUTH_USER_MODEL, verbose_name='Author')),
            ],
            options={
                'verbose_name': 'Story',
                'verbose_name_plural': 'Stories',
                'ordering': ('-created_at',),
                'indexes': [
                    models.Index(fields=['moderation_status', 'created_at'], name='story_status_created_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Comment',
            fields=moderated_content_fields() + [
                ('author', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='%(app_label)s_%(class)s_set', to=settings.AUTH_USER_MODEL, verbose_name='Author')),
                ('story', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='comments', to='django_moderation.story', verbose_name='Story')),
            ],
            options={
                'verbose_name': 'Comment',
                'verbose_name_plural': 'Comments',
                'ordering': ('-created_at',),
                'permissions': [('can_moderate', 'Can moderate content')],
                'indexes': [
                    models.Index(fields=['moderation_status', 'created_at'], name='comment_status_created_idx'),
                    models.Index(fields=['moderation_status', 'moderation_score'], name='comment_status_score_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Report',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False, verbose_name='ID')),
                ('type', models.CharField(choices=[('comment', 'Comment'), ('story', 'Story')], db_index=True, default='comment', max_length=20, verbose_name='Type')),
                ('comment_id', models.CharField(blank=True, db_index=True, max_length=255, verbose_name='Comment ID')),
                ('story_id', models.CharField(blank=True, db_index=True, max_length=255, verbose_name='Story ID')),
                ('reason', models.CharField(max_length=100, verbose_name='Reason')),
                ('details', models.TextField(blank=True, verbose_name='Details')),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('resolved', 'Resolved'), ('dismissed', 'Dismissed')], db_index=True, default='pending', max_length=20, verbose_name='Status')),
                ('resolved_by', models.CharField(blank=True, max_length=255, verbose_name='Resolved by')),
                ('resolved_at', models.DateTimeField(blank=True, null=True, verbose_name='Resolved at')),
                ('resolution_notes', models.TextField(blank=True, verbose_name='Resolution notes')),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now, verbose_name='Created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='Updated at')),
                ('reporter', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='moderation_reports', to=settings.AUTH_USER_MODEL, verbose_name='Reporter')),
            ],
            options={
                'verbose_name': 'Report',
                'verbose_name_plural': 'Reports',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['type', 'status', 'created_at'], name='report_listing_idx'),
                    models.Index(fields=['comment_id', 'status'], name='report_comment_status_idx'),
                    models.Index(fields=['story_id', 'status'], name='report_story_status_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='AuditRecord',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False, verbose_name='ID')),
                ('comment_id', models.CharField(blank=True, db_index=True, max_length=255, verbose_name='Comment ID')),
                ('story_id', models.CharField(blank=True, db_index=True, max_length=255, verbose_name='Story ID')),
                ('report_id', models.CharField(blank=True, db_index=True, max_length=255, verbose_name='Report ID')),
                ('report_type', models.CharField(blank=True, max_length=20, verbose_name='Report type')),
                ('moderator_id', models.CharField(max_length=255, verbose_name='Moderator ID')),
                ('moderator_email', models.CharField(blank=True, max_length=254, verbose_name='Moderator email')),
                ('action', models.CharField(max_length=40, verbose_name='Action')),
                ('notes', models.TextField(blank=True, verbose_name='Notes')),
                ('previous_status', models.CharField(blank=True, max_length=20, verbose_name='Previous status')),
                ('new_status', models.CharField(blank=True, max_length=20, verbose_name='New status')),
                ('bulk_operation', models.BooleanField(default=False, verbose_name='Bulk operation')),
                ('triggered_comment_action', models.BooleanField(blank=True, help_text='For report resolutions: whether the referenced content was updated.', null=True, verbose_name='Triggered content action')),
                ('timestamp', models.DateTimeField(db_index=True, default=django.utils.timezone.now, verbose_name='Timestamp')),
            ],
            options={
                'verbose_name': 'Audit record',
                'verbose_name_plural': 'Audit records',
                'ordering': ['-timestamp'],
                'indexes': [
                    models.Index(fields=['moderator_id', 'action'], name='audit_moderator_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='CounterAdjustment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('story_id', models.CharField(db_index=True, max_length=255, verbose_name='Story ID')),
                ('delta', models.IntegerField(default=1, verbose_name='Delta')),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('applied', 'Applied'), ('abandoned', 'Abandoned')], default='pending', max_length=20, verbose_name='Status')),
                ('attempts', models.PositiveIntegerField(default=0, verbose_name='Attempts')),
                ('last_error', models.TextField(blank=True, verbose_name='Last error')),
                ('next_attempt_at', models.DateTimeField(default=django.utils.timezone.now, verbose_name='Next attempt at')),
                ('applied_at', models.DateTimeField(blank=True, null=True, verbose_name='Applied at')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='Created at')),
            ],
            options={
                'verbose_name': 'Counter adjustment',
                'verbose_name_plural': 'Counter adjustments',
                'ordering': ['created_at'],
                'indexes': [
                    models.Index(fields=['status', 'next_attempt_at'], name='counteradj_due_idx'),
                ],
            },
        ),
    ]
