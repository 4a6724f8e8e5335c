"""
Management command to retry pending story comment counter adjustments.

Adjustments that failed to apply right after their decision are retried
once their backoff has expired. Run it periodically (cron, systemd timer).

Usage:
    python manage.py retry_counter_adjustments
    python manage.py retry_counter_adjustments --limit=500
    python manage.py retry_counter_adjustments --dry-run --verbose
"""
import logging

from django.core.management.base import BaseCommand, CommandError
from django.utils.translation import gettext_lazy as _

from ...conf import moderation_settings
from ...counters import retry_due_adjustments
from ...models import CounterAdjustment

logger = logging.getLogger(moderation_settings.LOGGER_NAME)


class Command(BaseCommand):
    help = _("Retry pending story comment counter adjustments whose backoff has expired")

    def add_arguments(self, parser):
        parser.add_argument(
            '--limit',
            type=int,
            default=None,
            help=_('Maximum number of adjustments to process in this run.')
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help=_('Do not apply anything, just show what is due.')
        )
        parser.add_argument(
            '--verbose',
            action='store_true',
            help=_('Show more detailed output.')
        )

    def handle(self, *args, **options):
        limit = options['limit']
        dry_run = options['dry_run']
        verbose = options['verbose']

        if limit is not None and limit <= 0:
            raise CommandError("--limit must be a positive integer")

        if dry_run:
            due = CounterAdjustment.objects.due()
            if limit:
                due = due[:limit]
            due = list(due)

            if verbose:
                for adjustment in due:
                    self.stdout.write(
                        f"  story {adjustment.story_id}: {adjustment.delta:+d} "
                        f"(attempts: {adjustment.attempts})"
                    )

            self.stdout.write(self.style.SUCCESS(
                f"Would retry {len(due)} counter adjustments (dry run)."
            ))
            return

        processed, applied = retry_due_adjustments(limit=limit)

        if verbose:
            pending = CounterAdjustment.objects.pending().count()
            abandoned = CounterAdjustment.objects.filter(
                status=CounterAdjustment.STATUS_ABANDONED
            ).count()
            self.stdout.write(f"Still pending: {pending}, abandoned: {abandoned}")

        self.stdout.write(self.style.SUCCESS(
            f"Processed {processed} counter adjustments, {applied} applied."
        ))
