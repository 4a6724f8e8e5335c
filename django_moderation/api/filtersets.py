import django_filters
from django.utils.translation import gettext_lazy as _

from ..models import Report

STATUS_ALL = 'all'


class ReportFilterSet(django_filters.FilterSet):
    """
    FilterSet for the report listing.

    ``status`` accepts the report statuses plus ``all``; ``type`` accepts the
    report types. Anything else makes the filterset invalid.
    """
    status = django_filters.ChoiceFilter(
        choices=Report.STATUS_CHOICES + ((STATUS_ALL, _('All')),),
        method='filter_status',
        help_text=_("Filter by report status ('all' for every status)")
    )

    type = django_filters.ChoiceFilter(
        choices=Report.TYPE_CHOICES,
        help_text=_("Filter by reported content type")
    )

    class Meta:
        model = Report
        fields = ['status', 'type']

    def filter_status(self, queryset, name, value):
        if not value or value == STATUS_ALL:
            return queryset
        return queryset.filter(status=value)
