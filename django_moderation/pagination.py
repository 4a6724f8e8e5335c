"""
Cursor pagination shared by the moderation queue and report listing.

Built on DRF's ``CursorPagination``: pages are ordered by a sort field and
the primary key, both descending, and the opaque page token is DRF's cursor
(position of the last item plus an offset for ties), so later pages stay
stable while rows are inserted or moderated.
"""
from urllib import parse

from django.core.exceptions import ValidationError
from django.http import QueryDict
from rest_framework.exceptions import NotFound as CursorNotFound
from rest_framework.pagination import CursorPagination

from .conf import moderation_settings
from .exceptions import ValidationFailed
from .utils import parse_limit


class PageRequest:
    """
    The part of a request that cursor pagination reads, built from explicit
    ``page_token`` and ``limit`` values so core functions stay request-free.
    """

    def __init__(self, page_token=None, limit=None):
        self.query_params = QueryDict(mutable=True)
        if page_token:
            self.query_params[KeysetPagination.cursor_query_param] = str(page_token)
        if limit is not None and limit != '':
            self.query_params[KeysetPagination.page_size_query_param] = str(limit)

    def build_absolute_uri(self):
        return ''


class KeysetPagination(CursorPagination):
    """
    Paginate a queryset by ``sort_field`` descending with the pk as tie-breaker.

    Usage:
        paginator = KeysetPagination('created_at')
        items = paginator.paginate(queryset, page_token, limit)
        meta = paginator.get_meta()
    """
    cursor_query_param = 'pageToken'
    page_size_query_param = 'limit'
    invalid_cursor_message = 'Invalid pageToken'
    template = None

    def __init__(self, sort_field='created_at'):
        self.sort_field = sort_field
        self.ordering = (f'-{sort_field}', '-pk')
        self.page_size = moderation_settings.PAGE_SIZE
        self.max_page_size = moderation_settings.MAX_PAGE_SIZE
        self.model = None
        self.has_next = False

    def paginate(self, queryset, page_token=None, limit=None):
        self.model = queryset.model
        return self.paginate_queryset(queryset, PageRequest(page_token, limit))

    def get_page_size(self, request):
        # Missing or invalid limits fall back to PAGE_SIZE, large ones are clamped
        return parse_limit(request.query_params.get(self.page_size_query_param))

    def get_ordering(self, request, queryset, view):
        return self.ordering

    def decode_cursor(self, request):
        invalid = ValidationFailed(self.invalid_cursor_message, error='invalid_input')
        try:
            cursor = super().decode_cursor(request)
        except CursorNotFound:
            raise invalid

        if cursor is not None and cursor.position is not None:
            field = self.model._meta.get_field(self.sort_field)
            try:
                field.to_python(cursor.position)
            except ValidationError:
                raise invalid
        return cursor

    def get_next_token(self):
        """Return the bare cursor value of the next page, or None."""
        link = self.get_next_link()
        if not link:
            return None
        query = parse.parse_qs(parse.urlsplit(link).query)
        return query[self.cursor_query_param][0]

    def get_meta(self):
        return {
            'nextPageToken': self.get_next_token(),
            'limit': self.page_size,
            'hasMore': self.has_next,
        }
