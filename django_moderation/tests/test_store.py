"""
Tests for store access error translation.
"""
from unittest.mock import MagicMock, patch

from django.db import DatabaseError, IntegrityError, OperationalError
from django.test import TestCase, override_settings

from ..exceptions import NotFound, StoreError, StoreTimeout
from ..models import Story
from ..store import _apply_statement_timeout, is_timeout_error, store_access


class TimeoutDetectionTests(TestCase):

    def test_postgres_statement_timeout(self):
        exc = OperationalError('canceling statement due to statement timeout')
        self.assertTrue(is_timeout_error(exc))

    def test_sqlite_locked(self):
        self.assertTrue(is_timeout_error(OperationalError('database is locked')))

    def test_other_operational_error(self):
        self.assertFalse(is_timeout_error(OperationalError('no such table: foo')))

    def test_non_operational_error(self):
        self.assertFalse(is_timeout_error(IntegrityError('statement timeout')))


class StoreAccessTests(TestCase):

    def test_timeout_becomes_store_timeout(self):
        with self.assertRaises(StoreTimeout) as ctx:
            with store_access('test'):
                raise OperationalError('canceling statement due to statement timeout')
        self.assertEqual(ctx.exception.status_code, 504)
        self.assertEqual(ctx.exception.error, 'timeout')

    def test_database_error_becomes_store_error(self):
        with self.assertRaises(StoreError) as ctx:
            with store_access('test'):
                raise DatabaseError('connection reset')
        self.assertNotIsInstance(ctx.exception, StoreTimeout)
        self.assertEqual(ctx.exception.as_dict()['error'], 'internal_error')

    def test_moderation_errors_pass_through(self):
        with self.assertRaises(NotFound):
            with store_access('test'):
                raise NotFound()

    def test_block_is_rolled_back_on_error(self):
        with self.assertRaises(NotFound):
            with store_access('test'):
                Story.objects.create(title='Rolled back', content='x')
                raise NotFound()
        self.assertFalse(Story.objects.filter(title='Rolled back').exists())


class StatementTimeoutTests(TestCase):

    @patch('django_moderation.store.connection')
    def test_sets_local_timeout_on_postgres(self, mock_connection):
        mock_connection.vendor = 'postgresql'
        _apply_statement_timeout()
        cursor = mock_connection.cursor.return_value.__enter__.return_value
        cursor.execute.assert_called_once_with('SET LOCAL statement_timeout = 5000')

    @patch('django_moderation.store.connection')
    def test_skipped_on_other_backends(self, mock_connection):
        mock_connection.vendor = 'sqlite'
        _apply_statement_timeout()
        mock_connection.cursor.assert_not_called()

    @override_settings(DJANGO_MODERATION_CONFIG={'STORE_TIMEOUT_MS': None})
    def test_disabled_timeout(self):
        mock_connection = MagicMock(vendor='postgresql')
        with patch('django_moderation.store.connection', mock_connection):
            _apply_statement_timeout()
        mock_connection.cursor.assert_not_called()
