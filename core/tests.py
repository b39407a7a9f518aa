"""
Tests for lenient numeric parsing of free-text quantities and field sizes,
and for the database settings read from the environment.
"""
import importlib

import pytest
from decimal import Decimal

from core.parsing import parse_decimal, parse_number


class TestParseNumber:

    @pytest.mark.parametrize('value, expected', [
        ('10 kg', 10.0),
        ('2.5 acres', 2.5),
        ('  7', 7.0),
        ('.5 ha', 0.5),
        ('1e2 crates', 100.0),
        (12, 12.0),
        (Decimal('3.25'), 3.25),
    ])
    def test_reads_leading_number(self, value, expected):
        assert parse_number(value) == expected

    @pytest.mark.parametrize('value', [None, '', 'about 3 acres', 'kg', True, 'nan', float('inf')])
    def test_unparsable_is_zero(self, value):
        assert parse_number(value) == 0.0

    def test_lenient_prefix_parsing(self):
        """Only the leading token counts, so '10-12 kg' reads as 10."""
        assert parse_number('10-12 kg') == 10.0
        assert parse_number('3,500 kg') == 3.0


class TestParseDecimal:

    def test_exact_decimal(self):
        assert parse_decimal('0.1 kg') == Decimal('0.1')

    def test_unparsable_is_zero(self):
        assert parse_decimal('a few') == Decimal('0')
        assert parse_decimal(None) == Decimal('0')


class TestDatabaseEngineSetting:

    @pytest.fixture
    def reload_settings(self, monkeypatch):
        import core.settings as project_settings

        def _reload(engine):
            monkeypatch.setenv('DB_ENGINE', engine)
            return importlib.reload(project_settings)

        yield _reload
        monkeypatch.delenv('DB_ENGINE', raising=False)
        importlib.reload(project_settings)

    @pytest.mark.parametrize('engine, expected', [
        ('postgresql', 'django.db.backends.postgresql'),
        ('django.db.backends.postgresql', 'django.db.backends.postgresql'),
        ('sqlite3', 'django.db.backends.sqlite3'),
    ])
    def test_short_and_full_engine_names(self, reload_settings, engine, expected):
        project_settings = reload_settings(engine)

        assert project_settings.DATABASES['default']['ENGINE'] == expected

    def test_postgresql_reads_connection_details(self, reload_settings, monkeypatch):
        monkeypatch.setenv('DB_NAME', 'fields')

        project_settings = reload_settings('postgresql')

        assert project_settings.DATABASES['default']['NAME'] == 'fields'
        assert 'HOST' in project_settings.DATABASES['default']
