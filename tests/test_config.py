"""Tests for elasticdata.config — defaults, validation and Django overrides."""
from __future__ import annotations

import importlib
import sys
import types

import pytest

from elasticdata import config as config_module
from elasticdata.config import Config
from elasticdata.exceptions import InvalidArgumentError


class TestConfig:
    def test_defaults(self):
        config = Config()
        assert config.host == '127.0.0.1'
        assert config.port == 9200
        assert config.default_query_size == 10
        assert config.max_query_size == 5000
        assert config.max_total_query_size == 5000000
        assert config.retry_on_conflict == 5
        assert config.base_url == 'http://127.0.0.1:9200'

    def test_string_values_are_coerced(self):
        config = Config(port='9201', max_query_size='100', timeout='2.5')
        assert config.port == 9201
        assert config.max_query_size == 100
        assert config.timeout == 2.5

    def test_host_with_port(self):
        config = Config(host='es.local:9300')
        assert config.host == 'es.local'
        assert config.port == 9300

    def test_invalid_scheme(self):
        with pytest.raises(InvalidArgumentError, match="scheme"):
            Config(scheme='ftp')

    def test_invalid_size(self):
        with pytest.raises(InvalidArgumentError):
            Config(max_query_size=0)

    def test_non_integer_size(self):
        with pytest.raises(InvalidArgumentError, match="integer"):
            Config(default_query_size='ten')

    def test_page_larger_than_total(self):
        with pytest.raises(InvalidArgumentError, match="cannot exceed"):
            Config(max_query_size=100, max_total_query_size=10)

    def test_negative_timeout(self):
        with pytest.raises(InvalidArgumentError):
            Config(timeout=0)

    def test_empty_host(self):
        with pytest.raises(InvalidArgumentError):
            Config(host='')

    def test_replace_revalidates(self):
        config = Config()
        assert config.replace(max_query_size=10).max_query_size == 10
        with pytest.raises(InvalidArgumentError):
            config.replace(scheme='gopher')

    def test_from_settings_uses_module_defaults(self):
        config = Config.from_settings()
        assert config.host == config_module.ELASTICSEARCH_HOST.partition(':')[0]

    def test_from_settings_overrides(self):
        config = Config.from_settings(max_query_size=50, host=None)
        assert config.max_query_size == 50

    def test_from_settings_host_with_port_wins(self):
        config = Config.from_settings(host='other:7000')
        assert config.port == 7000

    def test_from_settings_unknown_option(self):
        with pytest.raises(InvalidArgumentError, match="Unknown"):
            Config.from_settings(max_size=1)


class TestDjangoSettings:
    def test_django_settings_override_environment(self):
        """Django settings take precedence over environment variables."""
        saved = {name: sys.modules.get(name) for name in ('django', 'django.conf')}
        django_mod = types.ModuleType('django')
        django_conf = types.ModuleType('django.conf')
        django_conf.settings = types.SimpleNamespace(
            ELASTICSEARCH_HOST='django-host',
            ELASTICSEARCH_PORT=9999,
            ELASTICSEARCH_MAX_QUERY_SIZE=123,
        )
        try:
            sys.modules['django'] = django_mod
            sys.modules['django.conf'] = django_conf
            mod = importlib.reload(config_module)
            assert mod.ELASTICSEARCH_HOST == 'django-host'
            assert mod.ELASTICSEARCH_PORT == 9999
            assert mod.ELASTICSEARCH_MAX_QUERY_SIZE == 123
            assert mod.Config.from_settings().max_query_size == 123
        finally:
            for name, module in saved.items():
                if module is not None:
                    sys.modules[name] = module
                else:
                    sys.modules.pop(name, None)
            importlib.reload(config_module)
