# -*- coding: utf-8 -*-
"""Tests for configuration from environment variables."""
import pytest

from suivi_poste.environs import env
from suivi_poste.environs.env import Config


def test_defaults():
	config = Config.from_environ({})

	assert config.api_key is None
	assert config.port == env.DEFAULT_PORT
	assert config.proxy_mode is False
	assert config.test_mode is False
	assert config.api_url == env.API_URL
	assert config.rate_limit_max == 50
	assert config.rate_limit_window == 15 * 60
	assert config.cli_relay_url == env.RELAY_URL


def test_relay_variables():
	config = Config.from_environ({
		'API_KEY': 'secret',
		'SERVER_PORT': '8080',
		'SUIVI_POSTE_PROXY': 'true',
		'RATE_LIMIT_MAX': '10',
		'RATE_LIMIT_WINDOW': '60',
		'TRUST_PROXY': '0'
	})

	assert config.api_key == 'secret'
	assert config.port == 8080
	assert config.proxy_mode is True
	assert config.rate_limit_max == 10
	assert config.rate_limit_window == 60
	assert config.trust_proxy is False


@pytest.mark.parametrize('variables', [{'SUIVI_POSTE_TEST': '1'}, {'NODE_ENV': 'test'}])
def test_test_mode_uses_local_relay(variables):
	config = Config.from_environ(variables)

	assert config.test_mode is True
	assert config.cli_relay_url == env.TEST_URL


def test_overrides_win():
	config = Config.from_environ({'SUIVI_POSTE_PROXY': '0'}, proxy_mode=True)

	assert config.proxy_mode is True


def test_user_agent():
	assert Config(version='2.0.0').user_agent == 'suivi-poste/2.0.0'
	assert Config(version='2.0.0', proxy_mode=True).user_agent == (
		'suivi-poste/2.0.0 - call through suivi-poste relay server'
	)


def test_version_file_in_source_checkout(tmp_path):
	version_file = tmp_path / 'VERSION'
	version_file.write_text('3.1.4\n')
	not_installed = 'suivi-poste-not-installed'

	assert env.read_version(str(version_file), distribution=not_installed) == '3.1.4'
	assert env.read_version(str(tmp_path / 'missing'), distribution=not_installed) == '0.0.0'


def test_installed_version_wins(tmp_path, monkeypatch):
	monkeypatch.setattr(env.importlib.metadata, 'version', lambda distribution: '2.7.1')

	# No VERSION file next to an installed package.
	assert env.read_version(str(tmp_path / 'missing')) == '2.7.1'
	assert Config.from_environ({}).user_agent == 'suivi-poste/2.7.1'


@pytest.mark.parametrize('name', ['SUIVI_POSTE_PROXY', 'SUIVI_POSTE_TEST', 'TRUST_PROXY'])
def test_invalid_flag(name):
	with pytest.raises(env.ConfigError) as exc_info:
		Config.from_environ({name: 'y'})

	assert name in str(exc_info.value)
	assert "'y'" in str(exc_info.value)


@pytest.mark.parametrize('name', ['SERVER_PORT', 'RATE_LIMIT_MAX', 'RATE_LIMIT_WINDOW', 'HTTP_MAX_CLIENTS'])
def test_invalid_number(name):
	with pytest.raises(env.ConfigError, match=name):
		Config.from_environ({name: 'lots'})
