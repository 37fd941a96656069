# -*- coding: utf-8 -*-
"""'Externally' adjustable config vars.

Everything is read once into `Config` at process start, then the instance
is passed around explicitly: nothing here touches the environment at import
time.
"""
import dataclasses
import importlib.metadata
import os.path
from os import environ
from typing import Mapping, Optional


# Installed distribution, for the version.
DISTRIBUTION = 'suivi-poste'

# Relay and tests listen here by default.
DEFAULT_PORT = 42210

API_URL = 'https://api.laposte.fr/suivi/v2'
RELAY_URL = 'https://suivi-poste-proxy.rigwild.dev'
TEST_URL = f'http://localhost:{DEFAULT_PORT}'

# express-rate-limit defaults of the historical relay.
RATE_LIMIT_MAX = 50
RATE_LIMIT_WINDOW = 15 * 60

_VERSION_FILE = os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(
	os.path.realpath(__file__)))), 'VERSION')


class ConfigError(ValueError):
	"""Environment variable with a value we can't use."""

	def __init__(self, name: str, value: str, expected: str):
		super().__init__(f'Invalid value for {name}: {value!r} ({expected} expected)')
		self.name = name
		self.value = value


def _bool(env: Mapping[str, str], name: str, default: bool = False) -> bool:
	"""'1'/'0' like the rest of our envs, 'true'/'false' for compatibility."""
	value = env.get(name)
	if value is None or value == '':
		return default
	normalized = value.strip().lower()
	if normalized in ('1', 'true', 'yes', 'on'):
		return True
	if normalized in ('0', 'false', 'no', 'off'):
		return False
	raise ConfigError(name, value, 'boolean')


def _number(env: Mapping[str, str], name: str, default, type_=int):
	value = env.get(name)
	if not value:
		return default
	try:
		return type_(value)
	except ValueError:
		raise ConfigError(name, value, type_.__name__) from None


def read_version(path: str = _VERSION_FILE, distribution: str = DISTRIBUTION) -> str:
	"""Version of the installed distribution, of the VERSION file otherwise.

	The file is only there in a source checkout.
	"""
	try:
		return importlib.metadata.version(distribution)
	except importlib.metadata.PackageNotFoundError:
		pass

	try:
		with open(path) as file:
			return file.read().strip()
	except OSError:
		return '0.0.0'


@dataclasses.dataclass(frozen=True)
class Config:
	api_key: Optional[str] = None
	port: int = DEFAULT_PORT
	# Are we the relay server doing the query? Only changes the User-Agent.
	proxy_mode: bool = False
	# Send CLI requests to a local relay instead of the public one.
	test_mode: bool = False
	api_url: str = API_URL
	relay_url: str = RELAY_URL
	lang: str = 'fr_FR'
	trust_proxy: bool = True
	rate_limit_max: int = RATE_LIMIT_MAX
	rate_limit_window: float = RATE_LIMIT_WINDOW
	http_max_clients: int = 50
	version: str = '0.0.0'

	@classmethod
	def from_environ(cls, env: Mapping[str, str] = environ, **overrides) -> 'Config':
		"""Build config from environment variables.

		ConfigError will be raised for values that make no sense.

		`overrides` win over the environment, e.g. the relay forces
		`proxy_mode=True`.
		"""
		values = dict(
			api_key=env.get('API_KEY') or None,
			port=_number(env, 'SERVER_PORT', DEFAULT_PORT),
			proxy_mode=_bool(env, 'SUIVI_POSTE_PROXY'),
			test_mode=_bool(env, 'SUIVI_POSTE_TEST') or env.get('NODE_ENV') == 'test',
			api_url=env.get('SUIVI_POSTE_API_URL') or API_URL,
			relay_url=env.get('SUIVI_POSTE_RELAY_URL') or RELAY_URL,
			trust_proxy=_bool(env, 'TRUST_PROXY', default=True),
			rate_limit_max=_number(env, 'RATE_LIMIT_MAX', RATE_LIMIT_MAX),
			rate_limit_window=_number(env, 'RATE_LIMIT_WINDOW', RATE_LIMIT_WINDOW, float),
			http_max_clients=_number(env, 'HTTP_MAX_CLIENTS', 50),
			version=read_version()
		)
		values.update(overrides)
		return cls(**values)

	@property
	def user_agent(self) -> str:
		user_agent = f'suivi-poste/{self.version}'
		if self.proxy_mode:
			user_agent += ' - call through suivi-poste relay server'
		return user_agent

	@property
	def cli_relay_url(self) -> str:
		"""Relay the CLI talks to when it has no API key of its own."""
		return TEST_URL if self.test_mode else self.relay_url
