#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Main module of the relay server, executable.

A simple server that lets users query tracking data without registering for
an API key; it also hides their IP address from La Poste.
Needs API_KEY, either in the environment or in a .env file.
"""
import asyncio
import logging
from typing import Optional

from dotenv import load_dotenv
from tornado.httpclient import AsyncHTTPClient
from tornado.options import define, options, parse_command_line
import tornado.web

from suivi_poste import api
from suivi_poste.environs.env import Config, ConfigError
from suivi_poste.rate_limit import FixedWindowRateLimiter


logger = logging.getLogger('suivi_poste.relay')

define("port", default=None, help="run on the given port (SERVER_PORT by default)", type=int)

# pylint: disable=bad-whitespace
handlers = [
	(r"/([^/]*)",                                   api.tracker.TrackerHandler),
]
# pylint: enable=bad-whitespace


class Application(tornado.web.Application):
	"""Main application class."""
	def __init__(self, config: Config, rate_limiter: Optional[FixedWindowRateLimiter] = None, **settings):
		self.config = config
		self.version = config.version
		self.rate_limiter = rate_limiter or FixedWindowRateLimiter(
			max_requests=config.rate_limit_max,
			window=config.rate_limit_window
		)

		settings.setdefault('compress_response', True)
		super(Application, self).__init__(handlers, **settings)


async def main():
	"""Main function of the program."""
	load_dotenv()
	parse_command_line()

	# Tell the client it's the relay doing the query.
	overrides = {'proxy_mode': True}
	if options.port is not None:
		overrides['port'] = options.port
	try:
		config = Config.from_environ(**overrides)
	except ConfigError as e:
		raise SystemExit(str(e)) from None
	if not config.api_key:
		raise SystemExit('API_KEY is required to run the relay server')

	# Don't let unrelated lookups wait for each other.
	AsyncHTTPClient.configure(None, max_clients=config.http_max_clients)

	server = Application(config)
	# Trust the reverse proxy in front of us for client addresses.
	server.listen(config.port, xheaders=config.trust_proxy)
	logger.info('Server is listening on http://localhost:%d', config.port)

	await asyncio.Event().wait()


if __name__ == "__main__":
	asyncio.run(main())
