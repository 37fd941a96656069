# -*- coding: utf-8 -*-
"""Common module for all handlers in suivi_poste.api, providing a BaseHandler
class that all handlers should inherit from as well as ApplicationError class.
"""
import json
import math
from typing import Optional, Union

import tornado.web
import voluptuous as vlps


__all__ = ('ApplicationError', 'BaseHandler', 'RATE_LIMIT_MESSAGE')


RATE_LIMIT_MESSAGE = (
	'You have reached your `suivi-poste` rate limit (max {max_requests} calls/{minutes} minutes). '
	'Wait some time.'
)


class ApplicationError(tornado.web.HTTPError):
	"""An override of a standard tornado HTTPError class for custom handling.

	`body` - JSON body to send as is, `{"error": message}` by default.
	"""

	def __init__(self, status_code: int, message: str, *args, body: Optional[Union[dict, list]] = None, **kwargs):
		self.message = message
		self.body = body
		super().__init__(status_code, *args, **kwargs)


# pylint: disable=abstract-method
class BaseHandler(tornado.web.RequestHandler):
	"""Base API class for all endpoints.

	Inherit from this if you want to create a new handler.
	Every request counts against the rate limit of its client address.
	"""
	def set_default_headers(self):
		self.set_header('Access-Control-Allow-Origin', '*')
		self.set_header('Access-Control-Allow-Credentials', 'true')
		self.set_header('Access-Control-Allow-Methods', 'GET, OPTIONS')
		self.set_header(
			'Access-Control-Allow-Headers',
			'Content-Type, Accept-Version, Authorization, CrossDomain, WithCredentials'
		)

	def prepare(self):
		# remote_ip already honors X-Forwarded-For/X-Real-Ip if server
		# was started with xheaders.
		limiter = self.application.rate_limiter
		state = limiter.hit(self.request.remote_ip)

		self.set_header('X-RateLimit-Limit', state.limit)
		self.set_header('X-RateLimit-Remaining', state.remaining)

		if not state.allowed:
			# Not raised: send_error() would reset our headers.
			self.set_header('Retry-After', math.ceil(state.reset_after))
			self.set_status(429)
			self.finish({'error': RATE_LIMIT_MESSAGE.format(
				max_requests=limiter.max_requests,
				minutes=round(limiter.window / 60)
			)})

	def options(self, *args, **kwargs):  # pylint: disable=arguments-differ
		"""All OPTIONS requests are ignored with silent OK by default."""
		self.finish()

	def write(self, chunk):
		"""Overload of Tornado RequestHandler.write().

		Implemented for compact JSON of dicts and lists (tornado refuses
		the latter).
		"""
		if isinstance(chunk, (dict, list)):
			chunk = json.dumps(chunk, ensure_ascii=False, separators=(',', ':')).replace("</", "<\\/")
			self.set_header("Content-Type", "application/json; charset=UTF-8")

		super().write(chunk)

	def write_json_raw(self, raw: bytes, status_code: int = 200):
		"""Send already serialized JSON untouched, byte for byte."""
		self.set_status(status_code)
		self.set_header("Content-Type", "application/json; charset=UTF-8")
		self.finish(raw)

	def write_error(self, status_code, **kwargs):  # pylint: disable=arguments-differ
		"""Send error response to client based on HTTPError-derived exception.

		NOTE:
		This should not be called directly.

		Allows to easily report errors via ApplicationError, specifying desired
		code and body. Tornado catches all exceptions and feeds them here;
		anything but ApplicationError ends as a bare message, never a traceback.
		"""
		message = self._reason
		body = None
		try:
			error = kwargs["exc_info"][1]
		except (KeyError, IndexError):
			error = None
		if isinstance(error, ApplicationError):
			message = error.message
			body = error.body

		self.set_status(status_code)
		self.finish(body if body is not None else {'error': message})

	def validate(
		self,
		schema: vlps.Schema,
		data,
		http_error_code: int = 400,
		custom_message: str = None,
		message_key: str = 'error'
	):
		"""Validates `data` according to Voluptuous `schema`.

		`data` will be checked for compliance with the `schema`. New constructed
		object will be returned. `schema` may contain transform instructions, so
		the returned object may be different from the original `data`.

		In case of validation error ApplicationError with given error_code
		will be raised with given message or validator message by default,
		sent as `{message_key: message}`.
		"""
		if not isinstance(http_error_code, int):
			raise TypeError("http_error_code should be integer")

		# Validate HTTP error code
		if http_error_code < 400 or http_error_code >= 600:
			raise ValueError("http_error_code should be in range [400, 600)")

		try:
			data = schema(data)
		except vlps.Error as e:
			message = str(e) if custom_message is None else custom_message
			raise ApplicationError(
				status_code=http_error_code,
				message=message,
				body={message_key: message}
			) from e

		# Validated data
		return data
