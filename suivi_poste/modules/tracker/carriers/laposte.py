# -*- coding: utf-8 -*-
"""Handles La Poste "suivi" tracking API (v2).

Get an API key at https://developer.laposte.fr/products/suivi/latest

Two ways in:
 - directly, with an API key: several tracking numbers are joined into one
   request and the API answers with an object (one number) or an array;
 - through the relay server, without a key: one number per request, the
   relay answers with whatever the API answered.

Known quirk: for an unknown tracking number the API answers 404 without any
JSON. Such answers are turned into the regular "unknown number" error body,
so callers never have to care about it.

Test numbers from the API documentation:
4P36275770836
6T11111111110
114111111111111
"""
import asyncio
import dataclasses
import json
import logging
from typing import Optional, Sequence, Union
import urllib.parse

from tornado.httpclient import AsyncHTTPClient, HTTPRequest, HTTPResponse, HTTPError

from suivi_poste.environs.env import Config
from suivi_poste.modules.tracker.carriers.common import CarrierTrackingError


logger = logging.getLogger(__name__)

JSON_T = Union[dict, list]

UNKNOWN_NUMBER_CODE = 400
UNKNOWN_NUMBER_MESSAGE = 'Votre numéro est inconnu. Veuillez le ressaisir en respectant le format.'

NETWORK_ERROR_MESSAGE = 'Can\'t get info from La Poste'


class LaPosteTrackingError(CarrierTrackingError):
	"""Request to the tracking API (or the relay) did not succeed.

	`status_code` - HTTP status to report, None if we never got a usable answer.
	`body` - parsed JSON error body, None if there is none.
	`text` - response body as text, None if there was no response.
	`raw` - untouched response body, None if there was no response.
	"""

	def __init__(
		self,
		message: str,
		status_code: Optional[int] = None,
		body: Optional[JSON_T] = None,
		text: Optional[str] = None,
		raw: Optional[bytes] = None
	):
		super().__init__(message)
		self.message = message
		self.status_code = status_code
		self.body = body
		self.text = text
		self.raw = raw


@dataclasses.dataclass(frozen=True)
class UpstreamResponse:
	status_code: int
	# Decoded body, for parsing and logs.
	text: str
	data: JSON_T
	# Untouched body, for raw output.
	raw: bytes = b''


def unknown_number_body(tracking_numbers: Sequence[str], lang: str = 'fr_FR') -> JSON_T:
	"""Error body the API should have sent for unknown number(s)."""
	bodies = [
		{
			'returnCode': UNKNOWN_NUMBER_CODE,
			'returnMessage': UNKNOWN_NUMBER_MESSAGE,
			'lang': lang,
			'scope': 'open',
			'idShip': tracking_number
		}
		for tracking_number in tracking_numbers
	]
	return bodies if len(bodies) > 1 else bodies[0]


def _is_json(response: HTTPResponse) -> bool:
	content_type = response.headers.get('Content-Type', '')
	return content_type.split(';')[0].strip().lower() == 'application/json'


def _error_message(data: JSON_T, default: str) -> str:
	if isinstance(data, dict):
		return data.get('returnMessage') or data.get('error') or default
	return default


async def _make_request(
	url: str,
	headers: dict[str, str],
	tracking_numbers: Sequence[str],
	lang: str
) -> UpstreamResponse:
	"""Makes GET request, returns parsed JSON along with the raw body.

	`tracking_numbers` - numbers asked for, used to synthesize the unknown
	number error.

	LaPosteTrackingError will be raised for anything but a 2xx JSON answer.
	"""
	http_client = AsyncHTTPClient()
	request = HTTPRequest(url=url, method='GET', headers=headers)

	try:
		# Non-2xx answers still carry a body we want to read.
		response = await http_client.fetch(request, raise_error=False)
	except (HTTPError, OSError) as e:
		logger.warning('Request to %s failed: %s', url, e)
		raise LaPosteTrackingError(NETWORK_ERROR_MESSAGE) from e

	raw = response.body or b''
	text = raw.decode('utf-8', errors='replace')

	if not _is_json(response):
		logger.warning('Non-JSON answer (%d) for %s', response.code, ','.join(tracking_numbers))
		raise LaPosteTrackingError(
			UNKNOWN_NUMBER_MESSAGE,
			status_code=UNKNOWN_NUMBER_CODE,
			body=unknown_number_body(tracking_numbers, lang),
			text=text,
			raw=raw
		)

	try:
		data = json.loads(text)
	except ValueError as e:
		logger.warning('Invalid JSON answer (%d) from %s', response.code, url)
		raise LaPosteTrackingError('Invalid response from La Poste', text=text, raw=raw) from e

	if not 200 <= response.code < 300:
		logger.warning('Error answer (%d) for %s', response.code, ','.join(tracking_numbers))
		raise LaPosteTrackingError(
			_error_message(data, response.reason or NETWORK_ERROR_MESSAGE),
			status_code=response.code,
			body=data,
			text=text,
			raw=raw
		)

	return UpstreamResponse(status_code=response.code, text=text, data=data, raw=raw)


async def get_tracking_info(
	tracking_numbers: Sequence[str],
	api_key: str,
	config: Config,
	url: Optional[str] = None
) -> UpstreamResponse:
	"""Get tracking info for all numbers at once, straight from the API.

	`api_key` - La Poste API key (X-Okapi-Key).
	`url` - API base URL, `config.api_url` by default.
	"""
	base_url = (url or config.api_url).rstrip('/')
	idships = ','.join(urllib.parse.quote(number, safe='') for number in tracking_numbers)
	query = urllib.parse.urlencode({'lang': config.lang})

	return await _make_request(
		f'{base_url}/idships/{idships}?{query}',
		headers={
			'Accept': 'application/json',
			'X-Okapi-Key': api_key,
			'User-Agent': config.user_agent
		},
		tracking_numbers=tracking_numbers,
		lang=config.lang
	)


async def get_relayed_tracking_info(
	tracking_number: str,
	config: Config,
	url: Optional[str] = None
) -> UpstreamResponse:
	"""Get tracking info for one number through the relay server.

	`url` - relay base URL, `config.cli_relay_url` by default.
	"""
	base_url = (url or config.cli_relay_url).rstrip('/')

	return await _make_request(
		f'{base_url}/{urllib.parse.quote(tracking_number, safe="")}',
		headers={
			'Accept': 'application/json',
			'User-Agent': config.user_agent
		},
		tracking_numbers=[tracking_number],
		lang=config.lang
	)


async def main():
	"""For local manual testing."""
	config = Config.from_environ()
	response = await get_tracking_info(['4P36275770836'], api_key=config.api_key, config=config)
	print(response.text)


if __name__ == '__main__':
	asyncio.run(main())
