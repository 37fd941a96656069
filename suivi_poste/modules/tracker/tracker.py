# -*- coding: utf-8 -*-
"""Low-level module for tracking info.

Turns La Poste answers (object or array, success or error, JSON or not) into
a `TrackingBatch`, so nothing downstream has to care about their shape.
"""
import asyncio
import datetime
import logging
from typing import Any, Optional, Sequence

import voluptuous as vlps

from suivi_poste.environs.env import Config
from suivi_poste.modules.tracker.carriers import laposte
from suivi_poste.modules.tracker.carriers.laposte import LaPosteTrackingError
from suivi_poste.modules.tracker.models import (
	ContextData,
	Event,
	Failure,
	Malformed,
	Partner,
	RemovalPoint,
	Shipment,
	Success,
	TrackingBatch,
	TrackingResult,
)
from suivi_poste.validation.tracker import RESULT_SCHEMA, SHIPMENT_SCHEMA


logger = logging.getLogger(__name__)


def parse_date(value: Optional[str]) -> Optional[datetime.datetime]:
	"""ISO 8601 date from the API, None if absent or unreadable."""
	if not value:
		return None
	# fromisoformat() knows 'Z' only since 3.11.
	if value.endswith('Z'):
		value = value[:-1] + '+00:00'
	try:
		return datetime.datetime.fromisoformat(value)
	except ValueError:
		logger.warning('Unreadable date %r', value)
		return None


def _context_data(data: Optional[dict]) -> Optional[ContextData]:
	if not data:
		return None

	removal_point = data.get('removalPoint')
	delivery_choice = data.get('deliveryChoice') or {}
	partner = data.get('partner')

	return ContextData(
		removal_point=RemovalPoint(**removal_point) if removal_point else None,
		origin_country=data.get('originCountry'),
		arrival_country=data.get('arrivalCountry'),
		delivery_choice=delivery_choice.get('deliveryChoice'),
		partner=Partner(**partner) if partner else None
	)


def parse_shipment(data: dict) -> Shipment:
	"""Build Shipment from the `shipment` part of an answer.

	vlps.Invalid will be raised if mandatory data is missing.
	"""
	data = SHIPMENT_SCHEMA(data)

	return Shipment(
		id_ship=data['idShip'],
		is_final=bool(data.get('isFinal')),
		entry_date=parse_date(data.get('entryDate')),
		delivery_date=parse_date(data.get('deliveryDate')),
		product=data.get('product'),
		holder=data.get('holder'),
		url=data.get('url'),
		context_data=_context_data(data.get('contextData')),
		events=tuple(
			Event(code=event['code'], label=event.get('label'), date=parse_date(event.get('date')))
			for event in data.get('event') or ()
		)
	)


def _guess_id(item: Any) -> Optional[str]:
	if not isinstance(item, dict):
		return None
	id_ship = item.get('idShip')
	if id_ship is None and isinstance(item.get('shipment'), dict):
		id_ship = item['shipment'].get('idShip')
	return str(id_ship) if id_ship is not None else None


def parse_result(item: Any) -> TrackingResult:
	"""One item of an answer to Success, Failure or Malformed."""
	try:
		result = RESULT_SCHEMA(item)
	except vlps.Invalid as e:
		logger.warning('Invalid tracking item: %s', e)
		return Malformed(id_ship=_guess_id(item), payload=item)

	return_code = result.get('returnCode')
	if return_code is not None and not 200 <= return_code < 300:
		return Failure(
			id_ship=_guess_id(item),
			return_code=return_code,
			return_message=result.get('returnMessage')
		)

	if result.get('shipment'):
		try:
			return Success(parse_shipment(result['shipment']))
		except vlps.Invalid as e:
			logger.warning('Invalid shipment for %s: %s', _guess_id(item), e)

	return Malformed(id_ship=_guess_id(item), payload=item)


def resolve_batch(data: Any, text: str = '', raw: Optional[bytes] = None) -> TrackingBatch:
	"""Resolve object-or-array answer once and for all.

	`raw` - untouched body, encoded `text` by default.
	"""
	if raw is None:
		raw = text.encode('utf-8')
	if isinstance(data, list):
		return TrackingBatch(single=False, items=tuple(parse_result(item) for item in data), text=text, raw=raw)

	return TrackingBatch(single=True, items=(parse_result(data),), text=text, raw=raw)


def batch_from_error(error: LaPosteTrackingError, tracking_numbers: Sequence[str]) -> TrackingBatch:
	"""Per-number failures from a failed request.

	Error bodies about specific numbers are kept as is, anything else
	(network error, relay error, bad key...) applies to every number asked.
	"""
	text = error.text or ''
	raw = error.raw or b''
	body = error.body

	if isinstance(body, list) or (isinstance(body, dict) and 'idShip' in body):
		return resolve_batch(body, text, raw)

	message = error.message
	if isinstance(body, dict):
		message = body.get('returnMessage') or body.get('error') or body.get('message') or message

	return TrackingBatch(
		single=len(tracking_numbers) == 1,
		items=tuple(
			Failure(id_ship=tracking_number, return_code=error.status_code, return_message=message)
			for tracking_number in tracking_numbers
		),
		text=text,
		raw=raw
	)


async def get_tracking_info(
	tracking_numbers: Sequence[str],
	api_key: str,
	config: Config,
	endpoint: Optional[str] = None
) -> TrackingBatch:
	"""Tracking info straight from the API, errors included in the batch."""
	try:
		response = await laposte.get_tracking_info(tracking_numbers, api_key, config, url=endpoint)
	except LaPosteTrackingError as e:
		return batch_from_error(e, tracking_numbers)

	return resolve_batch(response.data, response.text, response.raw)


async def get_relayed_tracking_info(
	tracking_number: str,
	config: Config,
	endpoint: Optional[str] = None
) -> TrackingBatch:
	"""Tracking info for one number through the relay, errors included."""
	try:
		response = await laposte.get_relayed_tracking_info(tracking_number, config, url=endpoint)
	except LaPosteTrackingError as e:
		return batch_from_error(e, [tracking_number])

	return resolve_batch(response.data, response.text, response.raw)


async def fetch_tracking(
	tracking_numbers: Sequence[str],
	config: Config,
	api_key: Optional[str] = None,
	endpoint: Optional[str] = None
) -> TrackingBatch:
	"""Get tracking info for all numbers.

	With an API key (given or from config) the API is called directly with
	all numbers at once, otherwise the relay is called once per number.
	`endpoint` - replaces the API (or relay) base URL.
	"""
	api_key = api_key or config.api_key
	if api_key:
		return await get_tracking_info(tracking_numbers, api_key, config, endpoint=endpoint)

	batches = await asyncio.gather(*(
		get_relayed_tracking_info(tracking_number, config, endpoint=endpoint)
		for tracking_number in tracking_numbers
	))

	return TrackingBatch(
		single=len(batches) == 1 and batches[0].single,
		items=tuple(item for batch in batches for item in batch.items),
		text='\n'.join(batch.text for batch in batches),
		raw=b'\n'.join(batch.raw for batch in batches)
	)


async def main():
	"""For local manual testing."""
	batch = await fetch_tracking(['4P36275770836'], Config.from_environ())
	print(batch)


if __name__ == '__main__':
	asyncio.run(main())
