# -*- coding: utf-8 -*-
"""Tracking results, already detached from the API JSON layout.
"""
import dataclasses
import datetime
from typing import Any, Optional, Sequence, Union


@dataclasses.dataclass(frozen=True)
class Event:
	code: str
	label: Optional[str] = None
	date: Optional[datetime.datetime] = None


@dataclasses.dataclass(frozen=True)
class RemovalPoint:
	type: Optional[str] = None
	name: Optional[str] = None


@dataclasses.dataclass(frozen=True)
class Partner:
	name: Optional[str] = None
	network: Optional[str] = None
	reference: Optional[str] = None


@dataclasses.dataclass(frozen=True)
class ContextData:
	removal_point: Optional[RemovalPoint] = None
	origin_country: Optional[str] = None
	arrival_country: Optional[str] = None
	delivery_choice: Optional[str] = None
	partner: Optional[Partner] = None


@dataclasses.dataclass(frozen=True)
class Shipment:
	id_ship: str
	is_final: bool = False
	entry_date: Optional[datetime.datetime] = None
	delivery_date: Optional[datetime.datetime] = None
	product: Optional[str] = None
	holder: Optional[str] = None
	url: Optional[str] = None
	context_data: Optional[ContextData] = None
	# As received; see `events_newest_first`.
	events: tuple[Event, ...] = ()

	def events_newest_first(self) -> list[Event]:
		"""Events sorted by date, newest first, undated ones last."""
		dated = [event for event in self.events if event.date is not None]
		undated = [event for event in self.events if event.date is None]
		# Aware and naive datetimes can't be compared.
		dated.sort(key=lambda event: event.date.timestamp(), reverse=True)
		return dated + undated


@dataclasses.dataclass(frozen=True)
class Success:
	shipment: Shipment

	@property
	def id_ship(self) -> str:
		return self.shipment.id_ship


@dataclasses.dataclass(frozen=True)
class Failure:
	id_ship: str
	# None for network errors: there was no answer to take a code from.
	return_code: Optional[int] = None
	return_message: Optional[str] = None


@dataclasses.dataclass(frozen=True)
class Malformed:
	"""Item with neither shipment data nor an error."""
	id_ship: Optional[str]
	payload: Any


TrackingResult = Union[Success, Failure, Malformed]


@dataclasses.dataclass(frozen=True)
class TrackingBatch:
	"""What the API answered, whatever shape it chose.

	`single` - API answered with an object rather than an array.
	`items` - one result per item of the answer, in the API order.
	`text` - response body(ies) as text.
	`raw` - untouched response body(ies), byte for byte.
	"""
	single: bool
	items: tuple[TrackingResult, ...]
	text: str = ''
	raw: bytes = b''

	def in_order(self, tracking_numbers: Sequence[str]) -> list[TrackingResult]:
		"""Exactly one result per requested number, in the requested order.

		Items without any identifier go, in the API order, to the numbers
		nothing else matched. Numbers still left get a failure without message.
		"""
		if len(tracking_numbers) == 1 and len(self.items) == 1:
			return [self.items[0]]

		by_id = {}
		anonymous = []
		for item in self.items:
			if item.id_ship is not None:
				by_id.setdefault(item.id_ship.upper(), item)
			else:
				anonymous.append(item)

		anonymous = iter(anonymous)
		results = []
		for tracking_number in tracking_numbers:
			result = by_id.get(tracking_number.upper())
			if result is None:
				result = next(anonymous, None) or Failure(id_ship=tracking_number)
			results.append(result)
		return results
