# -*- coding: utf-8 -*-
"""Human readable tracking output.

Blocks are written with rich console markup, one block per tracking number,
in the order the numbers were asked for. Every value coming from the API is
escaped, so a stray '[' can't be taken for markup.
"""
import datetime
import enum
import json
from typing import Optional, Sequence

from rich.markup import escape

from suivi_poste.modules.tracker import codes
from suivi_poste.modules.tracker.models import (
	Failure,
	Malformed,
	Shipment,
	Success,
	TrackingBatch,
	TrackingResult,
)


__all__ = ('Mode', 'SEPARATOR', 'format_results', 'format_result', 'format_date', 'help_url')


SEPARATOR = '\n_______________________\n'

DEFAULT_ERROR_MESSAGE = 'Numéro inconnu.'

_HELP_URL = 'https://www.laposte.fr/outils/suivre-vos-envois?code={}'

_LABEL_WIDTH = 29

# Last lifecycle step, see codes.EVENTS.
_LAST_STEP = 5


class Mode(str, enum.Enum):
	RAW = 'raw'
	BASIC = 'basic'
	FULL = 'full'


def help_url(tracking_number: str) -> str:
	return _HELP_URL.format(tracking_number)


def format_date(date: datetime.datetime, mode: Mode = Mode.BASIC, tz: Optional[datetime.tzinfo] = None) -> str:
	"""`YYYY-MM-DD HH:MM:SS` in basic mode, `Le DD/MM/YYYY à HHhMM` in full mode.

	Aware dates are shown in `tz`, local time by default.
	"""
	if date.tzinfo is not None:
		date = date.astimezone(tz)
	if mode is Mode.FULL:
		return date.strftime('Le %d/%m/%Y à %Hh%M')
	return date.strftime('%Y-%m-%d %H:%M:%S')


def _line(label: str, value: str, style: str = 'bright_blue') -> str:
	"""`value` must be escaped already."""
	return f'[{style}]{escape(label.ljust(_LABEL_WIDTH))}: [/{style}]{value}'


def _detail(label: str, value: str) -> str:
	return _line(label, value, style='grey62')


def _format_failure(tracking_number: str, failure: Failure) -> str:
	message = failure.return_message or DEFAULT_ERROR_MESSAGE
	return '\n'.join((
		_line('Numéro de suivi', f'[red]{escape(tracking_number)}[/red] 👎'),
		f'[grey62]{escape(message)}[/grey62]',
		f'👉 [bright_cyan]Essayez sur le site: {escape(help_url(tracking_number))}[/bright_cyan]'
	))


def _format_malformed(tracking_number: str, malformed: Malformed) -> str:
	payload = json.dumps(malformed.payload, ensure_ascii=False, indent=2)
	return '\n'.join((
		_line('Numéro de suivi', f'[yellow]{escape(tracking_number)}[/yellow]'),
		'[yellow]Réponse inattendue de l\'API :[/yellow]',
		escape(payload)
	))


def _format_context(shipment: Shipment) -> list[str]:
	lines = []
	context = shipment.context_data
	if context is not None:
		point = context.removal_point
		if point is not None and point.name:
			name = f'{point.type} {point.name}' if point.type else point.name
			lines.append(_detail('Point de retrait', escape(name)))
		if context.origin_country:
			lines.append(_detail('Pays d\'origine', escape(context.origin_country)))
		if context.arrival_country:
			lines.append(_detail('Pays de destination', escape(context.arrival_country)))
		if context.delivery_choice:
			choice = codes.delivery_choice_label(context.delivery_choice)
			if choice:
				lines.append(_detail('Modification de livraison', escape(choice)))
		partner = context.partner
		if partner is not None:
			parts = [part for part in (partner.name, partner.network, partner.reference) if part]
			if parts:
				lines.append(_detail('Informations sur poste internationale', escape(' - '.join(parts))))

	if shipment.url:
		lines.append(_detail('URL de suivi', escape(shipment.url)))

	return lines


def _format_events(shipment: Shipment, mode: Mode, tz: Optional[datetime.tzinfo]) -> list[str]:
	lines = []
	for event in shipment.events_newest_first():
		message = escape(codes.event_message(event.code, event.label))
		if event.date is not None:
			lines.append(f'[yellow]{format_date(event.date, mode, tz)}[/yellow] - {message}')
		else:
			lines.append(message)
	return lines


def _format_success(success: Success, mode: Mode, tz: Optional[datetime.tzinfo]) -> str:
	shipment = success.shipment
	lines = [_line('Numéro de suivi', f'[green]{escape(shipment.id_ship)}[/green] 👍')]

	if shipment.is_final:
		lines.append(_line('Finalisé', '✔️'))
	if shipment.entry_date is not None:
		lines.append(_line('Date de prise en charge', format_date(shipment.entry_date, mode, tz)))
	if shipment.delivery_date is not None:
		lines.append(_line('Date de livraison', format_date(shipment.delivery_date, mode, tz)))
	if shipment.product:
		product = shipment.product[0].upper() + shipment.product[1:]
		lines.append(_detail('Dénomination du produit', escape(product)))
	if shipment.holder:
		lines.append(_detail('Métier en charge de l\'objet', escape(codes.holder_label(shipment.holder))))

	if mode is Mode.FULL:
		lines.extend(_format_context(shipment))
		steps = [codes.event_step(event.code) for event in shipment.events_newest_first()]
		steps = [step for step in steps if step is not None]
		if steps:
			lines.append(_detail('Étape', f'{steps[0]}/{_LAST_STEP}'))

	events = _format_events(shipment, mode, tz)
	if events:
		lines.append('')
		lines.extend(events)

	return '\n'.join(lines)


def format_result(
	tracking_number: str,
	result: TrackingResult,
	mode: Mode = Mode.BASIC,
	tz: Optional[datetime.tzinfo] = None
) -> str:
	"""One block for one tracking number."""
	if isinstance(result, Success):
		return _format_success(result, mode, tz)
	if isinstance(result, Failure):
		return _format_failure(tracking_number, result)
	return _format_malformed(tracking_number, result)


def format_results(
	batch: TrackingBatch,
	tracking_numbers: Sequence[str],
	mode: Mode = Mode.BASIC,
	tz: Optional[datetime.tzinfo] = None
) -> str:
	"""Whole output for `tracking_numbers`, in that order.

	Raw mode is the untouched API answer.
	"""
	mode = Mode(mode)
	if mode is Mode.RAW:
		return batch.text

	return SEPARATOR.join(
		format_result(tracking_number, result, mode, tz)
		for tracking_number, result in zip(tracking_numbers, batch.in_order(tracking_numbers))
	)
