# -*- coding: utf-8 -*-
"""Tests for human readable output."""
import datetime
import itertools
import json

import pytest
from rich.text import Text

from suivi_poste.formatter import SEPARATOR, Mode, format_date, format_results, help_url
from suivi_poste.modules.tracker.carriers.laposte import UNKNOWN_NUMBER_MESSAGE, unknown_number_body
from suivi_poste.modules.tracker.models import Failure, TrackingBatch
from suivi_poste.modules.tracker.tracker import resolve_batch

from tests.fake_laposte import DELIVERED, EMPTY, IN_TRANSIT, MINIMAL, shipment_payload


UTC = datetime.timezone.utc


def plain(markup: str) -> str:
	return Text.from_markup(markup).plain


def render(data, numbers, mode=Mode.BASIC) -> str:
	return plain(format_results(resolve_batch(data, json.dumps(data)), numbers, mode, tz=UTC))


def test_delivered_example():
	data = {
		'returnCode': 200,
		'idShip': DELIVERED,
		'shipment': {
			'idShip': DELIVERED,
			'event': [{'code': 'DI1', 'date': '2021-01-01T10:00:00Z'}]
		}
	}

	output = render(data, [DELIVERED])

	assert DELIVERED in output
	assert '2021-01-01 10:00:00 - Distribué' in output
	assert 'Numéro inconnu' not in output
	assert 'Essayez sur le site' not in output


def test_unknown_number_example():
	output = render(unknown_number_body(['BADCODE']), ['BADCODE'])

	assert 'BADCODE' in output
	assert UNKNOWN_NUMBER_MESSAGE in output
	assert help_url('BADCODE') in output


def test_failure_without_message():
	batch = TrackingBatch(single=True, items=(Failure(id_ship='XX'),))

	output = plain(format_results(batch, ['XX']))

	assert 'Numéro inconnu.' in output


@pytest.mark.parametrize('numbers', list(itertools.permutations([DELIVERED, IN_TRANSIT, MINIMAL])))
def test_blocks_follow_input_order(numbers):
	# API order is always the same one.
	data = [shipment_payload(DELIVERED), shipment_payload(IN_TRANSIT), shipment_payload(MINIMAL)]

	blocks = render(data, list(numbers)).split(SEPARATOR)

	assert len(blocks) == 3
	for number, block in zip(numbers, blocks):
		assert number in block.splitlines()[0]


def test_one_invalid_among_valid():
	data = [
		shipment_payload(DELIVERED),
		{'returnCode': 404, 'returnMessage': 'Numéro de suivi inconnu', 'idShip': 'BADCODE'},
		shipment_payload(MINIMAL)
	]

	blocks = render(data, ['BADCODE', DELIVERED, MINIMAL]).split(SEPARATOR)

	failures = [block for block in blocks if 'Essayez sur le site' in block]
	assert len(blocks) == 3
	assert len(failures) == 1
	assert 'BADCODE' in failures[0]


def test_number_missing_from_answer_still_has_block():
	blocks = render([shipment_payload(DELIVERED)], [DELIVERED, 'FORGOTTEN']).split(SEPARATOR)

	assert len(blocks) == 2
	assert 'FORGOTTEN' in blocks[1]
	assert 'Numéro inconnu.' in blocks[1]


def test_raw_mode_is_untouched_text():
	text = '{"returnCode":200,  "idShip":"X"}\n'
	batch = resolve_batch(json.loads(text), text)

	assert format_results(batch, ['X'], Mode.RAW) == text
	assert format_results(batch, ['X'], 'raw') == text


def test_unknown_event_code_shows_code():
	output = render(shipment_payload(IN_TRANSIT), [IN_TRANSIT])

	assert '2021-02-02 09:30:00 - ZZ9' in output
	assert 'Déclaratif réceptionné' in output


def test_events_newest_first():
	output = render(shipment_payload(DELIVERED), [DELIVERED])

	delivered = output.index('Distribué')
	processing = output.index('En cours de traitement')
	label = output.index('Votre colis est pris en charge')
	assert delivered < processing < label


def test_basic_mode():
	output = render(shipment_payload(DELIVERED), [DELIVERED])

	assert 'Finalisé' in output
	assert 'Date de prise en charge' in output
	assert '2020-12-30 07:00:00' in output
	assert 'Colissimo expert' in output
	assert 'Colissimo' in output.split('Métier en charge de l\'objet')[1]
	# Context data is for full mode.
	assert 'Paris Louvre' not in output
	assert 'bpost' not in output


def test_full_mode():
	output = render(shipment_payload(DELIVERED), [DELIVERED], Mode.FULL)

	assert 'Le 01/01/2021 à 10h00' in output
	assert 'Bureau de poste Paris Louvre' in output
	assert 'Pays d\'origine' in output and 'FR' in output
	assert 'Pays de destination' in output and 'BE' in output
	assert 'Choisi' in output
	assert 'Informations sur poste internationale' in output
	assert 'bpost - UPU - CB123456789BE' in output
	assert f'https://www.laposte.fr/outils/suivre-vos-envois?code={DELIVERED}' in output
	assert '5/5' in output


def test_missing_fields_are_left_out():
	output = render(shipment_payload(MINIMAL), [MINIMAL], Mode.FULL)

	assert MINIMAL in output
	for label in ('Finalisé', 'Date de livraison', 'Dénomination du produit', 'Pays d\'origine', 'URL de suivi'):
		assert label not in output


def test_not_final_shipment_has_no_final_line():
	output = render(shipment_payload(IN_TRANSIT), [IN_TRANSIT])

	assert 'Finalisé' not in output
	assert 'Courrier international' in output


def test_malformed_item_is_shown_unformatted():
	output = render(shipment_payload(EMPTY), [EMPTY])

	assert EMPTY in output
	assert '"returnCode": 200' in output


def test_item_without_id_shown_under_unmatched_number():
	data = [shipment_payload(DELIVERED), {'returnCode': 200, 'oddField': 'surprise'}]

	blocks = render(data, [DELIVERED, 'UNMATCHED']).split(SEPARATOR)

	assert 'UNMATCHED' in blocks[1]
	assert '"oddField": "surprise"' in blocks[1]
	assert 'Numéro inconnu.' not in blocks[1]


def test_markup_in_api_values_is_escaped():
	data = shipment_payload(MINIMAL)
	data['shipment']['product'] = '[bold]colis[/bold]'

	output = render(data, [MINIMAL])

	assert '[bold]colis[/bold]' in output


def test_format_date():
	date = datetime.datetime(2021, 3, 4, 5, 6, 7, tzinfo=UTC)

	assert format_date(date, Mode.BASIC, tz=UTC) == '2021-03-04 05:06:07'
	assert format_date(date, Mode.FULL, tz=UTC) == 'Le 04/03/2021 à 05h06'
	assert format_date(date.replace(tzinfo=None), Mode.BASIC) == '2021-03-04 05:06:07'
