# -*- coding: utf-8 -*-
"""Static La Poste code tables.

Every lookup goes through a function falling back to the raw code: the API
adds codes without notice, and an unknown one must never break the output.
"""
from typing import NamedTuple, Optional


class EventCode(NamedTuple):
	message: str
	# Shipment lifecycle step, 1 (declared) to 5 (delivered).
	step: int


EVENTS: dict[str, EventCode] = {
	'DR1': EventCode('Déclaratif réceptionné', 1),
	'PC1': EventCode('Pris en charge', 2),
	'PC2': EventCode('Pris en charge dans le pays d’expédition', 2),
	'ET1': EventCode('En cours de traitement', 3),
	'ET2': EventCode('En cours de traitement dans le pays d’expédition', 3),
	'ET3': EventCode('En cours de traitement dans le pays de destination', 3),
	'ET4': EventCode('En cours de traitement dans un pays de transit', 3),
	'EP1': EventCode('En attente de présentation', 3),
	'DO1': EventCode('Entrée en Douane', 3),
	'DO2': EventCode('Sortie de Douane', 3),
	'DO3': EventCode('Retenu en Douane', 3),
	'PB1': EventCode('Problème en cours', 3),
	'PB2': EventCode('Problème résolu', 3),
	'MD2': EventCode('Mis en distribution', 4),
	'ND1': EventCode('Non distribuable', 4),
	'AG1': EventCode('En attente d’être retiré au guichet', 4),
	'RE1': EventCode('Retourné à l’expéditeur', 4),
	'DI1': EventCode('Distribué', 5),
	'DI2': EventCode('Distribué à l’expéditeur', 5),
}

# Business unit in charge of the shipment.
HOLDERS: dict[str, str] = {
	'1': 'Courrier national',
	'2': 'Courrier international',
	'3': 'Chronopost',
	'4': 'Colissimo',
}

# Empty label: nothing worth showing.
DELIVERY_CHOICES: dict[str, str] = {
	'0': '',
	'1': 'Possible',
	'2': 'Choisi',
}


def event_message(code: str, label: Optional[str] = None) -> str:
	"""API label if any, then our table, then the raw code."""
	if label:
		return label
	event = EVENTS.get(code)
	return event.message if event is not None else code


def event_step(code: str) -> Optional[int]:
	event = EVENTS.get(code)
	return event.step if event is not None else None


def holder_label(holder: str) -> str:
	return HOLDERS.get(holder, holder)


def delivery_choice_label(choice: str) -> str:
	return DELIVERY_CHOICES.get(choice, choice)
