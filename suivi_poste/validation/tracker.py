# -*- coding: utf-8 -*-
"""Module with validations schemas for tracking requests and API answers.
"""
import voluptuous as vlps


# Used to validate TrackerHandler.get request.
USER_REQUEST_SCHEMA = vlps.Schema({
	vlps.Required('tracking_number'): vlps.All(str, vlps.Length(min=1))
})


# Expected answers from La Poste tracking API.
# Let's make it explicit: describe only keys we are using, drop the rest.
# Every optional key may also come as null.
def _nullable(schema):
	return vlps.Any(None, schema)


_TEXT = _nullable(vlps.Coerce(str))

_EVENT_SCHEMA = vlps.Schema({
	vlps.Required('code'): vlps.Coerce(str),
	vlps.Optional('label'): _TEXT,
	vlps.Optional('date'): _TEXT
}, extra=vlps.REMOVE_EXTRA)

_REMOVAL_POINT_SCHEMA = vlps.Schema({
	vlps.Optional('type'): _TEXT,
	vlps.Optional('name'): _TEXT
}, extra=vlps.REMOVE_EXTRA)

_DELIVERY_CHOICE_SCHEMA = vlps.Schema({
	vlps.Optional('deliveryChoice'): _TEXT
}, extra=vlps.REMOVE_EXTRA)

_PARTNER_SCHEMA = vlps.Schema({
	vlps.Optional('name'): _TEXT,
	vlps.Optional('network'): _TEXT,
	vlps.Optional('reference'): _TEXT
}, extra=vlps.REMOVE_EXTRA)

_CONTEXT_DATA_SCHEMA = vlps.Schema({
	vlps.Optional('removalPoint'): _nullable(_REMOVAL_POINT_SCHEMA),
	vlps.Optional('originCountry'): _TEXT,
	vlps.Optional('arrivalCountry'): _TEXT,
	vlps.Optional('deliveryChoice'): _nullable(_DELIVERY_CHOICE_SCHEMA),
	vlps.Optional('partner'): _nullable(_PARTNER_SCHEMA)
}, extra=vlps.REMOVE_EXTRA)

SHIPMENT_SCHEMA = vlps.Schema({
	vlps.Required('idShip'): vlps.Coerce(str),
	vlps.Optional('isFinal', default=False): _nullable(bool),
	vlps.Optional('entryDate'): _TEXT,
	vlps.Optional('deliveryDate'): _TEXT,
	vlps.Optional('product'): _TEXT,
	vlps.Optional('holder'): _TEXT,
	vlps.Optional('url'): _TEXT,
	vlps.Optional('contextData'): _nullable(_CONTEXT_DATA_SCHEMA),
	vlps.Optional('event', default=list): _nullable([_EVENT_SCHEMA])
}, extra=vlps.REMOVE_EXTRA)

# One item of the answer (the answer itself, or one element of the array).
RESULT_SCHEMA = vlps.Schema({
	vlps.Optional('returnCode'): _nullable(vlps.Coerce(int)),
	vlps.Optional('returnMessage'): _TEXT,
	vlps.Optional('idShip'): _TEXT,
	vlps.Optional('shipment'): _nullable(dict)
}, extra=vlps.REMOVE_EXTRA)
