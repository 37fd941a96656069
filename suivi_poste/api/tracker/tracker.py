# -*- coding: utf-8 -*-
"""Module with handler that allows to GET tracking info through the relay.

Callers don't need an API key (ours is used) and La Poste never sees their
IP address.
"""
import logging

from suivi_poste.base_handler import BaseHandler, ApplicationError
from suivi_poste.modules.tracker.carriers import laposte
from suivi_poste.modules.tracker.carriers.laposte import LaPosteTrackingError
from suivi_poste.validation.tracker import USER_REQUEST_SCHEMA


logger = logging.getLogger(__name__)

MISSING_TRACKING_NUMBER_MESSAGE = 'Missing tracking number'


class TrackerHandler(BaseHandler):
	async def get(self, tracking_number: str = ''):
		"""Get tracking info by tracking number, answered as La Poste did."""
		request = self.validate(
			USER_REQUEST_SCHEMA,
			{'tracking_number': tracking_number or ''},
			http_error_code=409,
			custom_message=MISSING_TRACKING_NUMBER_MESSAGE,
			message_key='returnMessage'
		)
		# Several comma separated numbers are passed along, like the API does.
		tracking_numbers = [number for number in request['tracking_number'].split(',') if number]
		if not tracking_numbers:
			raise ApplicationError(
				status_code=409,
				message=MISSING_TRACKING_NUMBER_MESSAGE,
				body={'returnMessage': MISSING_TRACKING_NUMBER_MESSAGE}
			)

		config = self.application.config
		try:
			response = await laposte.get_tracking_info(tracking_numbers, config.api_key, config)
		except LaPosteTrackingError as e:
			status_code = e.status_code if isinstance(e.status_code, int) else 500
			raise ApplicationError(status_code=status_code, message=e.message, body=e.body)

		logger.debug('Tracking info for %s: %s', ','.join(tracking_numbers), response.text)
		self.write_json_raw(response.raw, status_code=response.status_code)
