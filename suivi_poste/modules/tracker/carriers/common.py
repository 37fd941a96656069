# -*- coding: utf-8 -*-
"""Separate file for base exception class(es) to avoid circular import.
"""


class CarrierTrackingError(Exception):
	"""Base class for all carrier tracking errors."""
	pass
