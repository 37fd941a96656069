# -*- coding: utf-8 -*-
"""Fixed-window request counter per client, kept in process memory.

`hit()` never awaits, so on a single IOLoop the check and the increment
can't be split by another request.
"""
import dataclasses
import time
from typing import Callable


@dataclasses.dataclass
class _Window:
	started: float
	count: int = 0


@dataclasses.dataclass(frozen=True)
class RateLimitState:
	allowed: bool
	limit: int
	remaining: int
	# Seconds until the window of this client is over.
	reset_after: float


class FixedWindowRateLimiter:
	"""At most `max_requests` per `window` seconds for each key."""

	def __init__(self, max_requests: int, window: float, clock: Callable[[], float] = time.monotonic):
		if max_requests < 1:
			raise ValueError('max_requests should be positive')
		if window <= 0:
			raise ValueError('window should be positive')

		self.max_requests = max_requests
		self.window = window
		self._clock = clock
		self._windows: dict[str, _Window] = {}
		self._next_prune = clock() + window

	def hit(self, key: str) -> RateLimitState:
		"""Count one request for `key`, tell whether it is allowed."""
		now = self._clock()
		self._prune(now)

		window = self._windows.get(key)
		if window is None or now - window.started >= self.window:
			window = self._windows[key] = _Window(started=now)

		# Rejected requests are not counted: they cost us nothing upstream.
		allowed = window.count < self.max_requests
		if allowed:
			window.count += 1

		return RateLimitState(
			allowed=allowed,
			limit=self.max_requests,
			remaining=self.max_requests - window.count,
			reset_after=window.started + self.window - now
		)

	def _prune(self, now: float) -> None:
		"""Forget finished windows once per window."""
		if now < self._next_prune:
			return
		self._windows = {
			key: window
			for key, window in self._windows.items()
			if now - window.started < self.window
		}
		self._next_prune = now + self.window
