# -*- coding: utf-8 -*-
"""Tests for the fixed-window rate limiter."""
import pytest

from suivi_poste.rate_limit import FixedWindowRateLimiter


class FakeClock:
	def __init__(self, now: float = 0.0):
		self.now = now

	def __call__(self):
		return self.now


@pytest.fixture
def clock():
	return FakeClock()


@pytest.fixture
def limiter(clock):
	return FixedWindowRateLimiter(max_requests=50, window=15 * 60, clock=clock)


class TestFixedWindowRateLimiter:
	def test_fiftieth_allowed_fifty_first_rejected(self, limiter):
		states = [limiter.hit('1.2.3.4') for _ in range(51)]

		assert all(state.allowed for state in states[:50])
		assert states[49].remaining == 0
		assert not states[50].allowed

	def test_remaining_counts_down(self, limiter):
		assert limiter.hit('1.2.3.4').remaining == 49
		assert limiter.hit('1.2.3.4').remaining == 48

	def test_window_rollover_resets_counter(self, limiter, clock):
		for _ in range(51):
			limiter.hit('1.2.3.4')

		clock.now += 15 * 60 - 1
		assert not limiter.hit('1.2.3.4').allowed

		clock.now += 1
		state = limiter.hit('1.2.3.4')
		assert state.allowed
		assert state.remaining == 49

	def test_reset_after(self, limiter, clock):
		limiter.hit('1.2.3.4')
		clock.now += 60

		assert limiter.hit('1.2.3.4').reset_after == 15 * 60 - 60

	def test_keys_are_independent(self, limiter):
		for _ in range(51):
			limiter.hit('1.2.3.4')

		assert limiter.hit('5.6.7.8').allowed

	def test_finished_windows_are_forgotten(self, limiter, clock):
		limiter.hit('1.2.3.4')
		clock.now += 15 * 60
		limiter.hit('5.6.7.8')

		assert set(limiter._windows) == {'5.6.7.8'}

	@pytest.mark.parametrize('max_requests, window', [(0, 60), (10, 0)])
	def test_invalid_settings(self, max_requests, window):
		with pytest.raises(ValueError):
			FixedWindowRateLimiter(max_requests=max_requests, window=window)
