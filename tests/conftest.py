"""Shared fixtures for marketplace adapter tests."""

import random

import pytest

from marketplace_adapters.api.base import ApiResponse


class FakeSleep:
    """Records requested sleeps instead of waiting."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


class StubRequest:
    """Request function that replays queued responses or errors."""

    def __init__(self, responses=None) -> None:
        self.responses = list(responses or [])
        self.calls: list[tuple] = []

    async def __call__(self, method, path, options=None):
        self.calls.append((method, path, options or {}))
        if not self.responses:
            return ApiResponse(data={}, status=200)
        response = self.responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        return response


@pytest.fixture
def fake_sleep():
    return FakeSleep()


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def stub_request():
    return StubRequest()
