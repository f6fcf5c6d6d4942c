"""Global test fixtures."""

import asyncio

import logfire
import pytest

from digestpin.domain.image.model.reference import ImageReference
from digestpin.domain.shared.error import ResolutionFailed

# No export and no console output from spans during tests
logfire.configure(send_to_logfire=False, console=False)


class FakeManifestFetcher:
    """In-memory ManifestFetcher.

    ``digests`` maps ``repository:tag`` to a digest, or to an exception to
    raise. ``delays`` holds per-reference sleep times so tests can control
    completion order.
    """

    def __init__(
        self,
        digests: dict[str, str | Exception] | None = None,
        delays: dict[str, float] | None = None,
    ) -> None:
        self.digests = digests or {}
        self.delays = delays or {}
        self.calls: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def fetch_digest(self, reference: ImageReference) -> str:
        key = str(reference)
        self.calls.append(key)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(key, 0))
            outcome = self.digests.get(key)
            if outcome is None:
                raise ResolutionFailed(f"Registry returned HTTP 404 for {key}")
            if isinstance(outcome, Exception):
                raise outcome
            return outcome
        finally:
            self.in_flight -= 1


@pytest.fixture
def fake_fetcher() -> FakeManifestFetcher:
    return FakeManifestFetcher()
