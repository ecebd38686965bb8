"""The shared "current symbol" analysis consumed by the presentation layer.

Only one search is in flight at a time: a new search cancels the previous
one, and a result is published only while its search is still the active
one, by swapping a single reference.
"""

import asyncio
import contextlib

import structlog

from stockwhisperer.analysis.schemas import AnalysisResult
from stockwhisperer.analysis.service import AnalysisService
from stockwhisperer.exceptions import ConflictError, ValidationError

logger = structlog.get_logger()


class AnalysisSession:
    def __init__(self, service: AnalysisService) -> None:
        self._service = service
        self._current: AnalysisResult | None = None
        self._active: asyncio.Task[AnalysisResult] | None = None
        self._generation = 0

    @property
    def current(self) -> AnalysisResult | None:
        return self._current

    @property
    def busy(self) -> bool:
        return self._active is not None and not self._active.done()

    async def search(self, query: str) -> AnalysisResult:
        if self.busy:
            self._active.cancel()
            logger.info("analysis_cancelled", superseded_by=query)

        self._generation += 1
        generation = self._generation
        task = asyncio.create_task(self._service.analyze(query))
        self._active = task
        try:
            result = await task
        except asyncio.CancelledError:
            if generation != self._generation:
                raise ConflictError(
                    f"Search for '{query}' was superseded by a newer request"
                ) from None
            raise
        finally:
            if self._active is task:
                self._active = None

        if generation != self._generation:
            raise ConflictError(f"Search for '{query}' was superseded by a newer request")

        self._current = result
        logger.info("analysis_published", query=query, symbol=result.symbol)
        return result

    async def refresh(self) -> AnalysisResult:
        current = self._current
        if current is None:
            raise ValidationError("Nothing to refresh: no symbol has been searched yet")
        return await self.search(current.query)

    async def close(self) -> None:
        task = self._active
        self._active = None
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task


_session: AnalysisSession | None = None


def init_session(service: AnalysisService) -> AnalysisSession:
    global _session
    _session = AnalysisSession(service)
    logger.info("analysis_session_initialized")
    return _session


async def close_session() -> None:
    global _session
    if _session is not None:
        await _session.close()
        _session = None
        logger.info("analysis_session_closed")


def get_session() -> AnalysisSession:
    if _session is None:
        raise RuntimeError("Analysis session not initialized. Call init_session() first.")
    return _session
