from fastapi import APIRouter, Query

from stockwhisperer.analysis.schemas import AnalysisResult, SearchRequest
from stockwhisperer.dependencies import AnalysisServiceDep, AnalysisSessionDep
from stockwhisperer.exceptions import NotFoundError

router = APIRouter()


@router.post("/search", response_model=AnalysisResult)
async def search(request: SearchRequest, session: AnalysisSessionDep) -> AnalysisResult:
    """Replace the current analysis; an in-flight search is cancelled."""
    return await session.search(request.query)


@router.post("/refresh", response_model=AnalysisResult)
async def refresh(session: AnalysisSessionDep) -> AnalysisResult:
    return await session.refresh()


@router.get("/current", response_model=AnalysisResult)
async def get_current(session: AnalysisSessionDep) -> AnalysisResult:
    if session.current is None:
        raise NotFoundError("Analysis", "current")
    return session.current


@router.get("/demo/{symbol}", response_model=AnalysisResult)
async def get_demo(
    symbol: str,
    service: AnalysisServiceDep,
    days: int = Query(default=365, ge=7, le=3650),
) -> AnalysisResult:
    return await service.demo(symbol, days)


@router.get("/{symbol}", response_model=AnalysisResult)
async def analyze(symbol: str, service: AnalysisServiceDep) -> AnalysisResult:
    """One-off analysis that does not touch the shared session."""
    return await service.analyze(symbol)
