from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from stockwhisperer.analysis.router import router as analysis_router
from stockwhisperer.analysis.session import close_session, init_session
from stockwhisperer.config import settings
from stockwhisperer.dependencies import get_analysis_service, get_provider
from stockwhisperer.exception_handlers import register_exception_handlers
from stockwhisperer.logging_config import setup_logging
from stockwhisperer.market.router import router as market_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    init_session(get_analysis_service())
    yield
    await close_session()
    get_provider().close()


app = FastAPI(
    title=settings.app_name,
    description="Price history and short-term forecasts for any ticker symbol",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.cors_origins.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(market_router, prefix="/api/v1/market", tags=["market"])
app.include_router(analysis_router, prefix="/api/v1/analysis", tags=["analysis"])


@app.get("/api/v1/health")
async def health():
    return {"status": "healthy"}
