"""
DataSight — Tabular Insight Engine API

Run:
  uvicorn datasight.main:app --app-dir backend --host 0.0.0.0 --port 8000
"""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api.analysis import router as analysis_router
from .core.config import settings
from .core.exceptions import DataSightError
from .middleware import ErrorHandlerMiddleware, RequestLoggerMiddleware

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s | %(name)-36s | %(levelname)-7s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("datasight")

app = FastAPI(
    title=settings.APP_NAME,
    description="Query-driven profiling, statistics, trends, anomalies, forecasts and correlations for tabular data.",
    version=settings.APP_VERSION,
    debug=settings.DEBUG,
)

# Last added runs outermost; the request logger sees the 500 the error handler emits
app.add_middleware(ErrorHandlerMiddleware)
app.add_middleware(RequestLoggerMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(analysis_router, prefix=settings.API_PREFIX)


@app.exception_handler(DataSightError)
async def datasight_error_handler(request: Request, exc: DataSightError):
    logger.warning("%s %s rejected: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=422,
        content={"error": exc.code, "message": str(exc)},
    )


@app.get("/health", tags=["Health"])
async def health():
    return {
        "status": "healthy",
        "version": settings.APP_VERSION,
        "engine": "ready",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "datasight.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
