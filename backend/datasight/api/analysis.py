"""
Analysis API Endpoints

Free-text questions over JSON rows or an uploaded CSV, plus a plain
dataset profile. The engine is stateless: every request carries its data.
"""

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, File, Form, HTTPException, UploadFile
from pydantic import BaseModel, Field
from starlette.concurrency import run_in_threadpool

from ..core.config import settings
from ..services.ingestion import decode_upload, parse_csv
from ..services.profiler import profile_dataset
from ..services.query_router import analyze

logger = logging.getLogger("datasight.api.analysis")

router = APIRouter(tags=["Analysis"])

DEFAULT_CSV_QUERY = "summarize this dataset"


class AnalyzeRequest(BaseModel):
    query: str = Field(..., description="Free-text question about the rows")
    rows: List[Dict[str, Any]] = Field(default_factory=list, description="Dataset rows")


class ProfileRequest(BaseModel):
    rows: List[Dict[str, Any]] = Field(default_factory=list, description="Dataset rows")


def _check_row_limit(rows: List[Dict[str, Any]]):
    if len(rows) > settings.MAX_ROWS:
        raise HTTPException(
            status_code=413,
            detail=f"Dataset has {len(rows)} rows; the limit is {settings.MAX_ROWS}",
        )


@router.post("/analyze")
async def analyze_rows(request: AnalyzeRequest):
    """Answer a question about rows sent as JSON."""
    _check_row_limit(request.rows)
    response = await run_in_threadpool(analyze, request.query, request.rows)
    return response.to_dict()


@router.post("/analyze/csv")
async def analyze_csv(
    file: UploadFile = File(...),
    query: str = Form(DEFAULT_CSV_QUERY),
):
    """Answer a question about an uploaded CSV file."""
    content = await file.read()
    max_bytes = settings.MAX_UPLOAD_MB * 1024 * 1024
    if len(content) > max_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"File exceeds the {settings.MAX_UPLOAD_MB} MB upload limit",
        )

    rows = parse_csv(decode_upload(content))
    if not rows:
        raise HTTPException(status_code=400, detail="No data found in file")
    _check_row_limit(rows)

    logger.info("analyze_csv: %s → %d rows", file.filename, len(rows))
    response = await run_in_threadpool(analyze, query, rows)
    return response.to_dict()


@router.post("/profile")
async def profile_rows(request: ProfileRequest):
    """Structural profile of rows sent as JSON."""
    _check_row_limit(request.rows)
    profile = await run_in_threadpool(profile_dataset, request.rows)
    return profile.to_dict()
