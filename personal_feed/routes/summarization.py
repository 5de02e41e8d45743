"""
Summarization routes: digest a single article with the local model.
"""

import asyncio

import aiohttp
from fastapi import APIRouter, HTTPException

from ..config import state
from ..providers import ProviderError
from ..schemas import SummarizeRequest, SummaryResponse

router = APIRouter(tags=["summarization"])


@router.post("/summarize")
async def summarize_url(request: SummarizeRequest) -> SummaryResponse:
    """Fetch an article and summarize it as a TLDR plus bullets."""
    if not state.summarizer or not state.fetcher:
        raise HTTPException(status_code=503, detail="Summarization not configured")

    try:
        result = await state.fetcher.fetch(request.url)
    except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
        raise HTTPException(status_code=400, detail=f"Could not fetch article: {e}")

    if not result.content:
        raise HTTPException(status_code=422, detail="No article text found")

    title = request.title or result.title
    try:
        summary = await state.summarizer.summarize_async(result.content, request.url, title)
    except ProviderError as e:
        raise HTTPException(status_code=502, detail=str(e))

    return SummaryResponse.from_summary(request.url, title, summary)
