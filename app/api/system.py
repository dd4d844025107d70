"""
System / health routes.
"""

from typing import List

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from app.core.dependencies import get_registry
from app.detection.registry import ClassifierRegistry
from app.schemas.analysis import SourceInfo

router = APIRouter(tags=["System"])


@router.get("/health")
async def health():
    return {"status": "healthy"}


@router.get("/robots.txt", response_class=PlainTextResponse)
def robots():
    return "User-agent: *\nDisallow: /"


@router.get("/sources", response_model=List[SourceInfo])
async def sources(registry: ClassifierRegistry = Depends(get_registry)):
    """Configured fallback chain, in the order it is tried."""
    return [
        SourceInfo(
            name=s.name,
            kind=s.kind,
            model_id=s.model_id,
            fake_markers=list(s.fake_markers),
            real_markers=list(s.real_markers),
        )
        for s in registry.sources
    ]
