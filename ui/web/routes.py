"""
Web Routes - API endpoints
==========================

This module defines the HTTP routes of the Rule Responder service.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Request
from pydantic import BaseModel, Field

from core.logging import get_logger
from rules.context import AttributeContext

logger = get_logger("web.routes")

router = APIRouter()


class MatchRequest(BaseModel):
    """Input to match plus the attributes placeholders may read."""
    message: str
    context: Dict[str, Any] = Field(default_factory=dict)


class MatchResponse(BaseModel):
    matches: List[str]
    first: Optional[str] = None


@router.get("/api/status")
async def get_status(request: Request):
    """Get engine status."""
    rules_engine = request.app.state.rules_engine
    return {"status": "ok", "engine": rules_engine.stats()}


@router.post("/api/match", response_model=MatchResponse)
async def match_message(request: Request, match_data: MatchRequest):
    """Match a message and return every resolved response."""
    rules_engine = request.app.state.rules_engine

    matches = rules_engine.match(AttributeContext(match_data.context), match_data.message)

    return MatchResponse(matches=matches, first=matches[0] if matches else None)


@router.get("/api/placeholders")
async def list_placeholders(request: Request):
    """List registered placeholder names."""
    rules_engine = request.app.state.rules_engine
    names = rules_engine.registry.names()
    return {"count": len(names), "placeholders": names}


@router.post("/api/rules/reload")
async def reload_rules(request: Request):
    """Reload rule documents and swap in a fresh index."""
    rules_engine = request.app.state.rules_engine

    stats = rules_engine.reload()
    logger.info(f"Rules reloaded: {stats['rules']} rules in {stats['buckets']} buckets")

    return {"success": True, "engine": stats}
