"""Story catalog API routes."""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from readalong.stories import get_story, list_stories

router = APIRouter()


@router.get("/stories")
async def api_list_stories():
    return JSONResponse({"stories": list_stories()})


@router.get("/stories/{story_id}")
async def api_get_story(story_id: str):
    """Return one story including its text."""
    story = get_story(story_id)
    if not story:
        return JSONResponse({"error": "Story not found"}, status_code=404)
    return JSONResponse(story)
