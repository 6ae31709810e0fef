"""
Noter Backend: Home Route
===========================

What:  GET / returns a fixed welcome message. No dependencies.
"""

from fastapi import APIRouter

from noter.schemas.note import MessageResponse

router = APIRouter(tags=["Home"])


@router.get("/", response_model=MessageResponse, summary="Welcome message")
async def home() -> MessageResponse:
    return MessageResponse(message="Ok, Let's Start!")
