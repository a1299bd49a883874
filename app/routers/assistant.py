"""
Assistant Router

Answers user questions through the hosted assistant, continuing an existing
thread when the caller supplies one.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from ..models.course import AiAnswerRequest, AiAnswerResponse
from ..services.answer_service import ConversationalQueryService
from ..services.assistant_client import ProtocolError

router = APIRouter(prefix="/assistant", tags=["Assistant"])
logger = logging.getLogger(__name__)


def get_answer_service(request: Request) -> ConversationalQueryService:
    """Service wired at startup (see app.main)."""
    return request.app.state.answer_service


@router.post("/answer", response_model=AiAnswerResponse, summary="Ask the Training Buddy")
async def answer_question(
    payload: AiAnswerRequest,
    service: ConversationalQueryService = Depends(get_answer_service),
):
    if not payload.question.strip():
        raise HTTPException(status_code=400, detail="Question is required.")

    try:
        return await service.answer(payload)
    except ProtocolError as e:
        logger.error("Failed to retrieve AI answer: %s", e)
        raise HTTPException(status_code=502, detail=str(e))
