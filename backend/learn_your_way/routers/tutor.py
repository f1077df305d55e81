from __future__ import annotations
import logging

from fastapi import APIRouter, Depends

from .. import prompts
from ..errors import ExtractionError
from ..extraction import extract_json, require_object
from ..llm_service import LLMService, get_llm_service
from ..schemas import ConversationalLearnRequest, TopicRequest
from .common import build_request, to_http_error

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["tutor"])

DEFAULT_DIFFICULTY = 7


@router.post("/conversational-learn")
async def conversational_learn(req: ConversationalLearnRequest, llm: LLMService = Depends(get_llm_service)):
    request = build_request(
        prompts.tutor_prompt(req.topic, req.question, req.difficulty, req.interest, req.context),
        system=prompts.tutor_system(req.difficulty, req.interest),
        temperature=0.8,
        max_tokens=1500,
        ai_config=req.ai_config,
    )
    try:
        result = await llm.complete(request)
    except Exception as err:
        raise to_http_error(err, "Failed to generate response") from err

    # A tutor reply is still useful as prose when the model ignores the JSON format
    payload = extract_json(result.text, "object")
    if payload.ok and isinstance(payload.value, dict):
        return {**payload.value, "success": True}
    if payload.reason is not None:
        logger.info("conversational-learn: falling back to plain text (%s)", payload.reason.value)
    return {
        "success": True,
        "type": "explanation",
        "content": result.text,
        "metadata": {"topic": req.topic or "Learning session", "difficulty": req.difficulty},
    }


@router.post("/generate-examples")
async def generate_examples(req: TopicRequest, llm: LLMService = Depends(get_llm_service)):
    difficulty = req.difficulty or DEFAULT_DIFFICULTY
    request = build_request(
        prompts.examples_prompt(req.topic, difficulty, req.interest),
        system=prompts.examples_system(req.topic, difficulty, req.interest),
        temperature=0.9,
        max_tokens=700,
        json_mode=True,
        ai_config=req.ai_config,
    )
    try:
        data = require_object(await llm.complete_json(request, "object"))
    except Exception as err:
        raise to_http_error(err, "Failed to generate examples", "examples") from err
    return {**data, "success": True}


@router.post("/generate-practice")
async def generate_practice(req: TopicRequest, llm: LLMService = Depends(get_llm_service)):
    difficulty = req.difficulty or DEFAULT_DIFFICULTY
    request = build_request(
        f"Create practice problems for: {req.topic}",
        system=prompts.practice_system(req.topic, difficulty, req.interest),
        temperature=0.7,
        json_mode=True,
        ai_config=req.ai_config,
    )
    try:
        result = await llm.complete(request)
    except Exception as err:
        raise to_http_error(err, "Failed to generate practice problems") from err

    payload = extract_json(result.text, "object")
    if payload.ok and isinstance(payload.value, dict):
        return {**payload.value, "success": True}
    if payload.span is None:
        # No JSON at all: hand the prose back with an empty problem set
        return {
            "success": True,
            "type": "practice",
            "content": result.text,
            "metadata": {"topic": req.topic, "difficulty": difficulty, "practiceProblems": []},
        }
    raise to_http_error(ExtractionError(payload.reason.value, payload.span), "Failed to generate practice problems")
