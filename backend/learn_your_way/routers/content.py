from __future__ import annotations
import logging

from fastapi import APIRouter, Depends

from .. import prompts
from ..errors import ExtractionError, ShapeError, fallback_content, safe_call
from ..extraction import require_object
from ..llm_service import LLMService, get_llm_service
from ..schemas import AudioDiscussionRequest, MaterialRequest, MnemonicRequest, PersonalizeRequest
from .common import build_request, to_http_error

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["content"])


@router.post("/personalize")
async def personalize(req: PersonalizeRequest, llm: LLMService = Depends(get_llm_service)):
    request = build_request(
        prompts.personalize_prompt(req.text, req.grade_level, req.interest),
        system=prompts.PERSONALIZE_SYSTEM,
        temperature=0.7,
        max_tokens=600,
        ai_config=req.ai_config,
    )
    try:
        result = await llm.complete(request, cache_namespace="personalize")
    except Exception as err:
        raise to_http_error(err, "Failed to personalize content") from err
    text = result.text.strip()
    if not text:
        logger.warning("personalize: model returned no text, serving original content")
        notice = fallback_content("personalize")
        return {"success": True, "personalizedText": req.text, "fallback": True, "notice": notice["content"]}
    return {"success": True, "personalizedText": text}


@router.post("/generate-slides")
async def generate_slides(req: MaterialRequest, llm: LLMService = Depends(get_llm_service)):
    request = build_request(
        prompts.material_prompt(
            "Transform the following textbook content into an engaging slide presentation",
            req.content,
            req.material_title,
            req.grade_level,
            req.interest,
            "Generate a JSON-formatted slide deck:",
        ),
        system=prompts.SLIDES_SYSTEM,
        temperature=0.7,
        max_tokens=700,
        json_mode=True,
        ai_config=req.ai_config,
    )
    try:
        data = await llm.complete_json(request, "object", cache_namespace="slides", list_key="slides")
    except Exception as err:
        raise to_http_error(err, "Failed to generate slides", "slides") from err
    return {"success": True, "slides": data["slides"]}


@router.post("/generate-mindmap")
async def generate_mindmap(req: MaterialRequest, llm: LLMService = Depends(get_llm_service)):
    request = build_request(
        prompts.material_prompt(
            "Transform the following textbook content into a hierarchical mind map structure",
            req.content,
            req.material_title,
            req.grade_level,
            req.interest,
            "Generate a JSON-formatted mind map structure:",
        ),
        system=prompts.MINDMAP_SYSTEM,
        temperature=0.6,
        max_tokens=700,
        json_mode=True,
        ai_config=req.ai_config,
    )
    try:
        data = await llm.complete_json(request, "object", cache_namespace="mindmap", list_key="nodes")
    except Exception as err:
        raise to_http_error(err, "Failed to generate mind map", "mind map") from err
    return {"success": True, "nodes": data["nodes"]}


@router.post("/generate-audio")
async def generate_audio(req: MaterialRequest, llm: LLMService = Depends(get_llm_service)):
    request = build_request(
        prompts.material_prompt(
            "Transform the following textbook content into an engaging audio-graphic lesson "
            "simulating a teacher-student conversation",
            req.content,
            req.material_title,
            req.grade_level,
            req.interest,
            "Generate a JSON-formatted conversation with visual suggestions:",
        ),
        system=prompts.AUDIO_LESSON_SYSTEM,
        temperature=0.8,
        max_tokens=900,
        json_mode=True,
        ai_config=req.ai_config,
    )
    try:
        # An unusable reply still gets a short placeholder dialogue
        data = await safe_call(
            lambda: llm.complete_json(request, "object", cache_namespace="audio", list_key="conversation"),
            fallback=lambda: None,
            context="generate-audio",
            fallback_on=(ExtractionError, ShapeError),
        )
    except Exception as err:
        raise to_http_error(err, "Failed to generate audio lesson", "audio") from err
    if data is None:
        return {"success": True, **fallback_content("generate-audio"), "fallback": True}
    visuals = data.get("visuals")
    return {
        "success": True,
        "conversation": data["conversation"],
        "visuals": visuals if isinstance(visuals, list) else [],
    }


@router.post("/generate-audio-discussion")
async def generate_audio_discussion(req: AudioDiscussionRequest, llm: LLMService = Depends(get_llm_service)):
    request = build_request(
        prompts.audio_discussion_prompt(req.title, req.content),
        system=prompts.AUDIO_DISCUSSION_SYSTEM,
        temperature=0.8,
        max_tokens=900,
        json_mode=True,
        ai_config=req.ai_config,
    )
    try:
        data = require_object(await llm.complete_json(request, "object", cache_namespace="audio-discussion"))
    except Exception as err:
        raise to_http_error(err, "Failed to generate audio discussion", "discussion") from err
    return {**data, "success": True}


@router.post("/generate-mnemonic")
async def generate_mnemonic(req: MnemonicRequest, llm: LLMService = Depends(get_llm_service)):
    request = build_request(
        prompts.mnemonic_prompt(req.content, req.grade_level),
        system=prompts.MNEMONIC_SYSTEM,
        temperature=0.8,
        max_tokens=300,
        json_mode=True,
        ai_config=req.ai_config,
    )
    try:
        data = require_object(await llm.complete_json(request, "object"))
    except Exception as err:
        raise to_http_error(err, "Failed to generate mnemonic", "mnemonic") from err
    mnemonic = data.get("mnemonic")
    return {"success": True, "mnemonic": mnemonic if isinstance(mnemonic, dict) else None}
