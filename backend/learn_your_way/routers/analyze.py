from __future__ import annotations
import asyncio
import logging
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, HTTPException

from .. import prompts
from ..extraction import extract_json
from ..llm_service import LLMService, get_llm_service
from ..schemas import AIConfig, AnalyzeTextRequest
from .common import build_request, to_http_error

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["analyze"])

MIN_ANALYZE_CHARS = 200
# Callers cap what goes upstream; the client itself does not
MAX_LLM_INPUT_CHARS = 4_000


async def _analysis_list(llm: LLMService, name: str, instructions: str, temperature: float, max_tokens: int, text: str, ai_config: Optional[AIConfig]) -> List[Any]:
    namespace = f"analyze-{name}"
    request = build_request(
        f"{instructions}\n\nText:\n{text}",
        temperature=temperature,
        max_tokens=max_tokens,
        ai_config=ai_config,
    )
    result = await llm.complete(request, cache_namespace=namespace)
    payload = extract_json(result.text, "array")
    if not payload.ok or not isinstance(payload.value, list):
        logger.warning("analyze-text: no usable %s array (%s)", name, payload.reason.value if payload.reason else "not a list")
        llm.evict(namespace, request)
        return []
    return payload.value


@router.post("/analyze-text")
async def analyze_text(req: AnalyzeTextRequest, llm: LLMService = Depends(get_llm_service)):
    text = req.text.strip()
    if len(text) < MIN_ANALYZE_CHARS:
        raise HTTPException(status_code=422, detail="Unable to extract readable text from this material.")
    llm_input = text[:MAX_LLM_INPUT_CHARS]

    summary_request = build_request(
        prompts.summary_prompt(llm_input),
        temperature=0.5,
        max_tokens=300,
        ai_config=req.ai_config,
    )
    # Every call runs to completion so no failure goes unobserved
    results = await asyncio.gather(
        llm.complete(summary_request, cache_namespace="analyze-summary"),
        *(
            _analysis_list(llm, name, instructions, temperature, max_tokens, llm_input, req.ai_config)
            for name, instructions, temperature, max_tokens in prompts.ANALYSIS_PROMPTS
        ),
        return_exceptions=True,
    )
    failure = next((r for r in results if isinstance(r, BaseException)), None)
    if failure is not None:
        raise to_http_error(failure, "Failed to analyze material") from failure

    summary, *lists = results
    response = {"success": True, "summary": summary.text}
    for (name, *_), items in zip(prompts.ANALYSIS_PROMPTS, lists):
        response[name] = items
    return response
