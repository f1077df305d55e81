from __future__ import annotations
from datetime import datetime, timezone
from typing import Dict

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ..errors import LLMError, sanitize_error_message
from ..llm_client import ChatRequest
from ..llm_config import resolve_llm_config
from ..llm_service import LLMService, get_llm_service

router = APIRouter(prefix="/api", tags=["health"])


class CheckResult(BaseModel):
	ok: bool
	detail: str = ""


@router.get("/health")
async def health(deep: int = 0, llm: LLMService = Depends(get_llm_service)):
	cfg = llm.client.settings
	checks: Dict[str, CheckResult] = {}

	env_ok = bool(cfg.llm_provider or cfg.llm_base_url or cfg.llm_model)
	checks["env"] = CheckResult(
		ok=env_ok,
		detail="Env vars present" if env_ok else "Missing LLM_PROVIDER/LLM_BASE_URL/LLM_MODEL",
	)

	try:
		config = resolve_llm_config(settings=cfg)
		checks["config"] = CheckResult(ok=True, detail=f"{config.provider.value} / {config.model}")
	except LLMError as err:
		checks["config"] = CheckResult(ok=False, detail=sanitize_error_message(err))

	if deep == 1:
		# Single attempt: a health probe should report, not retry
		try:
			result = await llm.client.chat(
				ChatRequest.from_prompt("Reply with the single word PONG.", max_tokens=256, temperature=0)
			)
			checks["llm"] = CheckResult(ok=bool(result.text), detail="Responded" if result.text else "No response text")
		except LLMError as err:
			checks["llm"] = CheckResult(ok=False, detail=sanitize_error_message(err))

	return {
		"ok": all(c.ok for c in checks.values()),
		"checks": {name: c.model_dump() for name, c in checks.items()},
		"timestamp": datetime.now(timezone.utc).isoformat(),
	}
