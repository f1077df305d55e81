from __future__ import annotations
import logging
from typing import Optional

from fastapi import HTTPException

from ..errors import (
    ConfigurationError,
    ExtractionError,
    NetworkError,
    ProviderError,
    ShapeError,
    user_friendly_message,
)
from ..extraction import ExtractionFailure
from ..llm_client import ChatMessage, ChatRequest
from ..schemas import AIConfig

logger = logging.getLogger(__name__)


def build_request(
    user_prompt: str,
    *,
    system: Optional[str] = None,
    temperature: Optional[float] = None,
    max_tokens: Optional[int] = None,
    json_mode: bool = False,
    ai_config: Optional[AIConfig] = None,
) -> ChatRequest:
    return ChatRequest(
        messages=[ChatMessage(role="user", content=user_prompt)],
        system=system,
        temperature=temperature,
        max_tokens=max_tokens,
        json_mode=json_mode,
        provider=ai_config.provider if ai_config else None,
        model=ai_config.model if ai_config else None,
        base_url=ai_config.base_url if ai_config else None,
        api_key=ai_config.api_key if ai_config else None,
    )


def to_http_error(err: Exception, failure: str, what: str = "") -> HTTPException:
    """Map a pipeline failure to the response the browser sees.

    Provider bodies and stack traces stay in the log.
    """
    if isinstance(err, HTTPException):
        return err
    if isinstance(err, ExtractionError):
        logger.warning("%s: %s", failure, err)
        if err.reason == ExtractionFailure.PARSE_ERROR.value:
            return HTTPException(status_code=502, detail="Model returned invalid JSON.")
        return HTTPException(status_code=502, detail="Model did not return JSON.")
    if isinstance(err, ShapeError):
        logger.warning("%s: %s", failure, err)
        return HTTPException(status_code=502, detail=f"Invalid {what} JSON shape." if what else "Invalid JSON shape.")
    if isinstance(err, ConfigurationError):
        logger.warning("%s: %s", failure, err)
        return HTTPException(status_code=400, detail="Invalid AI configuration")
    if isinstance(err, (ProviderError, NetworkError)):
        logger.error("%s: %s", failure, err)
        return HTTPException(status_code=502, detail=user_friendly_message(err))
    logger.exception("%s", failure, exc_info=err)
    return HTTPException(status_code=500, detail=failure)
