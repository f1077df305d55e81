"""Best-effort recovery of a JSON value from free-form model text.

Models wrap JSON in prose or markdown fences despite instructions. We take
the greedy outermost bracket span and try to parse it. Malformed JSON is
reported, not repaired.
"""
from __future__ import annotations

import enum
import json
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Literal, Optional

from .errors import ExtractionError, ShapeError

Shape = Literal["object", "array"]

_PATTERNS = {
	"object": re.compile(r"\{[\s\S]*\}"),
	"array": re.compile(r"\[[\s\S]*\]"),
}


class ExtractionFailure(str, enum.Enum):
	NO_JSON_FOUND = "no-json-found"
	PARSE_ERROR = "parse-error"


@dataclass(frozen=True)
class ExtractedPayload:
	value: Any = None
	span: Optional[str] = None
	reason: Optional[ExtractionFailure] = None
	error: Optional[str] = None

	@property
	def ok(self) -> bool:
		return self.reason is None


def extract_json(text: Optional[str], shape: Shape = "object") -> ExtractedPayload:
	pattern = _PATTERNS.get(shape)
	if pattern is None:
		raise ValueError(f"shape must be 'object' or 'array', got {shape!r}")
	match = pattern.search(text or "")
	if not match:
		return ExtractedPayload(reason=ExtractionFailure.NO_JSON_FOUND)
	span = match.group(0)
	try:
		value = json.loads(span)
	except json.JSONDecodeError as err:
		return ExtractedPayload(span=span, reason=ExtractionFailure.PARSE_ERROR, error=str(err))
	return ExtractedPayload(value=value, span=span)


def require_json(text: Optional[str], shape: Shape = "object") -> Any:
	payload = extract_json(text, shape)
	if not payload.ok:
		raise ExtractionError(payload.reason.value, payload.span)
	return payload.value


def require_list(data: Any, key: str) -> List[Any]:
	"""Return ``data[key]`` if it is a list, otherwise raise ``ShapeError``."""
	if not isinstance(data, dict) or not isinstance(data.get(key), list):
		raise ShapeError(f"expected a '{key}' array")
	return data[key]


def require_object(data: Any) -> Dict[str, Any]:
	if not isinstance(data, dict):
		raise ShapeError("expected a JSON object")
	return data
