from __future__ import annotations
from typing import Any, Dict, List

from fastapi import APIRouter, Depends

from .. import prompts
from ..errors import ExtractionError, ShapeError, fallback_content, safe_call
from ..extraction import require_object
from ..llm_service import LLMService, get_llm_service
from ..schemas import QuizGenerationRequest, QuizSubmission, SectionQuestionRequest
from .common import build_request, to_http_error

router = APIRouter(prefix="/api", tags=["assessment"])

DEFAULT_QUIZ_QUESTIONS = 10


@router.post("/generate-questions")
async def generate_question(req: SectionQuestionRequest, llm: LLMService = Depends(get_llm_service)):
    request = build_request(
        prompts.section_question_prompt(req.section_title, req.section_content, req.grade_level, req.interest),
        system=prompts.SECTION_QUESTION_SYSTEM,
        temperature=0.7,
        max_tokens=400,
        json_mode=True,
        ai_config=req.ai_config,
    )
    try:
        # An embedded check-in question is optional; keep the reader moving
        question = await safe_call(
            lambda: llm.complete_json(request, "object", cache_namespace="section-question"),
            fallback=lambda: None,
            context="generate-questions",
            fallback_on=(ExtractionError, ShapeError),
        )
    except Exception as err:
        raise to_http_error(err, "Failed to generate question") from err
    if question is None:
        return {"success": True, "question": fallback_content("generate-questions"), "fallback": True}
    return {"success": True, "question": question}


@router.post("/generate-quiz")
async def generate_quiz(req: QuizGenerationRequest, llm: LLMService = Depends(get_llm_service)):
    total = req.total_questions or DEFAULT_QUIZ_QUESTIONS
    request = build_request(
        prompts.quiz_prompt(req.material_title, req.sections, req.grade_level, req.interest),
        system=prompts.quiz_system(total),
        temperature=0.7,
        max_tokens=2000,
        json_mode=True,
        ai_config=req.ai_config,
    )
    try:
        data = await llm.complete_json(request, "object", cache_namespace="quiz", list_key="questions")
    except Exception as err:
        raise to_http_error(err, "Failed to generate quiz", "quiz") from err
    return {"success": True, "questions": data["questions"]}


def score_quiz(req: QuizSubmission) -> Dict[str, Any]:
    correct = 0
    results: List[Dict[str, Any]] = []
    for q in req.questions:
        answer = req.answers.get(q.id)
        is_correct = answer == q.correct_answer
        if is_correct:
            correct += 1
        results.append(
            {
                "questionId": q.id,
                "userAnswer": answer,
                "correctAnswer": q.correct_answer,
                "isCorrect": is_correct,
                "explanation": q.explanation or "",
                "difficulty": q.difficulty,
            }
        )
    total = len(req.questions)
    return {
        # half-up, so 12.5 shows as 13
        "score": int(correct * 100 / total + 0.5),
        "correctCount": correct,
        "totalCount": total,
        "detailedResults": results,
    }


@router.post("/submit-quiz")
async def submit_quiz(req: QuizSubmission, llm: LLMService = Depends(get_llm_service)):
    scored = score_quiz(req)
    request = build_request(
        prompts.quiz_feedback_prompt(
            req.title,
            scored["score"],
            scored["correctCount"],
            scored["totalCount"],
            scored["detailedResults"],
        ),
        temperature=0.8,
        max_tokens=400,
        json_mode=True,
        ai_config=req.ai_config,
    )
    try:
        feedback = require_object(await llm.complete_json(request, "object"))
    except Exception as err:
        raise to_http_error(err, "Failed to submit quiz", "feedback") from err
    # Scores are computed here, not trusted from the model
    return {**feedback, **scored, "success": True}
