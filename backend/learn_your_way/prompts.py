from __future__ import annotations
import json
from typing import Iterable, List, Optional, Tuple

from .schemas import ContextMessage, Section


def _interest_clause(interest: Optional[str], template: str) -> str:
    return template.format(interest=interest) if interest else ""


PERSONALIZE_SYSTEM = (
    "You are an expert educator specializing in personalized learning content. "
    "Adapt textbook content to the learner while keeping it accurate.\n\n"
    "Grade level adaptation:\n"
    "- Match reading complexity to the grade level (6-13, where 13 is undergraduate)\n"
    "- Follow Flesch-Kincaid principles: shorter sentences and simpler vocabulary for lower grades\n"
    "- Keep every key concept and all facts correct\n\n"
    "Interest-based personalization:\n"
    "- Use examples and analogies from the learner's interest\n"
    "- Wrap personalized passages in brackets like [this]\n\n"
    "Output: ONLY the adapted text, same structure and flow, no meta-commentary."
)


def personalize_prompt(text: str, grade_level: int, interest: Optional[str]) -> str:
    return (
        f"Please adapt the following textbook content for a {grade_level} grade level"
        f"{_interest_clause(interest, ' with personalization for {interest}')}.\n\n"
        f"Original Text:\n{text}\n\n"
        "Provide the personalized and adapted text:"
    )


SLIDES_SYSTEM = (
    "You are an expert instructional designer. Turn textbook content into an engaging slide deck.\n\n"
    "- 5-8 slides, one main idea per slide\n"
    "- Concise bullet points, not paragraphs\n"
    "- Open with a hook or question, close with key takeaways\n"
    "- Age-appropriate for the grade level; use the learner's interest for examples when given\n\n"
    "Return a JSON object:\n"
    '{"slides": [{"title": "Slide Title", "content": "Short intro to the slide", '
    '"keyPoints": ["Point 1", "Point 2", "Point 3"]}]}'
)


def material_prompt(action: str, content: str, material_title: str, grade_level: Optional[int], interest: Optional[str], closing: str) -> str:
    return (
        f"{action}{_interest_clause(interest, ', personalized for {interest}')}.\n\n"
        f"Grade Level: {grade_level if grade_level is not None else 'Not specified'}\n"
        f"Material Title: {material_title}\n\n"
        f"Content:\n{content}\n\n"
        f"{closing}"
    )


MINDMAP_SYSTEM = (
    "You are an expert instructional designer specializing in knowledge organization. "
    "Turn textbook content into a hierarchical mind map.\n\n"
    "- Level 0: the main topic (root)\n"
    "- Level 1: major sections or concepts\n"
    "- Level 2: key points; level 3: supporting details or examples\n"
    "- Labels of 2-6 words, unique descriptive ids (e.g. \"root\", \"definition\", \"example-1\")\n"
    "- Parent-child links go in each node's children array\n\n"
    "Return a JSON object:\n"
    '{"nodes": [{"id": "root", "label": "Node label", "level": 0, "children": ["child-id-1"]}]}'
)

AUDIO_LESSON_SYSTEM = (
    "You are an expert educator specializing in conversational learning. Turn textbook content into "
    "an audio-graphic lesson: a dialogue between a teacher and a curious student.\n\n"
    "- The teacher opens with a hook and explains patiently with examples\n"
    "- The student asks questions, sometimes holds misconceptions the teacher gently corrects\n"
    "- 8-12 turns of 1-3 sentences each\n"
    "- Suggest visuals (diagrams, charts, illustrations) to show alongside the dialogue\n\n"
    "Return a JSON object:\n"
    '{"conversation": [{"speaker": "teacher" | "student", "text": "What is said"}], '
    '"visuals": ["Description of a visual element"]}'
)

AUDIO_DISCUSSION_SYSTEM = (
    "You create educational audio discussions about academic papers, like a podcast or seminar.\n\n"
    "- 2-3 speakers: a moderator, an expert, and optionally a skeptic\n"
    "- 12-16 turns of 2-4 sentences covering introduction, methodology, findings, implications, limitations\n"
    "- Simplify jargon without losing accuracy; keep it accessible to educated non-experts\n\n"
    "Return a JSON object:\n"
    '{"title": "Discussion title", "summary": "2-3 sentence overview", '
    '"speakers": [{"name": "Speaker name", "role": "moderator" | "expert" | "skeptic"}], '
    '"discussion": [{"speaker": "Speaker name", "role": "expert", "text": "What is said"}], '
    '"keyPoints": ["Key point 1"]}'
)


def audio_discussion_prompt(title: Optional[str], content: str) -> str:
    return (
        "Transform the following academic paper into an engaging audio discussion between experts.\n\n"
        f"Paper Title: {title or 'Untitled Paper'}\n\n"
        f"Paper Content:\n{content}\n\n"
        "Generate a JSON-formatted audio discussion with speakers, turns, and key points:"
    )


MNEMONIC_SYSTEM = (
    "You are an expert educator who writes memory aids. Find terms, sequences or lists in the content "
    "that deserve a mnemonic (first-letter, sentence, rhyme or association) and make it coherent, "
    "memorable and age-appropriate.\n\n"
    "Return a JSON object:\n"
    '{"mnemonic": {"term": "What to remember", "mnemonic": "The device", '
    '"explanation": "How it works and ties back to the content"} | null}\n'
    'Return {"mnemonic": null} if nothing in the content needs one.'
)


def mnemonic_prompt(content: str, grade_level: Optional[int]) -> str:
    return (
        "Analyze the following content and create a helpful mnemonic for a term or concept that benefits from a memory aid.\n\n"
        f"Grade Level: {grade_level if grade_level is not None else 'Not specified'}\n\n"
        f"Content:\n{content}\n\n"
        "Return ONLY the JSON object:"
    )


SECTION_QUESTION_SYSTEM = (
    "You are an expert in formative assessment. Write one embedded multiple-choice question that lets "
    "a reader check their understanding of a section.\n\n"
    "- 4 options, exactly one correct, three plausible distractors, no trick questions\n"
    "- Age-appropriate; use the learner's interest for context when given\n"
    "- The explanation should reinforce learning, not just state the answer\n\n"
    "Return a JSON object:\n"
    '{"question": "The question text", "options": ["A", "B", "C", "D"], '
    '"correctAnswer": 0, "explanation": "Why the answer is right"}'
)


def section_question_prompt(section_title: str, section_content: str, grade_level: Optional[int], interest: Optional[str]) -> str:
    return (
        "Generate an embedded question for the following learning material"
        f"{_interest_clause(interest, ', personalized for {interest}')}.\n\n"
        f"Grade Level: {grade_level if grade_level is not None else 'Not specified'}\n\n"
        f"Section Title: {section_title}\n\n"
        f"Section Content:\n{section_content}\n\n"
        "Generate a JSON-formatted multiple-choice question:"
    )


def quiz_system(total: int) -> str:
    return (
        "You are an expert in formative assessment. Write a quiz for the learning material.\n\n"
        f"- Exactly {total} multiple-choice questions covering all sections\n"
        "- Mix difficulties: easy (recall), medium (application, analysis), hard (evaluation, synthesis)\n"
        "- 4 options each, one clearly correct answer, no trick questions\n"
        "- Age-appropriate; draw examples from the learner's interest when given\n\n"
        "Return a JSON object:\n"
        '{"questions": [{"id": "unique-question-id", "question": "The question text", '
        '"options": ["A", "B", "C", "D"], "correctAnswer": 0, '
        '"explanation": "Why the answer is right", "difficulty": "easy" | "medium" | "hard"}]}\n'
        "correctAnswer is the 0-based index of the right option; every id must be unique."
    )


def section_text(sections: Iterable[Section]) -> str:
    parts = []
    for idx, section in enumerate(sections):
        title = section.title or f"Section {idx + 1}"
        parts.append(f"## {title}\n{section.content}")
    return "\n\n".join(parts)


def quiz_prompt(material_title: str, sections: List[Section], grade_level: Optional[int], interest: Optional[str]) -> str:
    return (
        "Generate a quiz for the following learning material"
        f"{_interest_clause(interest, ', using examples from {interest}')}.\n\n"
        f"Grade Level: {grade_level if grade_level is not None else 'Not specified'}\n"
        f"Material Title: {material_title}\n\n"
        f"Content:\n{section_text(sections)}\n\n"
        "Return ONLY the JSON object."
    )


def quiz_feedback_prompt(title: Optional[str], score: int, correct: int, total: int, results: List[dict]) -> str:
    lines = "\n".join(
        f"- {r['questionId']}: {'Correct' if r['isCorrect'] else 'Incorrect'} (Difficulty: {r['difficulty']})"
        for r in results
    )
    return (
        "You are an encouraging educator giving personalized quiz feedback. Cover overall performance, "
        "glow (strengths), grows (areas to improve), concrete next steps and an encouraging close.\n\n"
        f"Score: {score}% ({correct}/{total} correct)\n"
        f"Quiz Title: {title or 'Quiz'}\n\n"
        f"Detailed Results:\n{lines}\n\n"
        "Be specific, warm and actionable, even if the score is low.\n\n"
        "Return a JSON object:\n"
        f'{{"score": {score}, "correctCount": {correct}, "totalCount": {total}, '
        '"glow": "Strengths shown", "grows": "Areas to improve", '
        '"nextSteps": "Personalized recommendations", "feedback": "Encouraging overall message"}'
    )


def difficulty_band(difficulty: int) -> str:
    if difficulty <= 7:
        return "Beginner"
    if difficulty <= 10:
        return "Intermediate"
    return "Advanced"


def examples_system(topic: str, difficulty: int, interest: Optional[str]) -> str:
    interest_line = (
        f"- Work {interest} into at least 2-3 examples"
        if interest
        else "- Use universally relatable scenarios (technology, social media, daily life)"
    )
    return (
        "You are an expert educator who makes abstract ideas concrete through relatable examples.\n\n"
        "- Be specific; open with \"Imagine...\" or \"Think about...\"\n"
        "- Explain how each example shows the concept and connect it back to the core idea\n"
        "- Levels 6-7: everyday scenarios; 8-10: school, hobbies, community; 11-13: workplace, research, complex systems\n"
        f"{interest_line}\n"
        "- Build complexity across examples and include one surprising example\n\n"
        "Return a JSON object:\n"
        f'{{"type": "example", "content": "Short intro", "metadata": {{"topic": {json.dumps(topic)}, "difficulty": {difficulty}, '
        '"examples": [{"title": "Memorable title", "scenario": "The scenario", '
        '"explanation": "How it illustrates the concept", "connection": "Link to the core idea"}]}}'
    )


def examples_prompt(topic: str, difficulty: int, interest: Optional[str]) -> str:
    return (
        "Generate 3-4 concrete, engaging examples that illustrate the following concept.\n\n"
        f"Topic: {topic}\n"
        f"Difficulty Level: {difficulty}\n"
        f"Learner Interest: {interest or 'Not specified - use universal examples'}\n\n"
        f"Create examples that help the learner truly understand {topic} through concrete scenarios."
    )


def practice_system(topic: str, difficulty: int, interest: Optional[str]) -> str:
    return (
        "You are an expert tutor who writes practice problems that check and reinforce understanding.\n\n"
        "- Cover recall, application, analysis and, at higher levels, synthesis\n"
        f"- Use contexts related to the learner's interests ({interest or 'general'})\n"
        "- Explain the reasoning behind the correct answer and why distractors are wrong\n"
        f"- Difficulty {difficulty} on a 6-13 scale\n"
        "- 3-4 problems, exactly one correct option each, plausible distractors, no trick questions\n\n"
        "Return a JSON object:\n"
        f'{{"type": "practice", "content": "Short encouraging intro", "metadata": {{"topic": {json.dumps(topic)}, '
        f'"difficulty": {difficulty}, "practiceProblems": [{{"id": "1", "question": "Problem text", '
        '"options": ["A", "B", "C", "D"], "correctAnswer": 0, "explanation": "Detailed explanation"}]}}'
    )


def tutor_system(difficulty: int, interest: Optional[str]) -> str:
    return (
        "You are an expert AI tutor who turns any topic into a personalized, conversational lesson.\n\n"
        "- Adapt to the grade level (6-13): simple language for 6-7, subject terms for 8-10, "
        "technical depth for 11-13\n"
        "- Start with a relatable hook, break ideas into small chunks, use examples and analogies\n"
        "- Check understanding with follow-up questions and correct misconceptions gently\n\n"
        "Pick a response type: \"explanation\" (default), \"example\" (2-3 worked examples), "
        "\"practice\" (2-4 problems with feedback) or \"visual\" (describe diagrams and mental images).\n\n"
        "Return a JSON object:\n"
        f'{{"type": "explanation" | "example" | "practice" | "visual", "content": "Markdown response", '
        f'"metadata": {{"topic": "Current topic", "difficulty": {difficulty}, "examples": [], '
        '"practiceProblems": [{"id": "unique-id", "question": "Problem", "options": ["A", "B", "C", "D"], '
        '"correctAnswer": 0, "explanation": "Why"}]}, "suggestedTopics": ["Related topic"]}\n'
        f"Adapt examples to {interest or 'general interests'} and suggest 2-3 follow-up topics."
    )


def tutor_prompt(topic: Optional[str], question: str, difficulty: int, interest: Optional[str], context: Optional[List[ContextMessage]]) -> str:
    prompt = (
        f"Topic: {topic or 'User chosen topic'}\n"
        f"Current Difficulty Level: {difficulty} ({difficulty_band(difficulty)})\n"
        f"Learner Interest: {interest or 'Not specified'}\n\n"
        f"User's Question/Request: {question}"
    )
    if context:
        history = "\n".join(f"{m.role}: {m.content}" for m in context)
        prompt += f"\n\nConversation Context (most recent exchanges):\n{history}"
        prompt += "\n\nBased on this conversation history, provide a personalized response."
    return prompt


def summary_prompt(text: str) -> str:
    return (
        "Please provide a comprehensive summary of the following text. The summary should:\n"
        "- Capture the main ideas and key points\n"
        "- Be approximately 200-300 words\n"
        "- Be clear and concise\n\n"
        f"Text:\n{text}"
    )


ANALYSIS_PROMPTS: Tuple[Tuple[str, str, float, int], ...] = (
    (
        "keyConcepts",
        "Extract and explain the key concepts from the following text: the term, a clear definition, "
        "and an importance rating.\n\n"
        'Return a JSON array:\n[{"id": "unique-id", "term": "Concept name", "definition": "Clear definition", '
        '"importance": "high" | "medium" | "low"}]',
        0.5,
        400,
    ),
    (
        "questions",
        "Generate 8-12 questions that guide reading and test understanding of this text: factual (easy), "
        "comprehension (medium) and analysis (hard).\n\n"
        'Return a JSON array:\n[{"id": "unique-id", "question": "Question text", "answer": "Clear answer", '
        '"difficulty": "easy" | "medium" | "hard"}]',
        0.7,
        400,
    ),
    (
        "sections",
        "Identify the main sections of this text, each with a clear title and a 2-3 sentence summary.\n\n"
        'Return a JSON array:\n[{"title": "Section title", "content": "Brief summary"}]',
        0.5,
        300,
    ),
)
