"""
Answer checking for exercise sessions.

An exact match after normalization is accepted locally. Anything else goes to
an optional semantic evaluator (Gemini), which accepts typos, synonyms and
alternative meanings.
"""
import json
import logging
import time
from typing import Callable, Optional, Tuple

import requests

from lingodeck.core.config import settings
from lingodeck.core.exceptions import UpstreamServiceError
from lingodeck.models.enums import AnswerType
from lingodeck.schemas.exercise import AnswerResult
from lingodeck.schemas.practice import PracticeItem
from lingodeck.utils.text_utils import normalize_answer

logger = logging.getLogger(__name__)

UNVERIFIED_FEEDBACK = "Unable to verify answer."

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"

EVALUATION_SYSTEM_INSTRUCTION = "Return valid json only."

EVALUATION_PROMPT = """
Expected Translation: "{correct_answer}"
User Answer: "{user_answer}"
Language: {language}

Is the user's answer a valid translation? Be GENEROUS - accept:
- Minor typos and spelling variations
- Synonyms and semantically equivalent words
- Alternative meanings (e.g., "salaam" = both "peace" AND "hello")
- Greetings used interchangeably (hello/hi/hey, goodbye/bye)
- Different but correct translations for the same word

Mark correct if the user's answer is ANY valid translation of the word.

Return ONLY JSON:
{{
  "correct": boolean,
  "feedback": "Brief explanation (max 10 words)"
}}
"""


def expected_answer(item: PracticeItem) -> str:
    """The text the learner must produce for the item's answer type."""
    if item.answer_type == AnswerType.TEXT_TRANSLATION:
        return item.translation
    if item.answer_type == AnswerType.TRANSLITERATION and item.transliteration:
        return item.transliteration
    return item.target_text


class GeminiAnswerEvaluator:
    """
    Semantic answer evaluation through the Gemini generateContent API.

    Transient failures are retried with exponential backoff. Authentication
    failures are not retried. Every failure surfaces as UpstreamServiceError.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model_name: Optional[str] = None,
        max_retries: Optional[int] = None,
        base_delay_ms: Optional[int] = None,
        sleep: Callable[[float], None] = time.sleep,
        timeout: int = 30,
    ):
        self.api_key = api_key if api_key is not None else settings.google_gemini_api_key
        self.model_name = model_name or settings.gemini_model_name
        self.max_retries = max_retries if max_retries is not None else settings.answer_evaluation_max_retries
        self.base_delay_ms = base_delay_ms if base_delay_ms is not None else settings.answer_evaluation_base_delay_ms
        self.sleep = sleep
        self.timeout = timeout

    def evaluate(self, user_answer: str, correct_answer: str, language: str) -> Tuple[bool, Optional[str]]:
        """
        Ask the model whether user_answer is a valid translation.

        Returns:
            Tuple of (correct, short feedback)

        Raises:
            UpstreamServiceError: If the API is not configured or keeps failing
        """
        if not self.api_key:
            raise UpstreamServiceError("Google Gemini API key not configured")

        prompt = EVALUATION_PROMPT.format(
            correct_answer=correct_answer,
            user_answer=user_answer,
            language=language,
        )

        last_error: Optional[Exception] = None
        for attempt in range(self.max_retries):
            try:
                return self._call(prompt)
            except requests.exceptions.HTTPError as e:
                status_code = e.response.status_code if e.response is not None else None
                if status_code in (401, 403):
                    logger.error(f"Gemini API rejected the API key (status {status_code})")
                    raise UpstreamServiceError("Gemini API authentication failed") from e
                last_error = e
            except (requests.exceptions.RequestException, ValueError) as e:
                last_error = e

            logger.warning(f"Gemini API attempt {attempt + 1} failed: {str(last_error)}")
            if attempt < self.max_retries - 1:
                self.sleep(self.base_delay_ms * (2 ** attempt) / 1000)

        raise UpstreamServiceError(f"Answer evaluation failed: {str(last_error)}") from last_error

    def _call(self, prompt: str) -> Tuple[bool, Optional[str]]:
        payload = {
            "contents": [{
                "parts": [{
                    "text": prompt
                }]
            }],
            "systemInstruction": {
                "parts": [{
                    "text": EVALUATION_SYSTEM_INSTRUCTION
                }]
            },
            "generationConfig": {
                "temperature": 0.2,
                "maxOutputTokens": 256,
                "responseMimeType": "application/json",
            }
        }

        response = requests.post(
            f"{GEMINI_BASE_URL}/{self.model_name}:generateContent?key={self.api_key}",
            json=payload,
            headers={"Content-Type": "application/json"},
            timeout=self.timeout
        )
        response.raise_for_status()
        data = response.json()
        if not isinstance(data, dict):
            raise ValueError("LLM response is not an object")

        candidates = data.get("candidates") or []
        if not isinstance(candidates, list) or not candidates or not isinstance(candidates[0], dict):
            raise ValueError("LLM response missing candidates")
        content = candidates[0].get("content")
        parts = content.get("parts") if isinstance(content, dict) else None
        if not isinstance(parts, list) or not parts or not isinstance(parts[0], dict):
            raise ValueError("LLM response missing content or parts")

        text = parts[0].get("text")
        if not isinstance(text, str):
            raise ValueError("LLM response part has no text")
        text = text.strip()
        if text.startswith("```"):
            # Strip markdown code fences
            lines = text.split("\n")
            text = "\n".join(lines[1:-1]) if len(lines) > 2 else ""

        result = json.loads(text)
        if not isinstance(result, dict) or not isinstance(result.get("correct"), bool):
            raise ValueError("LLM response has no boolean 'correct' field")
        feedback = result.get("feedback")
        return result["correct"], feedback if isinstance(feedback, str) else None


class AnswerChecker:
    """
    Decides whether an answer is correct.

    Args:
        evaluator: Optional semantic evaluator consulted when the exact
            match fails. Without one, a mismatch is simply incorrect.
    """

    def __init__(self, evaluator: Optional[GeminiAnswerEvaluator] = None):
        self.evaluator = evaluator

    def check(self, item: PracticeItem, user_answer: str) -> AnswerResult:
        expected = expected_answer(item)
        submitted = (user_answer or "").strip()

        if normalize_answer(submitted) == normalize_answer(expected):
            return AnswerResult(
                item_id=item.id,
                correct=True,
                user_answer=submitted,
                correct_answer=expected,
            )

        if not submitted or self.evaluator is None:
            return AnswerResult(
                item_id=item.id,
                correct=False,
                user_answer=submitted,
                correct_answer=expected,
            )

        try:
            correct, feedback = self.evaluator.evaluate(submitted, expected, item.language.value)
        except UpstreamServiceError as e:
            logger.warning(f"Semantic evaluation failed for item {item.id}: {str(e)}")
            correct, feedback = False, UNVERIFIED_FEEDBACK

        return AnswerResult(
            item_id=item.id,
            correct=correct,
            user_answer=submitted,
            correct_answer=expected,
            feedback=feedback,
        )
