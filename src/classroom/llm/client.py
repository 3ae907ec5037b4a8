"""LLM client for classroom lines using an Ollama-style generate endpoint."""

import logging
import os
import re
from typing import Dict

import httpx

from classroom.core.simulator import GenerationRequest
from classroom.core.state import TEACHER
from classroom.llm.defaults import default_student_utterance, default_teacher_utterance, is_teacher_like
from classroom.llm.prompts import build_goal_explanation_prompt, build_student_prompt, build_teacher_prompt

logger = logging.getLogger(__name__)

# mode -> (num_predict, temperature, sentences kept; 0 keeps the whole text)
MODES: Dict[str, tuple] = {
    "teacher": (520, 0.8, 8),
    "student": (180, 0.8, 1),
    "long": (900, 0.7, 0),
}

_SENTENCE = re.compile(r"[^。！？!?]+[。！？!?]?")
_SENTENCE_END = re.compile(r"[。！？!?]$")


def strip_think(text: str) -> str:
    if not isinstance(text, str):
        return ""
    return re.sub(r"<think>.*?</think>", "", text, flags=re.DOTALL | re.IGNORECASE).strip()


def collect_sentences(text: str, max_sentences: int) -> str:
    """Flatten to one line, drop quotes and keep the first sentences."""
    cleaned = re.sub(r"[\r\n]+", " ", text)
    cleaned = re.sub(r"[「」\"]", "", cleaned).strip()
    if not cleaned:
        return ""
    sentences = [s.strip() for s in _SENTENCE.findall(cleaned) if s.strip()][:max_sentences]
    if not sentences:
        return ""
    joined = " ".join(sentences)
    return joined if _SENTENCE_END.search(joined) else f"{joined}。"


def normalize_long_text(text: str) -> str:
    return re.sub(r"[「」\"]", "", text.replace("\r", "")).strip()


class HttpLLMClient:
    """Posts prompts to the generate endpoint and returns cleaned text."""

    def __init__(
        self,
        endpoint: str | None = None,
        model: str | None = None,
        timeout: float = 25.0,
        long_timeout: float = 45.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.endpoint = endpoint or os.getenv("CLASSROOM_LLM_ENDPOINT", "http://localhost:11434/api/generate")
        self.model = model or os.getenv("CLASSROOM_LLM_MODEL", "gemma3")
        self.timeout = float(os.getenv("CLASSROOM_LLM_TIMEOUT", timeout))
        self.long_timeout = float(os.getenv("CLASSROOM_LLM_TIMEOUT_LONG", long_timeout))
        self._client = httpx.AsyncClient(transport=transport)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def complete(self, prompt: str, mode: str = "student") -> str:
        """One generate call with a single retry at 1.5x timeout; '' on failure."""
        num_predict, temperature, max_sentences = MODES[mode]
        base_timeout = self.long_timeout if mode == "long" else self.timeout
        payload = {
            "model": self.model,
            "prompt": prompt,
            "stream": False,
            "options": {"temperature": temperature, "num_predict": num_predict},
        }
        for attempt in range(2):
            timeout = base_timeout if attempt == 0 else base_timeout * 1.5
            try:
                resp = await self._client.post(self.endpoint, json=payload, timeout=timeout)
                resp.raise_for_status()
                text = strip_think(resp.json().get("response", ""))
            except httpx.TimeoutException:
                if attempt == 0:
                    logger.warning("generate timed out after %.0fs, retrying once", timeout)
                    continue
                logger.error("generate timed out after retry")
                return ""
            except (httpx.HTTPError, ValueError) as exc:
                logger.error("generate failed: %s", exc)
                return ""
            if mode == "long":
                return normalize_long_text(text)
            return collect_sentences(text, max_sentences)
        return ""

    async def generate(self, request: GenerationRequest) -> str:
        if request.role == TEACHER:
            text = await self.complete(build_teacher_prompt(request), "teacher")
            return text or default_teacher_utterance(request.phase, request.action)

        student = request.speaker
        text = await self.complete(build_student_prompt(request), "student")
        if not text or is_teacher_like(text):
            return default_student_utterance(request.action, request.school_type, request.grade, student.personality)
        return text

    async def generate_goal_explanation(
        self, subject: str, school_type: str, grade: int, topic_name: str, lesson_goal: str
    ) -> str:
        prompt = build_goal_explanation_prompt(subject, school_type, grade, topic_name, lesson_goal)
        return await self.complete(prompt, "long")
