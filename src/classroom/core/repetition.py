"""Repetition guard: keeps generated lines from echoing the recent transcript."""

import logging
import re
from typing import Dict, List, Optional, Sequence, Set

from classroom.core.state import TEACHER, Utterance

logger = logging.getLogger(__name__)

RECENT_WINDOW = 8
TEACHER_WINDOW = 6
NGRAM_SIZE = 3
SIMILARITY_THRESHOLD = 0.82
MIN_SIMILARITY_LENGTH = 14

_QUOTES = re.compile(r"[「」\"'`]")
_PUNCTUATION = re.compile(r"[。！？!?、,.\s]")

TEACHER_FALLBACKS: Dict[str, List[str]] = {
    "start": [
        "では、今日の授業を始めます。",
        "それでは準備ができたので始めましょう。",
        "みなさん、今日もよろしくお願いします。",
    ],
    "intro": [
        "まずは今日の学習内容を確認しましょう。",
        "導入として前回のポイントを振り返ります。",
        "今日のテーマを最初に押さえましょう。",
    ],
    "development1": [
        "ここは特に大事なので丁寧に確認します。",
        "今の説明をもとに次の例を見ていきます。",
        "この考え方を使って別の問題にも挑戦しましょう。",
    ],
    "development2": [
        "それでは練習問題に取り組みましょう。",
        "今の内容を使って自分で解いてみてください。",
        "手順を意識してもう一問やってみましょう。",
    ],
    "summary": [
        "最後に今日のポイントを整理します。",
        "まとめとして重要語句を確認しましょう。",
        "今日学んだ内容を一度振り返ります。",
    ],
    "end": [
        "今日の授業はここまでです。",
        "本日の学習は以上です。お疲れさまでした。",
        "次回までに今日の内容を復習しておいてください。",
    ],
}

STUDENT_FALLBACKS: List[str] = [
    "なるほど、少し分かってきた。",
    "えっと、もう一度考えてみます。",
    "今の説明でイメージできました。",
    "ここ、ちょっと難しいです。",
    "分かった気がします。",
    "もう少しで解けそうです。",
    "はい、考えてみます。",
    "ありがとうございます、理解できました。",
]


def normalize(text: str) -> str:
    """Strip quotes, punctuation and whitespace, then case-fold."""
    text = _QUOTES.sub("", text)
    text = _PUNCTUATION.sub("", text)
    return text.casefold().strip()


def ngram_set(text: str, n: int = NGRAM_SIZE) -> Set[str]:
    if len(text) < n:
        return {text}
    return {text[i : i + n] for i in range(len(text) - n + 1)}


def ngram_jaccard(a: str, b: str, n: int = NGRAM_SIZE) -> float:
    a_grams = ngram_set(a, n)
    b_grams = ngram_set(b, n)
    if not a_grams or not b_grams:
        return 0.0
    intersection = len(a_grams & b_grams)
    union = len(a_grams) + len(b_grams) - intersection
    return intersection / union if union else 0.0


def is_recent_duplicate(content: str, history: Sequence[Utterance], window: int = RECENT_WINDOW) -> bool:
    normalized = normalize(content)
    if not normalized:
        return True
    return any(normalize(u.content) == normalized for u in history[-window:])


def is_teacher_repeated(content: str, history: Sequence[Utterance], window: int = TEACHER_WINDOW) -> bool:
    """Exact or near (3-gram Jaccard) match against the teacher's latest lines."""
    normalized = normalize(content)
    if not normalized:
        return True
    recent = [u for u in history if u.speaker_type == TEACHER][-window:]
    for u in recent:
        previous = normalize(u.content)
        if previous == normalized:
            return True
        if len(normalized) < MIN_SIMILARITY_LENGTH or len(previous) < MIN_SIMILARITY_LENGTH:
            continue
        if ngram_jaccard(normalized, previous) >= SIMILARITY_THRESHOLD:
            return True
    return False


def _is_rejected(content: str, speaker_type: str, history: Sequence[Utterance]) -> bool:
    if is_recent_duplicate(content, history):
        return True
    return speaker_type == TEACHER and is_teacher_repeated(content, history)


def fallback_content(
    speaker_type: str,
    phase: str,
    original: str,
    history: Sequence[Utterance],
    cursors: Dict[str, int],
) -> str:
    """Rotate through the fallback pool; returns ``original`` when nothing fits."""
    pool = TEACHER_FALLBACKS.get(phase, TEACHER_FALLBACKS["end"]) if speaker_type == TEACHER else STUDENT_FALLBACKS
    start = cursors.get(speaker_type, 0)
    original_normalized = normalize(original)
    for offset in range(len(pool)):
        candidate = pool[(start + offset) % len(pool)]
        if is_recent_duplicate(candidate, history):
            continue
        if normalize(candidate) == original_normalized:
            continue
        cursors[speaker_type] = start + offset + 1
        return candidate
    return original


def screen(
    content: str,
    speaker_type: str,
    phase: str,
    history: Sequence[Utterance],
    cursors: Dict[str, int],
) -> Optional[str]:
    """Return the text to emit, a fallback phrase, or None to drop the turn."""
    if not _is_rejected(content, speaker_type, history):
        return content
    replacement = fallback_content(speaker_type, phase, content, history, cursors)
    if _is_rejected(replacement, speaker_type, history):
        logger.debug("dropping repeated %s line: %s", speaker_type, content)
        return None
    return replacement
