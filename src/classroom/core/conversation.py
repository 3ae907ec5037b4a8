"""Conversation state machine: who owes the next reply to whom."""

import random
from dataclasses import dataclass
from typing import Optional

from classroom.core.state import STUDENT, TEACHER

IDLE = "idle"
TEACHER_EXPLAINING = "teacher_explaining"
TEACHER_ASKED_QUESTION = "teacher_asked_question"
STUDENT_ASKED_QUESTION = "student_asked_question"
STUDENT_ANSWERED = "student_answered"
STUDENT_REACTED = "student_reacted"

EXPLANATIONS_BEFORE_QUESTION = 2
STUDENT_REACTS_TO_EXPLANATION = 0.15
TEACHER_FOLLOWS_UP_ANSWER = 0.25
STUDENT_CHAINS_REACTION = 0.15


@dataclass
class ConversationTracker:
    state: str = IDLE
    pending: Optional[str] = None  # teacher/student
    question_asker_id: Optional[str] = None
    explain_count: int = 0  # teacher explanations since the last teacher question

    def reset(self) -> None:
        self.state = IDLE
        self.pending = None
        self.question_asker_id = None

    def can_ask_question(self) -> bool:
        return self.explain_count >= EXPLANATIONS_BEFORE_QUESTION

    def teacher_asked(self) -> None:
        self.state = TEACHER_ASKED_QUESTION
        self.pending = STUDENT
        self.explain_count = 0

    def teacher_explained(self, rng: random.Random) -> None:
        self.state = TEACHER_EXPLAINING
        self.explain_count += 1
        if rng.random() < STUDENT_REACTS_TO_EXPLANATION:
            self.pending = STUDENT

    def teacher_responded(self) -> None:
        self.state = IDLE
        self.pending = None
        self.question_asker_id = None

    def student_spoke(self, utterance_type: str, student_id: str, rng: random.Random) -> None:
        """Transition after a student-led (unprompted) line."""
        if utterance_type == "question":
            self.state = STUDENT_ASKED_QUESTION
            self.pending = TEACHER
            self.question_asker_id = student_id
        elif utterance_type in ("reaction", "agree"):
            self._reacted(rng)
        else:
            self.state = IDLE
            self.pending = None

    def student_responded(self, utterance_type: str, rng: random.Random) -> None:
        """Transition after a student line that answered a pending obligation."""
        if utterance_type == "answer":
            self.state = STUDENT_ANSWERED
            self.pending = TEACHER if rng.random() < TEACHER_FOLLOWS_UP_ANSWER else None
        else:
            self.state = STUDENT_REACTED
            self.pending = None

    def _reacted(self, rng: random.Random) -> None:
        self.state = STUDENT_REACTED
        self.pending = STUDENT if rng.random() < STUDENT_CHAINS_REACTION else None
