"""Chooses the rhetorical role of the next turn."""

import random
from typing import Sequence

from classroom.core.conversation import STUDENT_REACTED, TEACHER_ASKED_QUESTION
from classroom.core.state import STUDENT, Student, Utterance

EXPLAIN = "explain"
ASK_QUESTION = "ask_question"
RESPOND_TO_CLASS = "respond_to_class"
RESPOND_TO_STUDENT = "respond_to_student"

QUESTION = "question"
ANSWER = "answer"
MUMBLE = "mumble"
REACTION = "reaction"
AGREE = "agree"

TEACHER_LEAD_PROBABILITY = {
    "start": 0.9,
    "intro": 0.9,
    "development1": 0.8,
    "development2": 0.75,
    "summary": 0.9,
    "end": 0.9,
}

# phase -> (question threshold, respond_to_class threshold)
_TEACHER_ACTION_TABLE = {
    "start": (0.0, 0.0),
    "intro": (0.15, 0.0),
    "development1": (0.20, 0.35),
    "development2": (0.25, 0.40),
    "summary": (0.0, 0.35),
    "end": (0.0, 0.35),
}


def teacher_lead_probability(phase: str) -> float:
    return TEACHER_LEAD_PROBABILITY.get(phase, 0.8)


def should_force_teacher(history: Sequence[Utterance]) -> bool:
    """Two student lines in a row hand the floor back to the teacher."""
    recent = history[-2:]
    return len(recent) == 2 and all(u.speaker_type == STUDENT for u in recent)


def select_teacher_action(phase: str, can_ask_question: bool, rng: random.Random) -> str:
    roll = rng.random()
    question_below, respond_below = _TEACHER_ACTION_TABLE.get(phase, (0.0, 0.0))
    if can_ask_question and roll < question_below:
        return ASK_QUESTION
    if roll < respond_below:
        return RESPOND_TO_CLASS
    return EXPLAIN


def select_student_type(phase: str, student: Student, rng: random.Random) -> str:
    roll = rng.random()
    if phase in ("development1", "development2"):
        # keep questions rare so the teacher keeps the floor
        if student.personality == "active" and roll < 0.15:
            return QUESTION
        if roll < 0.08:
            return QUESTION
        if roll < 0.55:
            return MUMBLE
        return REACTION
    if phase in ("summary", "end"):
        if roll < 0.1:
            return QUESTION
        if roll < 0.7:
            return REACTION
        return AGREE
    if roll < 0.05:
        return QUESTION
    if roll < 0.45:
        return MUMBLE
    return REACTION


def select_spontaneous_type(phase: str, conversation_state: str, student: Student, rng: random.Random) -> str:
    if conversation_state == STUDENT_REACTED:
        return AGREE if rng.random() < 0.6 else MUMBLE
    return select_student_type(phase, student, rng)


def select_response_type(conversation_state: str, rng: random.Random) -> str:
    if conversation_state == TEACHER_ASKED_QUESTION:
        return ANSWER
    if conversation_state == STUDENT_REACTED:
        return AGREE if rng.random() < 0.5 else REACTION
    return REACTION
