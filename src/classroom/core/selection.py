"""Weighted speaker selection among students."""

import random
from typing import List, Optional, Sequence

from classroom.core.state import Student

SPONTANEOUS_PERSONALITY_WEIGHTS = {
    "active": 2.5,
    "talkative": 2.0,
    "serious": 1.5,
    "passive": 0.3,
}
ANSWER_PERSONALITY_WEIGHTS = {
    "active": 2.0,
    "serious": 2.0,
    "passive": 0.5,
}


def spontaneous_weight(student: Student, last_speaker_id: Optional[str]) -> float:
    weight = SPONTANEOUS_PERSONALITY_WEIGHTS.get(student.personality, 1.0)
    if student.concentration == "high":
        weight *= 1.5
    if student.id == last_speaker_id:
        weight *= 0.2
    return weight


def answer_weight(student: Student, last_speaker_id: Optional[str]) -> float:
    weight = ANSWER_PERSONALITY_WEIGHTS.get(student.personality, 1.0)
    if student.academic_level >= 4:
        weight *= 2.0
    if student.id == last_speaker_id:
        weight *= 0.3
    return weight


def weighted_choice(students: Sequence[Student], weights: Sequence[float], rng: random.Random) -> Student:
    """Subtract weights from a uniform draw until it is used up; first student on a miss."""
    remaining = rng.random() * sum(w for w in weights if w > 0)
    for student, weight in zip(students, weights):
        if weight <= 0:
            continue
        remaining -= weight
        if remaining <= 0:
            return student
    return students[0]


def select_speaker(students: Sequence[Student], last_speaker_id: Optional[str], rng: random.Random) -> Student:
    weights: List[float] = [spontaneous_weight(s, last_speaker_id) for s in students]
    return weighted_choice(students, weights, rng)


def select_answerer(students: Sequence[Student], last_speaker_id: Optional[str], rng: random.Random) -> Student:
    weights: List[float] = [answer_weight(s, last_speaker_id) for s in students]
    return weighted_choice(students, weights, rng)
