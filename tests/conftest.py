"""Shared fixtures for classroom simulator tests."""

import random
from typing import List

import pytest

from classroom.core.simulator import GenerationRequest, LessonObserver, LessonSimulator
from classroom.core.state import (
    CurriculumPhasePlan,
    LessonCurriculum,
    LessonSession,
    Student,
    Teacher,
    Utterance,
)
from classroom.core.time import ClockConfig, SimulationClock


class ScriptedRandom(random.Random):
    """Random source whose random() replays fixed values, then ``default``."""

    def __init__(self, values=(), default: float = 0.99):
        super().__init__(0)
        self.values = list(values)
        self.default = default

    def random(self) -> float:
        if self.values:
            return self.values.pop(0)
        return self.default


class StubGenerator:
    """Returns scripted lines (or one fixed line) and records every request."""

    def __init__(self, lines=None, fixed: str | None = None):
        self.lines = list(lines or [])
        self.fixed = fixed
        self.requests: List[GenerationRequest] = []

    async def generate(self, request: GenerationRequest) -> str:
        self.requests.append(request)
        if self.fixed is not None:
            return self.fixed
        if self.lines:
            return self.lines.pop(0)
        return f"{request.role}の発言その{len(self.requests)}です。"


class RecordingObserver(LessonObserver):
    def __init__(self):
        self.events = []

    async def on_utterance(self, utterance):
        self.events.append(("utterance", utterance))

    async def on_phase_change(self, phase):
        self.events.append(("phase", phase))

    async def on_time_update(self, elapsed_minutes):
        self.events.append(("time", elapsed_minutes))

    async def on_lesson_end(self):
        self.events.append(("end", None))

    def of(self, kind):
        return [payload for k, payload in self.events if k == kind]


async def no_sleep(_seconds):
    return None


def make_utterance(content: str, speaker_type: str = "teacher", speaker_id: str = "t1", phase: str = "intro", timestamp: float = 1.0) -> Utterance:
    return Utterance(
        id=f"u-{content}",
        session_id="s1",
        speaker_id=speaker_id,
        speaker_type=speaker_type,
        speaker_name="名前",
        content=content,
        timestamp=timestamp,
        phase=phase,
    )


@pytest.fixture
def teacher():
    return Teacher(id="t1", name="山田 花子", age=40, gender="female", personality="gentle")


@pytest.fixture
def students():
    personalities = ["passive", "talkative", "active", "serious", "easygoing", "rebellious"]
    return [
        Student(id=f"s{i}", name=f"生徒{i}", gender="male", personality=p, academic_level=3)
        for i, p in enumerate(personalities)
    ]


@pytest.fixture
def session(teacher, students):
    curriculum = LessonCurriculum(
        overview="一次関数の授業",
        goal_explanation="一次関数 y=ax+b の傾きと切片を理解する。",
        phases=[
            CurriculumPhasePlan(phase="intro", title="導入", objective="前回の比例を振り返ります。", checkpoint=""),
            CurriculumPhasePlan(phase="summary", title="まとめ", objective="", checkpoint="傾きと切片を説明できるか確認します。"),
        ],
    )
    return LessonSession(
        id="s1",
        school_type="middle",
        grade=2,
        subject="math",
        topic_name="一次関数",
        lesson_goal="一次関数の傾きと切片を説明できる",
        curriculum=curriculum,
        teacher=teacher,
        students=students,
        created_at="2026-01-01T00:00:00+00:00",
    )


@pytest.fixture
def observer():
    return RecordingObserver()


@pytest.fixture
def make_simulator(session, observer):
    def _make(generator=None, rng=None):
        return LessonSimulator(
            session,
            generator or StubGenerator(),
            observer,
            rng=rng or random.Random(7),
            clock=SimulationClock(ClockConfig(tick_seconds=3600)),
            sleep=no_sleep,
        )

    return _make
