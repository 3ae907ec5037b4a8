"""Manage stored sessions and their running simulators."""

import logging
import random
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from classroom.core.characters import generate_students, generate_teacher
from classroom.core.simulator import LessonObserver, LessonSimulator
from classroom.core.state import SCHOOL_TYPES, SUBJECTS, LessonSession
from classroom.core.time import ClockConfig, SimulationClock
from classroom.llm.client import HttpLLMClient
from classroom.persistence.session_io import (
    data_dir,
    delete_session,
    dict_to_curriculum,
    dict_to_student,
    dict_to_teacher,
    is_valid_session_id,
    list_sessions,
    load_session,
    save_session,
)

logger = logging.getLogger(__name__)


class SessionNotFoundError(LookupError):
    pass


def fallback_goal_explanation(topic_name: str, lesson_goal: str) -> str:
    return (
        f"この授業では「{topic_name}」を扱い、目標である「{lesson_goal}」に到達することを目指します。"
        "導入で前提知識を確認し、展開で具体例と問題演習を通して理解を深め、最後に要点を整理して定着させます。"
    )


class ClassroomManager:
    def __init__(self, base_dir: Path | None = None, llm: HttpLLMClient | None = None, clock_config: ClockConfig | None = None):
        self.base_dir = base_dir or data_dir()
        self.llm = llm or HttpLLMClient()
        self.clock_config = clock_config or ClockConfig()
        self.simulators: Dict[str, LessonSimulator] = {}

    def list_sessions(self) -> List[LessonSession]:
        return list_sessions(self.base_dir)

    def get_session(self, session_id: str) -> LessonSession:
        session = load_session(session_id, self.base_dir)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    async def create_session(self, payload: Dict[str, Any], rng: Optional[random.Random] = None) -> LessonSession:
        """Build a session from a request body; missing characters are generated."""
        rng = rng or random.Random()
        teacher = dict_to_teacher(payload["teacher"]) if payload.get("teacher") else generate_teacher(rng)
        if payload.get("students"):
            students = [dict_to_student(s) for s in payload["students"]]
        else:
            students = generate_students(6, rng)
        curriculum = dict_to_curriculum(payload.get("curriculum") or {})
        subject = payload.get("subject", "math")
        school_type = payload.get("school_type", "middle")
        grade = int(payload.get("grade", 1))
        topic_name = payload.get("topic_name", "基礎学習")
        lesson_goal = payload.get("lesson_goal", "基礎的な内容を理解し、説明できる")
        session_id = payload.get("id") or str(uuid.uuid4())
        if not is_valid_session_id(session_id):
            raise ValueError(f"invalid session id: {session_id!r}")
        if subject not in SUBJECTS:
            raise ValueError(f"unknown subject: {subject!r}")
        if school_type not in SCHOOL_TYPES:
            raise ValueError(f"unknown school type: {school_type!r}")
        if not curriculum.goal_explanation:
            generated = await self.llm.generate_goal_explanation(subject, school_type, grade, topic_name, lesson_goal)
            curriculum.goal_explanation = generated or fallback_goal_explanation(topic_name, lesson_goal)

        session = LessonSession(
            id=session_id,
            school_type=school_type,
            grade=grade,
            subject=subject,
            topic_name=topic_name,
            lesson_goal=lesson_goal,
            curriculum=curriculum,
            teacher=teacher,
            students=students,
            created_at=datetime.now(timezone.utc).isoformat(),
        )
        save_session(session, self.base_dir)
        logger.info("created session %s (%s %s年 %s)", session.id, school_type, grade, subject)
        return session

    def delete_session(self, session_id: str) -> None:
        self.close_simulator(session_id)
        if not delete_session(session_id, self.base_dir):
            raise SessionNotFoundError(session_id)

    def open_simulator(self, session_id: str, observer: LessonObserver) -> LessonSimulator:
        """One simulator per session; reopening replaces the previous one."""
        session = self.get_session(session_id)
        self.close_simulator(session_id)
        clock = SimulationClock(ClockConfig(self.clock_config.tick_seconds, self.clock_config.time_scale))
        simulator = LessonSimulator(session, self.llm, observer, clock=clock)
        self.simulators[session_id] = simulator
        return simulator

    def get_simulator(self, session_id: str) -> Optional[LessonSimulator]:
        return self.simulators.get(session_id)

    def close_simulator(self, session_id: str) -> None:
        simulator = self.simulators.pop(session_id, None)
        if simulator is not None:
            simulator.stop()
