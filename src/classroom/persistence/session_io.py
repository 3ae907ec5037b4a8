"""Persistence helpers for lesson sessions."""

import json
import os
import re
import shutil
from dataclasses import asdict
from pathlib import Path
from typing import Dict, List, Optional

from classroom.core.state import CurriculumPhasePlan, LessonCurriculum, LessonSession, Student, Teacher


def data_dir() -> Path:
    return Path(os.getenv("CLASSROOM_DATA_DIR", "data"))


_SESSION_ID = re.compile(r"[A-Za-z0-9_-]+")


def is_valid_session_id(session_id: str) -> bool:
    """Ids name one directory under the data dir: letters, digits, '-' and '_' only."""
    return isinstance(session_id, str) and _SESSION_ID.fullmatch(session_id) is not None


def session_dir(session_id: str, base_dir: Path | None = None) -> Path:
    if not is_valid_session_id(session_id):
        raise ValueError(f"invalid session id: {session_id!r}")
    return Path(base_dir or data_dir()) / "sessions" / session_id


def dict_to_teacher(d: Dict) -> Teacher:
    return Teacher(
        id=d["id"],
        name=d.get("name", d["id"]),
        age=int(d.get("age", 35)),
        gender=d.get("gender", "female"),
        personality=d.get("personality", "gentle"),
        teaching_style=d.get("teaching_style", "lecture"),
        family_environment=d.get("family_environment", "both_parents"),
        years_of_experience=int(d.get("years_of_experience", 1)),
    )


def dict_to_student(d: Dict) -> Student:
    return Student(
        id=d["id"],
        name=d.get("name", d["id"]),
        gender=d.get("gender", "female"),
        personality=d.get("personality", "easygoing"),
        academic_level=int(d.get("academic_level", 3)),
        concentration=d.get("concentration", "medium"),
        hobbies=d.get("hobbies", []),
        favorite_subjects=d.get("favorite_subjects", []),
        weak_subjects=d.get("weak_subjects", []),
        family_environment=d.get("family_environment", "both_parents"),
        seat_position=d.get("seat_position", {"row": 1, "col": 1}),
    )


def dict_to_curriculum(d: Dict) -> LessonCurriculum:
    return LessonCurriculum(
        overview=d.get("overview", ""),
        goal_explanation=d.get("goal_explanation", ""),
        phases=[
            CurriculumPhasePlan(
                phase=p["phase"],
                title=p.get("title", p["phase"]),
                objective=p.get("objective", ""),
                teacher_actions=p.get("teacher_actions", []),
                student_actions=p.get("student_actions", []),
                tasks=p.get("tasks", []),
                checkpoint=p.get("checkpoint", ""),
            )
            for p in d.get("phases", [])
        ],
    )


def dict_to_session(d: Dict) -> LessonSession:
    return LessonSession(
        id=d["id"],
        school_type=d.get("school_type", "middle"),
        grade=int(d.get("grade", 1)),
        subject=d.get("subject", "math"),
        topic_name=d.get("topic_name", "基礎学習"),
        lesson_goal=d.get("lesson_goal", "基礎的な内容を理解し、説明できる"),
        curriculum=dict_to_curriculum(d.get("curriculum", {})),
        teacher=dict_to_teacher(d["teacher"]),
        students=[dict_to_student(s) for s in d.get("students", [])],
        created_at=d.get("created_at", ""),
    )


def save_session(session: LessonSession, base_dir: Path | None = None) -> None:
    path = session_dir(session.id, base_dir) / "session.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(asdict(session), f, ensure_ascii=False, indent=2)


def load_session(session_id: str, base_dir: Path | None = None) -> Optional[LessonSession]:
    if not is_valid_session_id(session_id):
        return None
    path = session_dir(session_id, base_dir) / "session.json"
    if not path.exists():
        return None
    with path.open("r", encoding="utf-8") as f:
        return dict_to_session(json.load(f))


def list_sessions(base_dir: Path | None = None) -> List[LessonSession]:
    """All stored sessions, newest first."""
    root = Path(base_dir or data_dir()) / "sessions"
    if not root.exists():
        return []
    sessions = []
    for p in root.iterdir():
        if p.is_dir() and is_valid_session_id(p.name):
            session = load_session(p.name, base_dir)
            if session is not None:
                sessions.append(session)
    sessions.sort(key=lambda s: s.created_at, reverse=True)
    return sessions


def delete_session(session_id: str, base_dir: Path | None = None) -> bool:
    if not is_valid_session_id(session_id):
        return False
    path = session_dir(session_id, base_dir)
    if not (path / "session.json").exists():
        return False
    shutil.rmtree(path)
    return True
