"""Session data model for the classroom simulation."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

TEACHER_PERSONALITIES = ("strict", "gentle", "passionate", "calm", "humorous")
TEACHING_STYLES = ("lecture", "dialogue", "practical")
STUDENT_PERSONALITIES = ("active", "passive", "talkative", "serious", "easygoing", "rebellious")
CONCENTRATION_LEVELS = ("low", "medium", "high")
FAMILY_ENVIRONMENTS = ("both_parents", "single_parent", "grandparents", "alone")
SUBJECTS = ("english", "japanese", "math", "history", "science", "geography")
SCHOOL_TYPES = ("elementary", "middle", "high")

TEACHER = "teacher"
STUDENT = "student"


@dataclass(frozen=True)
class Teacher:
    id: str
    name: str
    age: int
    gender: str  # male/female
    personality: str
    teaching_style: str = "lecture"
    family_environment: str = "both_parents"
    years_of_experience: int = 1


@dataclass(frozen=True)
class Student:
    id: str
    name: str
    gender: str
    personality: str
    academic_level: int = 3  # 1-5
    concentration: str = "medium"
    hobbies: List[str] = field(default_factory=list)
    favorite_subjects: List[str] = field(default_factory=list)
    weak_subjects: List[str] = field(default_factory=list)
    family_environment: str = "both_parents"
    seat_position: Dict[str, int] = field(default_factory=lambda: {"row": 1, "col": 1})


@dataclass
class CurriculumPhasePlan:
    phase: str
    title: str
    objective: str
    teacher_actions: List[str] = field(default_factory=list)
    student_actions: List[str] = field(default_factory=list)
    tasks: List[str] = field(default_factory=list)
    checkpoint: str = ""


@dataclass
class LessonCurriculum:
    overview: str = ""
    goal_explanation: str = ""
    phases: List[CurriculumPhasePlan] = field(default_factory=list)

    def plan_for(self, phase: str) -> Optional[CurriculumPhasePlan]:
        for plan in self.phases:
            if plan.phase == phase:
                return plan
        return None


@dataclass
class LessonSession:
    id: str
    school_type: str
    grade: int
    subject: str
    topic_name: str
    lesson_goal: str
    curriculum: LessonCurriculum
    teacher: Teacher
    students: List[Student] = field(default_factory=list)
    created_at: str = ""


@dataclass
class Utterance:
    id: str
    session_id: str
    speaker_id: str
    speaker_type: str  # teacher/student
    speaker_name: str
    content: str
    timestamp: float  # elapsed lesson minutes
    phase: str


@dataclass
class LessonState:
    phase: str
    elapsed_minutes: float
    utterances: List[Utterance] = field(default_factory=list)
