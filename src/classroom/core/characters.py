"""Random teacher and student generation for new sessions."""

import random
import uuid
from typing import List, Optional

from classroom.core.state import (
    CONCENTRATION_LEVELS,
    FAMILY_ENVIRONMENTS,
    STUDENT_PERSONALITIES,
    SUBJECTS,
    TEACHER_PERSONALITIES,
    TEACHING_STYLES,
    Student,
    Teacher,
)

LAST_NAMES = ["佐藤", "鈴木", "高橋", "田中", "伊藤", "渡辺", "山本", "中村", "小林", "加藤", "吉田", "山田"]
MALE_FIRST_NAMES = ["太郎", "翔太", "大輝", "蓮", "悠真", "健太", "拓海", "陽斗", "颯", "湊"]
FEMALE_FIRST_NAMES = ["花子", "美咲", "結衣", "陽菜", "葵", "さくら", "凛", "芽依", "彩花", "愛"]
HOBBIES = ["サッカー", "読書", "ゲーム", "ピアノ", "絵を描くこと", "料理", "野球", "ダンス", "アニメ", "水泳", "将棋", "写真"]


def _name(gender: str, rng: random.Random) -> str:
    first = rng.choice(MALE_FIRST_NAMES if gender == "male" else FEMALE_FIRST_NAMES)
    return f"{rng.choice(LAST_NAMES)} {first}"


def _sample(rng: random.Random, items: List[str], low: int, high: int) -> List[str]:
    count = min(len(items), rng.randint(low, high))
    return rng.sample(items, count)


def generate_teacher(rng: Optional[random.Random] = None) -> Teacher:
    rng = rng or random.Random()
    gender = rng.choice(["male", "female"])
    age = rng.randint(23, 60)
    return Teacher(
        id=str(uuid.uuid4()),
        name=_name(gender, rng),
        age=age,
        gender=gender,
        personality=rng.choice(TEACHER_PERSONALITIES),
        teaching_style=rng.choice(TEACHING_STYLES),
        family_environment=rng.choice(FAMILY_ENVIRONMENTS),
        years_of_experience=min(age - 22, rng.randint(1, 35)),
    )


def generate_students(count: int = 6, rng: Optional[random.Random] = None) -> List[Student]:
    """One student per personality (cycling past six), balanced genders and levels, seated in one row."""
    rng = rng or random.Random()
    genders = ["male", "female"] * ((count + 1) // 2)
    rng.shuffle(genders)
    levels = [1, 2, 3, 3, 4, 5] * ((count + 5) // 6)
    rng.shuffle(levels)

    students: List[Student] = []
    for i in range(count):
        favorites = _sample(rng, list(SUBJECTS), 1, 2)
        remaining = [s for s in SUBJECTS if s not in favorites]
        students.append(
            Student(
                id=str(uuid.uuid4()),
                name=_name(genders[i], rng),
                gender=genders[i],
                personality=STUDENT_PERSONALITIES[i % len(STUDENT_PERSONALITIES)],
                academic_level=levels[i],
                concentration=rng.choice(CONCENTRATION_LEVELS),
                hobbies=_sample(rng, HOBBIES, 1, 3),
                favorite_subjects=favorites,
                weak_subjects=_sample(rng, remaining, 0, 2),
                family_environment=rng.choice(FAMILY_ENVIRONMENTS),
                seat_position={"row": 1, "col": i + 1},
            )
        )
    return students
