"""Scripted classroom lines and the text handed to the generator."""

from typing import Sequence

from classroom.core.state import TEACHER, LessonCurriculum, Utterance

OPENING_CALLS = ("起立！", "礼！", "着席！")

_EXPECTED_TEACHER = {
    "ask_question": "直前説明に関連する確認質問を1つ出し、生徒の応答を引き出す",
    "respond_to_student": "生徒の直前発言に具体的に返答し、次の学習行動につなげる",
    "respond_to_class": "生徒の反応を拾って補足し、次の活動へつなげる",
    "explain": "前の流れを受けて説明を前進させ、授業目標に近づける",
}

_EXPECTED_STUDENT = {
    "answer": "教員の直前質問に短く具体的に答える",
    "question": "直前説明の不明点を1点だけ質問する",
    "agree": "直前発話に短く同調する",
    "reaction": "直前発話への短い反応を返す",
    "mumble": "授業内容に関連する独り言を短く述べる",
}


def goal_announcement(lesson_goal: str) -> str:
    return f"今日の目標は「{lesson_goal}」です。"


def transition_message(phase: str, lesson_goal: str, curriculum: LessonCurriculum) -> str:
    plan = curriculum.plan_for(phase)
    objective = plan.objective if plan and plan.objective else ""
    checkpoint = plan.checkpoint if plan and plan.checkpoint else ""
    if phase == "start":
        return f"それでは始めます。今日の目標は「{lesson_goal}」です。"
    if phase == "intro":
        return f"導入に入ります。{objective or '前提となる内容を確認してから本題に入ります。'}"
    if phase == "development1":
        return f"展開に入ります。{objective or '大事なポイントを順番に説明します。'}"
    if phase == "development2":
        return f"次は演習です。{objective or '今学んだ内容を使って考えてみましょう。'}"
    if phase == "summary":
        return f"最後にまとめです。{checkpoint or '今日の目標に対して何ができるようになったか確認します。'}"
    return f"授業を終えます。{checkpoint or '学んだことを振り返って次につなげましょう。'}"


def expected_teacher_response(action: str) -> str:
    return _EXPECTED_TEACHER.get(action, _EXPECTED_TEACHER["explain"])


def expected_student_response(utterance_type: str) -> str:
    return _EXPECTED_STUDENT.get(utterance_type, _EXPECTED_STUDENT["mumble"])


def curriculum_excerpt(curriculum: LessonCurriculum, phase: str) -> str:
    plan = curriculum.plan_for(phase)
    if plan is None:
        return "このフェーズで必要な学習活動を進め、目標達成につなげる。"
    return "\n".join(
        [
            f"本時目標の詳細説明: {curriculum.goal_explanation}",
            f"フェーズ名: {plan.title}",
            f"到達目標: {plan.objective}",
            f"教員の活動: {' / '.join(plan.teacher_actions)}",
            f"生徒の活動: {' / '.join(plan.student_actions)}",
            f"具体的な問題・課題: {' / '.join(plan.tasks)}",
            f"確認観点: {plan.checkpoint}",
        ]
    )


def _role_label(utterance: Utterance) -> str:
    return "教員" if utterance.speaker_type == TEACHER else "生徒"


def format_clock(minutes: float) -> str:
    whole = int(minutes)
    seconds = int((minutes - whole) * 60)
    return f"{whole:02d}:{seconds:02d}"


def format_history(history: Sequence[Utterance], count: int) -> str:
    lines = []
    for u in history[-count:]:
        lines.append(f"[{format_clock(u.timestamp)}]({u.phase}) {_role_label(u)} {u.speaker_name}: {u.content}")
    return "\n".join(lines)


def format_latest(history: Sequence[Utterance]) -> str:
    if not history:
        return ""
    last = history[-1]
    return f"{_role_label(last)} {last.speaker_name}: {last.content}"
