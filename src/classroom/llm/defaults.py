"""Canned lines used when the model returns nothing usable."""

import re
from typing import Dict

_TEACHER_PHASE_DEFAULTS: Dict[str, str] = {
    "start": "はい、それでは授業を始めましょう。",
    "intro": "今日は新しい内容を学んでいきます。",
    "development1": "ここが重要なポイントです。",
    "development2": "では、練習問題をやってみましょう。",
    "summary": "今日学んだことをまとめると...",
    "end": "今日はここまでです。お疲れ様でした。",
}

_PERSONALITY_DEFAULTS: Dict[str, Dict[str, str]] = {
    "active": {
        "question": "はい！先生、質問です！",
        "answer": "はい！分かります！",
        "mumble": "よし、分かった！",
        "reaction": "はい！",
        "agree": "うん、そうそう！",
    },
    "passive": {
        "question": "あの...ここが...",
        "answer": "...たぶん、そうだと思います...",
        "mumble": "...難しい...",
        "reaction": "...はい。",
        "agree": "...うん...",
    },
    "talkative": {
        "question": "ねえ先生、これってさ、どういうこと？",
        "answer": "あ、それ知ってる！えっとね...",
        "mumble": "へぇ〜、そうなんだ〜",
        "reaction": "えー、まじで？",
        "agree": "わかるわかる！私もそう思った！",
    },
    "serious": {
        "question": "先生、一つ確認させてください。",
        "answer": "はい、〜だと思います。",
        "mumble": "なるほど、そういうことか。",
        "reaction": "はい、理解しました。",
        "agree": "私もそう考えます。",
    },
    "easygoing": {
        "question": "えーと、先生、ここって...",
        "answer": "うーん、たぶん...これかな？",
        "mumble": "ふーん...",
        "reaction": "あー、うん。",
        "agree": "まあ、そうだね〜",
    },
    "rebellious": {
        "question": "なんでそうなるの？",
        "answer": "別に...知らない。",
        "mumble": "めんどくさ...",
        "reaction": "ふーん。",
        "agree": "まあね。",
    },
}

_GRADE_DEFAULTS: Dict[str, Dict[str, str]] = {
    "lower_elementary": {
        "question": "せんせい、これなあに？",
        "answer": "うん、わかった！",
        "mumble": "むずかしいなぁ...",
        "reaction": "はーい！",
        "agree": "うん、そうだよね！",
    },
    "elementary": {
        "question": "先生、ここがわかりません。",
        "answer": "はい、わかりました。",
        "mumble": "えーと...",
        "reaction": "はい！",
        "agree": "わたしもそう思う！",
    },
    "middle": {
        "question": "先生、質問いいですか？",
        "answer": "はい、そうだと思います。",
        "mumble": "なるほど...",
        "reaction": "はい。",
        "agree": "それな",
    },
    "high": {
        "question": "先生、質問があるのですが。",
        "answer": "はい、理解しました。",
        "mumble": "そういうことか...",
        "reaction": "はい。",
        "agree": "たしかに",
    },
}

_TEACHER_LIKE_PATTERNS = [
    re.compile(p)
    for p in (
        r"^はい、?それでは",
        r"^それでは",
        r"^では、?",
        r"^みなさん",
        r"^皆さん",
        r"説明しましょう",
        r"考えてみましょう",
        r"やってみましょう",
        r"確認しましょう",
        r"まとめると",
        r"宿題",
        r"この問題",
        r"分かる人",
        r"いい質問ですね",
        r"授業",
        r"先生は",
    )
]


def default_teacher_utterance(phase: str, action: str) -> str:
    if action == "ask_question":
        return "この問題、分かる人いますか？"
    if action == "respond_to_student":
        return "いい質問ですね。それについて説明しましょう。"
    return _TEACHER_PHASE_DEFAULTS.get(phase, _TEACHER_PHASE_DEFAULTS["end"])


def default_student_utterance(utterance_type: str, school_type: str, grade: int, personality: str | None = None) -> str:
    if personality in _PERSONALITY_DEFAULTS:
        return _PERSONALITY_DEFAULTS[personality].get(utterance_type, "はい。")
    if school_type == "elementary":
        key = "lower_elementary" if grade <= 2 else "elementary"
    elif school_type == "middle":
        key = "middle"
    else:
        key = "high"
    return _GRADE_DEFAULTS[key].get(utterance_type, "はい。")


def is_teacher_like(text: str) -> bool:
    """True when a student line sounds like the teacher talking."""
    return any(p.search(text) for p in _TEACHER_LIKE_PATTERNS)
