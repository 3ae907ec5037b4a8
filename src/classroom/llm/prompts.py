"""Prompt templates for teacher and student lines."""

from typing import Dict, Tuple

SUBJECT_LABELS: Dict[str, str] = {
    "english": "英語",
    "japanese": "国語",
    "math": "数学",
    "history": "歴史",
    "science": "理科",
    "geography": "地理",
}

PHASE_LABELS: Dict[str, str] = {
    "start": "開始",
    "intro": "導入",
    "development1": "展開1",
    "development2": "展開2",
    "summary": "まとめ",
    "end": "終了",
}

PERSONALITY_LABELS: Dict[str, str] = {
    "strict": "厳格",
    "gentle": "温厚",
    "passionate": "情熱的",
    "calm": "冷静",
    "humorous": "ユーモラス",
    "active": "積極的",
    "passive": "消極的",
    "talkative": "おしゃべり",
    "serious": "真面目",
    "easygoing": "マイペース",
    "rebellious": "反抗的",
}

PERSONALITY_BEHAVIORS: Dict[str, str] = {
    "active": "積極的で元気よく発言する。手を挙げて答えたがる。声が大きめ。「はい！」「分かります！」など自信を持って話す。",
    "passive": "控えめで小声で話す。自分から発言せず、指名されたときだけ答える。「...です」「たぶん...」など自信なさげ。",
    "talkative": "よく喋る。思ったことをすぐ口に出す。「ねえねえ」「あのさ」など話しかける。脱線することも。",
    "serious": "真面目で丁寧に話す。正確に答えようとする。「〜だと思います」「〜ではないでしょうか」など論理的。",
    "easygoing": "のんびりマイペース。急がない。「えーと」「うーん」が多い。焦らず自分のペースで話す。",
    "rebellious": "反抗的でつっけんどん。「別に」「知らない」「めんどくさい」など投げやり。敬語を使わないことも。",
}

TEACHER_INSTRUCTIONS: Dict[str, str] = {
    "explain": """あなたは教員として、下記カリキュラムの「具体的な問題・課題」に基づいて{subject}の知識を教えてください。
- 概念・用語・手順・公式などの具体的な知識を提示すること
- 「〜とは○○のことです」「ポイントは○○です」のように明確に教えること
- 前の発言と重複しない新しい知識・視点を提供すること
- 抽象的な語りではなく、生徒が理解できる具体例や説明を含めること
- 端的に終わらせず、根拠や手順を含めて3〜7文で丁寧に説明すること""",
    "ask_question": """直前までの説明内容を踏まえ、生徒の理解を確認する質問を1つしてください。
- 今説明した内容の確認質問にすること
- 「〜は何でしたか？」「〜の場合はどうなりますか？」など具体的に聞くこと""",
    "respond_to_class": """クラス全体の反応を受けて、授業内容の理解を深めるコメントをしてください。
- 生徒の反応を短く拾いつつ、カリキュラムの「具体的な問題・課題」に関連する知識を補足すること
- 単なるリアクション（「いいですね」だけ）で終わらず、必ず学習内容を含めること""",
    "respond_to_student": """直前の生徒の発言に簡潔に応答した上で、カリキュラムの内容に話を戻してください。
- 回答には短い評価（「そうですね」「いいところに気づきました」等）を付けた上で、授業内容の説明を続けること
- 脱線した話題には深入りせず、本題に戻すこと""",
}

STUDENT_INSTRUCTIONS: Dict[str, str] = {
    "question": "直前の先生の説明について、分からないことを質問してください。",
    "answer": "直前の先生の質問に答えてください。学力に応じた正確さで回答すること。",
    "mumble": "授業を聞きながらの独り言やつぶやきを言ってください。",
    "reaction": "直前の発言に対する短いリアクションをしてください。",
    "agree": "直前の他の生徒の発言に同調してください。",
}


def school_label(school_type: str) -> str:
    if school_type == "elementary":
        return "小学校"
    if school_type == "middle":
        return "中学校"
    return "高校"


def grade_context(school_type: str, grade: int) -> Tuple[int, str]:
    """Return (age, speech style) for a grade."""
    if school_type == "elementary":
        age = 5 + grade
        if grade <= 2:
            return age, "幼い話し方で、「〜だよ」「〜なの？」「わかんない」など子供らしい言葉遣い。"
        if grade <= 4:
            return age, "少し成長した話し方で、「〜です」も使えるが子供らしさが残る。"
        return age, "高学年らしく落ち着いた話し方。"
    if school_type == "middle":
        return 12 + grade, "中学生らしい話し方。敬語も使えるが、「〜じゃん」などカジュアルな表現も。"
    return 15 + grade, "高校生らしい話し方。敬語を適切に使用。"


def build_teacher_prompt(request) -> str:
    teacher = request.speaker
    subject = SUBJECT_LABELS.get(request.subject, request.subject)
    instruction = TEACHER_INSTRUCTIONS.get(request.action, TEACHER_INSTRUCTIONS["explain"]).format(subject=subject)
    return f"""
あなたは{school_label(request.school_type)}{request.grade}年生の{subject}の授業を担当する{teacher.age}歳の{PERSONALITY_LABELS.get(teacher.personality, "")}な教員「{teacher.name}」です。

【会話ログ（直近）】
{request.history or "（授業開始）"}

【直前の発話】
{request.latest or "（まだ発話なし）"}

【現在の状況】
- 経過時間: {request.elapsed_minutes}分 / 45分
- フェーズ: {PHASE_LABELS.get(request.phase, request.phase)}
- 本時の目標: {request.lesson_goal}
- このフェーズのカリキュラム:
{request.curriculum}

【指示】
{instruction}
このターンで期待される応答: {request.expected_response}

【重要】
- 発言は本時の目標達成につながる内容にすること
- 発言はこのフェーズのカリキュラムに沿って授業を前進させること
- 会話ログを踏まえ、直前の発話へつながる内容にすること
- 可能なら直前発話のキーワードを1つ受けて話を進めること
- 「本時目標の詳細説明」に書かれた定義・仕組み・手順・誤解ポイントを優先して扱うこと
- explain の場合は最低3文で説明すること
- 同じことを繰り返さないこと
- 発言のみを出力（「」や説明は不要）
""".strip()


def build_student_prompt(request) -> str:
    student = request.speaker
    age, speech_style = grade_context(request.school_type, request.grade)
    level = student.academic_level
    level_note = ""
    if level >= 4:
        level_note = "勉強が得意で、難しい質問にも答えられる。"
    elif level <= 2:
        level_note = "勉強は苦手で、間違えることもある。"
    return f"""
あなたは{school_label(request.school_type)}{request.grade}年生（{age}歳）の生徒「{student.name}」です。

【性格と話し方】
{PERSONALITY_LABELS.get(student.personality, "")}な性格です。
{PERSONALITY_BEHAVIORS.get(student.personality, "")}

【学力】
5段階中{level}
{level_note}

【年齢相応の言葉遣い】
{speech_style}

【会話ログ（直近）】
{request.history or "（授業開始）"}

【直前の発話】
{request.latest or "（まだ発話なし）"}

【現在の状況】
- 教科: {SUBJECT_LABELS.get(request.subject, request.subject)}
- 経過時間: {request.elapsed_minutes}分

【指示】
{STUDENT_INSTRUCTIONS.get(request.action, STUDENT_INSTRUCTIONS["reaction"])}
このターンで期待される応答: {request.expected_response}

【重要】
- あなたは生徒であり、教員の口調や指示口調で話さないこと
- 「みなさん」「〜しましょう」「〜してください」「授業を始めます」など教員的表現は禁止
- 性格を反映した話し方をすること
- 会話ログを踏まえ、直前の発話に関連した発言をすること
- 可能なら直前発話のキーワードを1つ受けて発言すること
- 発言のみを出力（「」や説明は不要）
""".strip()


def build_goal_explanation_prompt(subject: str, school_type: str, grade: int, topic_name: str, lesson_goal: str) -> str:
    return f"""
あなたは{school_label(school_type)}{grade}年の{SUBJECT_LABELS.get(subject, subject)}を担当する教員です。
次の依頼に答えてください。

「{lesson_goal}」について説明する文章を生成して下さい。

【条件】
- テーマ: {topic_name}
- 目的: 生徒が授業の45分で理解できるようにする
- 内容は具体的にする（定義、仕組み、手順、よくある誤解、確認問題の観点を含める）
- 抽象的な説明だけで終わらせない
- 端的すぎる説明にしない。丁寧に筋道立てて説明する
- 2〜5段落で出力する
- 見出しは不要
- 日本語で出力する
""".strip()
