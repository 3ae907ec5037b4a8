"""
Unit Tests for the HTTP generation client

Uses httpx.MockTransport so no model server is needed.
"""

import json

import httpx
import pytest

from classroom.core.simulator import GenerationRequest
from classroom.core.state import Student, Teacher
from classroom.llm.client import HttpLLMClient, collect_sentences, strip_think
from classroom.llm.defaults import default_student_utterance, default_teacher_utterance, is_teacher_like

TEACHER = Teacher(id="t1", name="山田 花子", age=40, gender="female", personality="gentle")
ACTIVE = Student(id="s1", name="佐藤 太郎", gender="male", personality="active", academic_level=4)


def make_request(role="teacher", action="explain", speaker=TEACHER):
    return GenerationRequest(
        role=role,
        speaker=speaker,
        subject="math",
        grade=2,
        school_type="middle",
        lesson_goal="一次関数の傾きと切片を説明できる",
        phase="development1",
        elapsed_minutes=10.0,
        curriculum="",
        history="",
        latest="",
        expected_response="",
        action=action,
    )


def client_for(handler, **kwargs):
    return HttpLLMClient(
        endpoint="http://llm.test/api/generate",
        model="test-model",
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


def reply(text):
    def handler(request):
        return httpx.Response(200, json={"response": text})

    return handler


class TestTextCleanup:
    def test_strip_think_removes_reasoning(self):
        assert strip_think("<think>考え中</think>答えです。") == "答えです。"
        assert strip_think(None) == ""

    def test_collect_sentences_keeps_first_sentences(self):
        assert collect_sentences("はい。分かりました。でも難しい。", 2) == "はい。 分かりました。"

    def test_collect_sentences_flattens_and_terminates(self):
        assert collect_sentences("「一行目\n二行目」", 8) == "一行目 二行目。"

    def test_collect_sentences_empty(self):
        assert collect_sentences("  \n ", 3) == ""


class TestDefaults:
    def test_teacher_defaults_by_action(self):
        assert default_teacher_utterance("intro", "ask_question") == "この問題、分かる人いますか？"
        assert default_teacher_utterance("intro", "respond_to_student") == "いい質問ですね。それについて説明しましょう。"
        assert default_teacher_utterance("summary", "explain") == "今日学んだことをまとめると..."

    def test_student_defaults_by_personality_then_grade(self):
        assert default_student_utterance("reaction", "middle", 2, "active") == "はい！"
        assert default_student_utterance("question", "elementary", 1) == "せんせい、これなあに？"
        assert default_student_utterance("agree", "high", 1) == "たしかに"

    def test_teacher_like_detection(self):
        assert is_teacher_like("みなさん、ここを見てください。")
        assert is_teacher_like("この問題は難しいね")
        assert not is_teacher_like("えっと、たぶん2です。")


class TestComplete:
    @pytest.mark.asyncio
    async def test_payload_shape(self):
        seen = []

        def handler(request):
            seen.append(json.loads(request.content))
            return httpx.Response(200, json={"response": "説明します。"})

        client = client_for(handler)
        assert await client.complete("prompt", "teacher") == "説明します。"
        await client.aclose()

        body = seen[0]
        assert body["model"] == "test-model"
        assert body["prompt"] == "prompt"
        assert body["stream"] is False
        assert body["options"] == {"temperature": 0.8, "num_predict": 520}

    @pytest.mark.asyncio
    async def test_student_mode_keeps_one_sentence(self):
        client = client_for(reply("<think>x</think>「はい、分かりました。でも少し難しいです。」"))
        assert await client.complete("p", "student") == "はい、分かりました。"
        await client.aclose()

    @pytest.mark.asyncio
    async def test_timeout_retries_once_with_longer_timeout(self):
        timeouts = []

        def handler(request):
            timeouts.append(request.extensions["timeout"]["read"])
            if len(timeouts) == 1:
                raise httpx.ReadTimeout("slow", request=request)
            return httpx.Response(200, json={"response": "間に合いました。"})

        client = client_for(handler, timeout=10.0)
        assert await client.complete("p", "teacher") == "間に合いました。"
        await client.aclose()
        assert timeouts == [10.0, 15.0]

    @pytest.mark.asyncio
    async def test_second_timeout_gives_empty(self):
        calls = []

        def handler(request):
            calls.append(request)
            raise httpx.ReadTimeout("slow", request=request)

        client = client_for(handler)
        assert await client.complete("p", "student") == ""
        await client.aclose()
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_http_error_is_not_retried(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(500, text="boom")

        client = client_for(handler)
        assert await client.complete("p", "teacher") == ""
        await client.aclose()
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_bad_json_gives_empty(self):
        client = client_for(lambda request: httpx.Response(200, text="not json"))
        assert await client.complete("p", "teacher") == ""
        await client.aclose()

    @pytest.mark.asyncio
    async def test_long_mode_keeps_paragraphs(self):
        client = client_for(reply("「一段落目。」\r\n\n二段落目。"))
        assert await client.complete("p", "long") == "一段落目。\n\n二段落目。"
        await client.aclose()


class TestGenerate:
    @pytest.mark.asyncio
    async def test_teacher_falls_back_when_empty(self):
        client = client_for(reply(""))
        line = await client.generate(make_request(action="ask_question"))
        await client.aclose()
        assert line == "この問題、分かる人いますか？"

    @pytest.mark.asyncio
    async def test_student_rejects_teacher_voice(self):
        client = client_for(reply("みなさん、考えてみましょう。"))
        line = await client.generate(make_request(role="student", action="answer", speaker=ACTIVE))
        await client.aclose()
        assert line == "はい！分かります！"

    @pytest.mark.asyncio
    async def test_student_line_passes_through(self):
        client = client_for(reply("傾きは2だと思います。"))
        line = await client.generate(make_request(role="student", action="answer", speaker=ACTIVE))
        await client.aclose()
        assert line == "傾きは2だと思います。"

    @pytest.mark.asyncio
    async def test_goal_explanation_uses_long_mode(self):
        seen = []

        def handler(request):
            seen.append(json.loads(request.content))
            return httpx.Response(200, json={"response": "傾きは変化の割合です。\n切片はy軸との交点です。"})

        client = client_for(handler)
        text = await client.generate_goal_explanation("math", "middle", 2, "一次関数", "傾きと切片を説明できる")
        await client.aclose()
        assert text == "傾きは変化の割合です。\n切片はy軸との交点です。"
        assert seen[0]["options"]["num_predict"] == 900
