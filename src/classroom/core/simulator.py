"""Lesson simulator: drives turn-taking between the teacher and students."""

import asyncio
import inspect
import logging
import random
import uuid
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, List, Optional, Protocol, Union

from classroom.core import classifier, repetition, script
from classroom.core.classifier import ASK_QUESTION, RESPOND_TO_STUDENT
from classroom.core.runtime import LessonRuntime
from classroom.core.selection import select_answerer, select_speaker
from classroom.core.state import STUDENT, TEACHER, LessonSession, LessonState, Student, Teacher, Utterance
from classroom.core.time import ClockConfig, SimulationClock
from classroom.core.timeline import LESSON_MINUTES, TICK_MINUTES, phase_for

logger = logging.getLogger(__name__)

MAX_TEACHER_ATTEMPTS = 3
OPENING_DELAY_SECONDS = 1.0
TEACHER_HISTORY_LINES = 12
STUDENT_HISTORY_LINES = 10


@dataclass
class GenerationRequest:
    role: str  # teacher/student
    speaker: Union[Teacher, Student]
    subject: str
    grade: int
    school_type: str
    lesson_goal: str
    phase: str
    elapsed_minutes: float
    curriculum: str  # excerpt for the current phase
    history: str
    latest: str
    expected_response: str
    action: str  # teacher action or student utterance type


class UtteranceGenerator(Protocol):
    async def generate(self, request: GenerationRequest) -> str:
        """Return the line to speak, or an empty string on failure."""
        ...


class LessonObserver:
    """Receives simulator events; override the hooks you need."""

    async def on_utterance(self, utterance: Utterance) -> None:
        pass

    async def on_phase_change(self, phase: str) -> None:
        pass

    async def on_time_update(self, elapsed_minutes: float) -> None:
        pass

    async def on_lesson_end(self) -> None:
        pass


class CallbackObserver(LessonObserver):
    """Adapts plain callbacks (sync or async) to the observer hooks."""

    def __init__(
        self,
        on_utterance: Optional[Callable[[Utterance], Any]] = None,
        on_phase_change: Optional[Callable[[str], Any]] = None,
        on_time_update: Optional[Callable[[float], Any]] = None,
        on_lesson_end: Optional[Callable[[], Any]] = None,
    ):
        self._callbacks = {
            "on_utterance": on_utterance,
            "on_phase_change": on_phase_change,
            "on_time_update": on_time_update,
            "on_lesson_end": on_lesson_end,
        }

    async def _call(self, name: str, *args) -> None:
        callback = self._callbacks.get(name)
        if callback is None:
            return
        result = callback(*args)
        if inspect.isawaitable(result):
            await result

    async def on_utterance(self, utterance: Utterance) -> None:
        await self._call("on_utterance", utterance)

    async def on_phase_change(self, phase: str) -> None:
        await self._call("on_phase_change", phase)

    async def on_time_update(self, elapsed_minutes: float) -> None:
        await self._call("on_time_update", elapsed_minutes)

    async def on_lesson_end(self) -> None:
        await self._call("on_lesson_end")


class LessonSimulator:
    """Runs one lesson: opening script, then one turn per clock tick until 45 minutes."""

    def __init__(
        self,
        session: LessonSession,
        generator: UtteranceGenerator,
        observer: Optional[LessonObserver] = None,
        rng: Optional[random.Random] = None,
        clock: Optional[SimulationClock] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        if not session.students:
            raise ValueError("a lesson needs at least one student")
        self.session = session
        self.generator = generator
        self.observer = observer or LessonObserver()
        self.rng = rng or random.Random()
        self.clock = clock or SimulationClock(ClockConfig())
        self.runtime = LessonRuntime()
        self._sleep = sleep
        self._transcript: List[Utterance] = []
        self._opening: Optional[asyncio.Task] = None

    # control surface

    def start(self) -> asyncio.Task:
        """Start ticking and launch the opening sequence; returns its task."""
        if self._opening is not None:
            return self._opening
        self.runtime.is_playing = True
        self.clock.start(self.tick)
        self._opening = asyncio.ensure_future(self.run_opening())
        return self._opening

    def set_playback(self, is_playing: bool, speed: float) -> None:
        self.runtime.is_playing = is_playing
        self.clock.set_time_scale(speed)
        self.runtime.speed = self.clock.config.time_scale
        if not self.runtime.ended and not self.clock.is_running:
            self.clock.start(self.tick)

    async def seek(self, minutes: float) -> None:
        rt = self.runtime
        rt.elapsed_minutes = min(max(0.0, float(minutes)), LESSON_MINUTES)
        rt.phase = phase_for(rt.elapsed_minutes)
        await self._notify("on_time_update", rt.elapsed_minutes)
        await self._notify("on_phase_change", rt.phase)

    def stop(self) -> None:
        self.runtime.is_playing = False
        self.clock.stop()

    # read surface

    @property
    def utterances(self) -> List[Utterance]:
        return list(self._transcript)

    def get_state(self) -> LessonState:
        return LessonState(
            phase=self.runtime.phase,
            elapsed_minutes=self.runtime.elapsed_minutes,
            utterances=list(self._transcript),
        )

    # clock loop

    async def run_opening(self) -> None:
        students = self.session.students
        leader = next((s for s in students if s.personality == "active"), students[0])
        for line in script.OPENING_CALLS:
            await self.commit(leader.id, STUDENT, leader.name, line, "start")
            await self._delay(OPENING_DELAY_SECONDS)
        teacher = self.session.teacher
        await self.commit(teacher.id, TEACHER, teacher.name, script.goal_announcement(self.session.lesson_goal), "start")
        await self._delay(OPENING_DELAY_SECONDS)
        self.runtime.conversation.reset()

    async def tick(self) -> None:
        """Advance the lesson by one tick; skipped while another tick or turn is in flight."""
        rt = self.runtime
        if not rt.is_playing or rt.ended or rt.generating:
            return
        rt.generating = True
        try:
            await self._advance()
        finally:
            rt.generating = False

    async def _advance(self) -> None:
        rt = self.runtime
        rt.elapsed_minutes += TICK_MINUTES
        await self._notify("on_time_update", rt.elapsed_minutes)

        new_phase = phase_for(rt.elapsed_minutes)
        if new_phase != rt.phase:
            rt.phase = new_phase
            await self._notify("on_phase_change", new_phase)
            teacher = self.session.teacher
            message = script.transition_message(new_phase, self.session.lesson_goal, self.session.curriculum)
            await self.commit(teacher.id, TEACHER, teacher.name, message, new_phase)
            rt.conversation.reset()

        if rt.elapsed_minutes >= LESSON_MINUTES:
            if rt.ended:
                return
            rt.ended = True
            self.stop()
            logger.info("lesson %s ended with %d utterances", self.session.id, len(self._transcript))
            await self._notify("on_lesson_end")
            return

        await self._take_turn()

    async def play_turn(self) -> None:
        """Produce at most one conversational turn."""
        rt = self.runtime
        if rt.generating:
            return
        rt.generating = True
        try:
            await self._take_turn()
        finally:
            rt.generating = False

    async def _take_turn(self) -> None:
        rt = self.runtime
        if rt.conversation.pending == TEACHER:
            await self.teacher_response()
            return
        if rt.conversation.pending == STUDENT:
            await self.student_response()
            return

        roll = self.rng.random()
        if classifier.should_force_teacher(self._transcript) or roll < classifier.teacher_lead_probability(rt.phase):
            await self.teacher_action()
        else:
            await self.student_action()

    # turns

    async def teacher_action(self, action: Optional[str] = None) -> None:
        rt = self.runtime
        conversation = rt.conversation
        if action is None:
            action = classifier.select_teacher_action(rt.phase, conversation.can_ask_question(), self.rng)
        content = await self._generate_teacher(action)
        if not content:
            return
        if not await self._commit_teacher(content):
            return
        # only an ask_question action puts a question to the class
        if action == ASK_QUESTION:
            conversation.teacher_asked()
        else:
            conversation.teacher_explained(self.rng)

    async def teacher_response(self) -> None:
        content = await self._generate_teacher(RESPOND_TO_STUDENT)
        if not content:
            return
        if not await self._commit_teacher(content):
            return
        self.runtime.conversation.teacher_responded()

    async def student_action(self) -> None:
        rt = self.runtime
        student = select_speaker(self.session.students, rt.last_speaker_id, self.rng)
        utterance_type = classifier.select_spontaneous_type(rt.phase, rt.conversation.state, student, self.rng)
        content = await self._request(self._student_request(student, utterance_type))
        if not content:
            return
        if not await self.commit(student.id, STUDENT, student.name, content, rt.phase):
            return
        rt.conversation.student_spoke(utterance_type, student.id, self.rng)

    async def student_response(self) -> None:
        rt = self.runtime
        student = select_answerer(self.session.students, rt.last_speaker_id, self.rng)
        utterance_type = classifier.select_response_type(rt.conversation.state, self.rng)
        content = await self._request(self._student_request(student, utterance_type))
        if not content:
            return
        if not await self.commit(student.id, STUDENT, student.name, content, rt.phase):
            return
        rt.conversation.student_responded(utterance_type, self.rng)

    async def commit(self, speaker_id: str, speaker_type: str, speaker_name: str, content: str, phase: str) -> bool:
        """Screen a line against recent history and append it; False when dropped."""
        rt = self.runtime
        accepted = repetition.screen(content, speaker_type, phase, self._transcript, rt.fallback_cursors)
        if accepted is None:
            logger.info("session %s: dropped repeated %s turn", self.session.id, speaker_type)
            return False
        utterance = Utterance(
            id=str(uuid.uuid4()),
            session_id=self.session.id,
            speaker_id=speaker_id,
            speaker_type=speaker_type,
            speaker_name=speaker_name,
            content=accepted,
            timestamp=rt.elapsed_minutes,
            phase=phase,
        )
        self._transcript.append(utterance)
        rt.last_speaker_id = speaker_id
        await self._notify("on_utterance", utterance)
        return True

    # helpers

    async def _commit_teacher(self, content: str) -> bool:
        teacher = self.session.teacher
        return await self.commit(teacher.id, TEACHER, teacher.name, content, self.runtime.phase)

    async def _generate_teacher(self, action: str) -> str:
        request = self._teacher_request(action)
        attempts = 1 if action == ASK_QUESTION else MAX_TEACHER_ATTEMPTS
        for attempt in range(attempts):
            content = await self._request(request)
            if not content:
                continue
            if action != ASK_QUESTION and repetition.is_teacher_repeated(content, self._transcript):
                logger.debug("teacher %s attempt %d repeated recent content", action, attempt + 1)
                continue
            return content
        return ""

    async def _request(self, request: GenerationRequest) -> str:
        try:
            content = await self.generator.generate(request)
        except Exception:
            logger.exception("generation failed for %s %s", request.role, request.action)
            return ""
        return content or ""

    def _teacher_request(self, action: str) -> GenerationRequest:
        return self._build_request(
            TEACHER, self.session.teacher, action, script.expected_teacher_response(action), TEACHER_HISTORY_LINES
        )

    def _student_request(self, student: Student, utterance_type: str) -> GenerationRequest:
        return self._build_request(
            STUDENT, student, utterance_type, script.expected_student_response(utterance_type), STUDENT_HISTORY_LINES
        )

    def _build_request(self, role, speaker, action, expected, history_lines) -> GenerationRequest:
        session = self.session
        rt = self.runtime
        return GenerationRequest(
            role=role,
            speaker=speaker,
            subject=session.subject,
            grade=session.grade,
            school_type=session.school_type,
            lesson_goal=session.lesson_goal,
            phase=rt.phase,
            elapsed_minutes=rt.elapsed_minutes,
            curriculum=script.curriculum_excerpt(session.curriculum, rt.phase),
            history=script.format_history(self._transcript, history_lines),
            latest=script.format_latest(self._transcript),
            expected_response=expected,
            action=action,
        )

    async def _delay(self, seconds: float) -> None:
        await self._sleep(seconds / self.runtime.speed)

    async def _notify(self, hook: str, *args) -> None:
        try:
            await getattr(self.observer, hook)(*args)
        except Exception:
            logger.exception("observer %s failed for session %s", hook, self.session.id)
