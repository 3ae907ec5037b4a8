"""
Unit Tests for the conversation tracker
"""

from conftest import ScriptedRandom

from classroom.core.conversation import (
    IDLE,
    STUDENT_ANSWERED,
    STUDENT_ASKED_QUESTION,
    STUDENT_REACTED,
    TEACHER_ASKED_QUESTION,
    TEACHER_EXPLAINING,
    ConversationTracker,
)


class TestTeacherTransitions:
    def test_questions_unlock_after_two_explanations(self):
        tracker = ConversationTracker()
        assert not tracker.can_ask_question()
        tracker.teacher_explained(ScriptedRandom([0.9]))
        assert not tracker.can_ask_question()
        tracker.teacher_explained(ScriptedRandom([0.9]))
        assert tracker.can_ask_question()
        assert tracker.state == TEACHER_EXPLAINING
        assert tracker.pending is None

    def test_explanation_sometimes_invites_a_reaction(self):
        tracker = ConversationTracker()
        tracker.teacher_explained(ScriptedRandom([0.1]))
        assert tracker.pending == "student"

    def test_question_waits_for_student_and_resets_count(self):
        tracker = ConversationTracker(explain_count=3)
        tracker.teacher_asked()
        assert tracker.state == TEACHER_ASKED_QUESTION
        assert tracker.pending == "student"
        assert tracker.explain_count == 0

    def test_response_clears_obligation(self):
        tracker = ConversationTracker(state=STUDENT_ASKED_QUESTION, pending="teacher", question_asker_id="s1")
        tracker.teacher_responded()
        assert (tracker.state, tracker.pending, tracker.question_asker_id) == (IDLE, None, None)


class TestStudentTransitions:
    def test_student_question_obliges_teacher(self):
        tracker = ConversationTracker()
        tracker.student_spoke("question", "s3", ScriptedRandom())
        assert tracker.state == STUDENT_ASKED_QUESTION
        assert tracker.pending == "teacher"
        assert tracker.question_asker_id == "s3"

    def test_reaction_may_chain(self):
        tracker = ConversationTracker()
        tracker.student_spoke("agree", "s1", ScriptedRandom([0.1]))
        assert tracker.state == STUDENT_REACTED
        assert tracker.pending == "student"

        tracker.student_spoke("reaction", "s1", ScriptedRandom([0.5]))
        assert tracker.pending is None

    def test_mumble_returns_to_idle(self):
        tracker = ConversationTracker(pending="student")
        tracker.student_spoke("mumble", "s1", ScriptedRandom())
        assert (tracker.state, tracker.pending) == (IDLE, None)

    def test_answer_sometimes_asks_for_follow_up(self):
        tracker = ConversationTracker(state=TEACHER_ASKED_QUESTION, pending="student")
        tracker.student_responded("answer", ScriptedRandom([0.2]))
        assert tracker.state == STUDENT_ANSWERED
        assert tracker.pending == "teacher"

        tracker = ConversationTracker(state=TEACHER_ASKED_QUESTION, pending="student")
        tracker.student_responded("answer", ScriptedRandom([0.3]))
        assert tracker.pending is None

    def test_non_answer_response_settles_as_reaction(self):
        tracker = ConversationTracker(pending="student")
        tracker.student_responded("agree", ScriptedRandom())
        assert (tracker.state, tracker.pending) == (STUDENT_REACTED, None)


def test_reset_keeps_explanation_count():
    tracker = ConversationTracker(state=TEACHER_ASKED_QUESTION, pending="student", question_asker_id="s1", explain_count=2)
    tracker.reset()
    assert (tracker.state, tracker.pending, tracker.question_asker_id) == (IDLE, None, None)
    assert tracker.explain_count == 2
