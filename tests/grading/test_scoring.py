from __future__ import annotations

import datetime

import pytest

from tally.grading import score_quiz, ValidationError
from tally.grading.quiz import build_questions
from tally.grading.scoring import validate_quiz
from tally.model import CourseID, OptionDraft, QuestionDraft, QuestionType, QuizID, QuizWithQuestions

T = datetime.datetime(2026, 3, 2, 9, 0, tzinfo=datetime.UTC)


def make_quiz(*drafts: QuestionDraft, duration_minutes: int = 30) -> QuizWithQuestions:
    quiz_id = QuizID()
    return QuizWithQuestions(
        quiz_id=quiz_id,
        course_id=CourseID(),
        name="Quiz",
        start_date_time=T,
        duration_minutes=duration_minutes,
        create_time=T,
        update_time=T,
        questions=build_questions(quiz_id, drafts),
    )


def mc(points: int = 5, correct: int = 0, n: int = 3) -> QuestionDraft:
    return QuestionDraft(
        type=QuestionType.MultipleChoice,
        text="Pick one",
        points=points,
        options=[OptionDraft(text=f"option {i}", is_correct=(i == correct)) for i in range(n)],
    )


def tf(answer: str = "true", points: int = 2) -> QuestionDraft:
    return QuestionDraft(type=QuestionType.TrueFalse, text="True?", points=points, correct_answer=answer)


def sa(answer: str = "Paris", points: int = 3) -> QuestionDraft:
    return QuestionDraft(type=QuestionType.ShortAnswer, text="Capital?", points=points, correct_answer=answer)


class TestScoreQuiz(object):
    def test_half_right(self) -> None:
        """Two 5-point questions, one right: 5/10, 50%, C+."""
        quiz = make_quiz(mc(), mc())
        q1, q2 = quiz.questions
        answers = {
            str(q1.question_id): str(q1.options[0].option_id),
            str(q2.question_id): str(q2.options[1].option_id),
        }

        score = score_quiz(quiz, answers)

        assert score.points_earned == 5
        assert score.total_points == 10
        assert score.percentage == 50.0
        assert score.letter_grade == "C+"
        assert score.performance_description == "Satisfactory"
        assert [r.correct for r in score.results] == [True, False]

    def test_no_answers(self) -> None:
        quiz = make_quiz(mc(), tf(), sa())

        score = score_quiz(quiz, {})

        assert score.points_earned == 0
        assert score.total_points == 10
        assert score.letter_grade == "F"
        assert score.performance_description == "Fail"

    def test_blank_answer_is_wrong(self) -> None:
        quiz = make_quiz(sa(answer="x"))
        (q,) = quiz.questions

        assert score_quiz(quiz, {str(q.question_id): ""}).points_earned == 0

    def test_true_false(self) -> None:
        quiz = make_quiz(tf("false"))
        (q,) = quiz.questions

        assert score_quiz(quiz, {str(q.question_id): "false"}).points_earned == 2
        assert score_quiz(quiz, {str(q.question_id): "False"}).points_earned == 0

    def test_short_answer_is_exact(self) -> None:
        """No trimming, no case folding."""
        quiz = make_quiz(sa("Paris"))
        (q,) = quiz.questions
        qid = str(q.question_id)

        assert score_quiz(quiz, {qid: "Paris"}).points_earned == 3
        assert score_quiz(quiz, {qid: "paris"}).points_earned == 0
        assert score_quiz(quiz, {qid: " Paris"}).points_earned == 0

    def test_option_text_is_not_an_answer(self) -> None:
        quiz = make_quiz(mc())
        (q,) = quiz.questions

        assert score_quiz(quiz, {str(q.question_id): q.options[0].text}).points_earned == 0

    def test_earned_never_exceeds_total(self) -> None:
        quiz = make_quiz(mc(points=4), tf(points=6))
        q1, q2 = quiz.questions
        answers = {str(q1.question_id): str(q1.options[0].option_id), str(q2.question_id): "true"}

        score = score_quiz(quiz, answers)

        assert score.points_earned == score.total_points == quiz.total_points == 10
        assert score.letter_grade == "A+"


class TestBuildQuestions(object):
    def test_positions_and_ids(self) -> None:
        quiz = make_quiz(mc(), tf(), sa())

        assert [q.position for q in quiz.questions] == [0, 1, 2]
        assert [o.position for o in quiz.questions[0].options] == [0, 1, 2]
        assert all(o.question_id == quiz.questions[0].question_id for o in quiz.questions[0].options)
        assert all(q.quiz_id == quiz.quiz_id for q in quiz.questions)

    def test_options_only_for_multiple_choice(self) -> None:
        draft = QuestionDraft(
            type=QuestionType.TrueFalse,
            text="True?",
            points=1,
            correct_answer="true",
            options=[OptionDraft(text="stray", is_correct=True)],
        )

        (q,) = make_quiz(draft).questions

        assert q.options == []
        assert q.correct_answer == "true"


class TestValidateQuiz(object):
    def test_valid(self) -> None:
        validate_quiz(make_quiz(mc(), tf(), sa()))

    @pytest.mark.parametrize(
        "draft",
        [
            mc(points=0),
            mc(n=1),
            QuestionDraft(
                type=QuestionType.MultipleChoice,
                text="Two right",
                points=1,
                options=[OptionDraft(text="a", is_correct=True), OptionDraft(text="b", is_correct=True)],
            ),
            tf("yes"),
            sa(""),
        ],
    )
    def test_malformed_question(self, draft: QuestionDraft) -> None:
        with pytest.raises(ValidationError):
            validate_quiz(make_quiz(draft))

    def test_needs_questions(self) -> None:
        with pytest.raises(ValidationError):
            validate_quiz(make_quiz())

    def test_needs_duration(self) -> None:
        with pytest.raises(ValidationError):
            validate_quiz(make_quiz(mc(), duration_minutes=0))
