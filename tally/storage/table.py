import datetime

from sqlalchemy import CheckConstraint, ForeignKey, func, MetaData, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, MappedAsDataclass
from sqlalchemy.types import JSON

from tally.model import AssignmentID, AttemptID, CourseGradeID, CourseID, OptionID, QuestionID, QuizID, SubmissionID, \
    UserID

from .type import ShortUUIDKeyType, UTCDateTime

metadata = MetaData()


class base(MappedAsDataclass, DeclarativeBase):
    metadata = metadata
    type_annotation_map = {
        UserID: ShortUUIDKeyType(UserID),
        CourseID: ShortUUIDKeyType(CourseID),
        CourseGradeID: ShortUUIDKeyType(CourseGradeID),
        QuizID: ShortUUIDKeyType(QuizID),
        QuestionID: ShortUUIDKeyType(QuestionID),
        OptionID: ShortUUIDKeyType(OptionID),
        AttemptID: ShortUUIDKeyType(AttemptID),
        AssignmentID: ShortUUIDKeyType(AssignmentID),
        SubmissionID: ShortUUIDKeyType(SubmissionID),
        datetime.datetime: UTCDateTime(),
        dict[str, str]: JSON().with_variant(JSONB(), "postgresql"),
    }


# Users & Courses


class users(base):
    __tablename__ = "users"

    user_id: Mapped[UserID] = mapped_column(primary_key=True)
    email: Mapped[str] = mapped_column(unique=True)
    name: Mapped[str]
    role: Mapped[str] = mapped_column(default="student")
    create_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now())
    update_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now(), onupdate=func.now())


class courses(base):
    __tablename__ = "courses"

    course_id: Mapped[CourseID] = mapped_column(primary_key=True)
    name: Mapped[str]
    code: Mapped[str] = mapped_column(unique=True)
    credits: Mapped[int] = mapped_column(default=3)
    instructor_id: Mapped[UserID | None] = mapped_column(ForeignKey("users.user_id"), default=None)
    create_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now())
    update_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now(), onupdate=func.now())


# Quizzes


class quizzes(base):
    __tablename__ = "quizzes"

    quiz_id: Mapped[QuizID] = mapped_column(primary_key=True)
    course_id: Mapped[CourseID] = mapped_column(ForeignKey("courses.course_id"))
    name: Mapped[str]
    start_date_time: Mapped[datetime.datetime]
    duration_minutes: Mapped[int]
    instructor_id: Mapped[UserID | None] = mapped_column(ForeignKey("users.user_id"), default=None)
    description: Mapped[str | None] = mapped_column(default=None)
    status: Mapped[str] = mapped_column(default="active")
    create_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now())
    update_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now(), onupdate=func.now())

    __table_args__ = (CheckConstraint("duration_minutes > 0", name="quizzes_duration_positive"),)


class questions(base):
    __tablename__ = "questions"

    question_id: Mapped[QuestionID] = mapped_column(primary_key=True)
    quiz_id: Mapped[QuizID] = mapped_column(ForeignKey("quizzes.quiz_id", ondelete="CASCADE"))
    type: Mapped[str]
    text: Mapped[str]
    points: Mapped[int]
    position: Mapped[int]
    correct_answer: Mapped[str | None] = mapped_column(default=None)

    __table_args__ = (CheckConstraint("points > 0", name="questions_points_positive"),)


class question_options(base):
    __tablename__ = "question_options"

    option_id: Mapped[OptionID] = mapped_column(primary_key=True)
    question_id: Mapped[QuestionID] = mapped_column(ForeignKey("questions.question_id", ondelete="CASCADE"))
    text: Mapped[str]
    position: Mapped[int]
    is_correct: Mapped[bool] = mapped_column(default=False)


class quiz_attempts(base):
    __tablename__ = "quiz_attempts"

    attempt_id: Mapped[AttemptID] = mapped_column(primary_key=True)
    quiz_id: Mapped[QuizID] = mapped_column(ForeignKey("quizzes.quiz_id"))
    student_id: Mapped[UserID] = mapped_column(ForeignKey("users.user_id"))
    started_at: Mapped[datetime.datetime]

    status: Mapped[str] = mapped_column(default="in_progress")
    submitted_at: Mapped[datetime.datetime | None] = mapped_column(default=None)
    auto_submitted: Mapped[bool] = mapped_column(default=False)
    student_answers: Mapped[dict[str, str]] = mapped_column(default_factory=dict)

    points_earned: Mapped[int | None] = mapped_column(default=None)
    total_points: Mapped[int | None] = mapped_column(default=None)
    percentage: Mapped[float | None] = mapped_column(default=None)
    letter_grade: Mapped[str | None] = mapped_column(default=None)
    performance_description: Mapped[str | None] = mapped_column(default=None)

    create_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now())
    update_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        # one attempt per student per quiz, whatever its status
        UniqueConstraint("quiz_id", "student_id", name="quiz_attempts_quiz_student_key"),
        CheckConstraint(
            "(status = 'in_progress' AND submitted_at IS NULL) OR (status = 'submitted' AND submitted_at IS NOT NULL)",
            name="quiz_attempts_submitted_at_status",
        ),
    )


# Assignments


class assignments(base):
    __tablename__ = "assignments"

    assignment_id: Mapped[AssignmentID] = mapped_column(primary_key=True)
    course_id: Mapped[CourseID] = mapped_column(ForeignKey("courses.course_id"))
    name: Mapped[str]
    due_date: Mapped[datetime.datetime]
    instructor_id: Mapped[UserID | None] = mapped_column(ForeignKey("users.user_id"), default=None)
    description: Mapped[str | None] = mapped_column(default=None)
    total_points: Mapped[int] = mapped_column(default=100)
    status: Mapped[str] = mapped_column(default="active")
    create_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now())
    update_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now(), onupdate=func.now())

    __table_args__ = (CheckConstraint("total_points > 0", name="assignments_total_points_positive"),)


class assignment_submissions(base):
    __tablename__ = "assignment_submissions"

    submission_id: Mapped[SubmissionID] = mapped_column(primary_key=True)
    assignment_id: Mapped[AssignmentID] = mapped_column(ForeignKey("assignments.assignment_id"))
    student_id: Mapped[UserID] = mapped_column(ForeignKey("users.user_id"))
    submission_number: Mapped[int]
    submitted_at: Mapped[datetime.datetime]
    is_late: Mapped[bool]
    status: Mapped[str]

    content: Mapped[str | None] = mapped_column(default=None)
    points_earned: Mapped[float | None] = mapped_column(default=None)
    grade: Mapped[float | None] = mapped_column(default=None)
    letter_grade: Mapped[str | None] = mapped_column(default=None)
    feedback: Mapped[str | None] = mapped_column(default=None)
    graded_at: Mapped[datetime.datetime | None] = mapped_column(default=None)

    create_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now())
    update_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint(
            "assignment_id", "student_id", "submission_number", name="assignment_submissions_number_key"
        ),
    )


# Grades


class course_grades(base):
    __tablename__ = "course_grades"

    course_grade_id: Mapped[CourseGradeID] = mapped_column(primary_key=True)
    course_id: Mapped[CourseID] = mapped_column(ForeignKey("courses.course_id"))
    student_id: Mapped[UserID] = mapped_column(ForeignKey("users.user_id"))

    assignment_points_earned: Mapped[float] = mapped_column(default=0.0)
    assignment_total_points: Mapped[float] = mapped_column(default=0.0)
    assignment_percentage: Mapped[float] = mapped_column(default=0.0)
    assignment_count: Mapped[int] = mapped_column(default=0)
    graded_assignment_count: Mapped[int] = mapped_column(default=0)

    quiz_points_earned: Mapped[float] = mapped_column(default=0.0)
    quiz_total_points: Mapped[float] = mapped_column(default=0.0)
    quiz_percentage: Mapped[float] = mapped_column(default=0.0)
    quiz_count: Mapped[int] = mapped_column(default=0)
    attempted_quiz_count: Mapped[int] = mapped_column(default=0)

    assignment_weight: Mapped[float] = mapped_column(default=60.0)
    quiz_weight: Mapped[float] = mapped_column(default=40.0)

    final_percentage: Mapped[float] = mapped_column(default=0.0)
    letter_grade: Mapped[str | None] = mapped_column(default=None)
    grade_point: Mapped[float | None] = mapped_column(default=None)
    performance_description: Mapped[str | None] = mapped_column(default=None)

    create_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now())
    update_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now(), onupdate=func.now())

    __table_args__ = (UniqueConstraint("course_id", "student_id", name="course_grades_course_student_key"),)
