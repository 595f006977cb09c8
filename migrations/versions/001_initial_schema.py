"""Initial schema for quizzes, attempts, assignments and course grades

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19

"""

import typing as t

from alembic import op
from sqlalchemy import func as f
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.schema import CheckConstraint, Column, ForeignKey, UniqueConstraint
from sqlalchemy.types import Boolean, DateTime, Float, Integer, String, Text

# revision identifiers, used by Alembic.
revision: str = "001_initial"
down_revision: str | None = None
branch_labels: str | t.Sequence[str] | None = None
depends_on: str | t.Sequence[str] | None = None


def timestamps() -> list[Column[t.Any]]:
    return [
        Column("create_time", DateTime(timezone=True), server_default=f.now(), nullable=False),
        Column("update_time", DateTime(timezone=True), server_default=f.now(), onupdate=f.now(), nullable=False),
    ]


def upgrade() -> None:
    # Users & Courses
    op.create_table(
        "users",
        Column("user_id", String(22), primary_key=True),
        Column("email", String, unique=True, nullable=False),
        Column("name", String, nullable=False),
        Column("role", String, nullable=False, server_default="student"),
        *timestamps(),
    )

    op.create_table(
        "courses",
        Column("course_id", String(22), primary_key=True),
        Column("name", String, nullable=False),
        Column("code", String, unique=True, nullable=False),
        Column("credits", Integer, nullable=False, server_default="3"),
        Column("instructor_id", String(22), ForeignKey("users.user_id"), nullable=True),
        *timestamps(),
    )

    # Quizzes
    op.create_table(
        "quizzes",
        Column("quiz_id", String(22), primary_key=True),
        Column("course_id", String(22), ForeignKey("courses.course_id"), nullable=False),
        Column("instructor_id", String(22), ForeignKey("users.user_id"), nullable=True),
        Column("name", String, nullable=False),
        Column("description", Text, nullable=True),
        Column("start_date_time", DateTime(timezone=True), nullable=False),
        Column("duration_minutes", Integer, nullable=False),
        Column("status", String, nullable=False, server_default="active"),
        *timestamps(),
        CheckConstraint("duration_minutes > 0", name="quizzes_duration_positive"),
    )
    op.create_index("quizzes_course_id_idx", "quizzes", ["course_id"])

    op.create_table(
        "questions",
        Column("question_id", String(22), primary_key=True),
        Column("quiz_id", String(22), ForeignKey("quizzes.quiz_id", ondelete="CASCADE"), nullable=False),
        Column("type", String, nullable=False),
        Column("text", Text, nullable=False),
        Column("points", Integer, nullable=False),
        Column("position", Integer, nullable=False),
        Column("correct_answer", Text, nullable=True),
        CheckConstraint("points > 0", name="questions_points_positive"),
    )
    op.create_index("questions_quiz_id_idx", "questions", ["quiz_id"])

    op.create_table(
        "question_options",
        Column("option_id", String(22), primary_key=True),
        Column("question_id", String(22), ForeignKey("questions.question_id", ondelete="CASCADE"), nullable=False),
        Column("text", Text, nullable=False),
        Column("position", Integer, nullable=False),
        Column("is_correct", Boolean, nullable=False, server_default="false"),
    )

    op.create_table(
        "quiz_attempts",
        Column("attempt_id", String(22), primary_key=True),
        Column("quiz_id", String(22), ForeignKey("quizzes.quiz_id"), nullable=False),
        Column("student_id", String(22), ForeignKey("users.user_id"), nullable=False),
        Column("started_at", DateTime(timezone=True), nullable=False),
        Column("status", String, nullable=False, server_default="in_progress"),
        Column("submitted_at", DateTime(timezone=True), nullable=True),
        Column("auto_submitted", Boolean, nullable=False, server_default="false"),
        Column("student_answers", JSONB, nullable=False, server_default="{}"),
        Column("points_earned", Integer, nullable=True),
        Column("total_points", Integer, nullable=True),
        Column("percentage", Float, nullable=True),
        Column("letter_grade", String, nullable=True),
        Column("performance_description", String, nullable=True),
        *timestamps(),
        UniqueConstraint("quiz_id", "student_id", name="quiz_attempts_quiz_student_key"),
        CheckConstraint(
            "(status = 'in_progress' AND submitted_at IS NULL) OR (status = 'submitted' AND submitted_at IS NOT NULL)",
            name="quiz_attempts_submitted_at_status",
        ),
    )
    op.create_index("quiz_attempts_student_id_idx", "quiz_attempts", ["student_id"])
    op.create_index(
        "quiz_attempts_in_progress_idx",
        "quiz_attempts",
        ["started_at"],
        postgresql_where="status = 'in_progress'",
    )

    # Assignments
    op.create_table(
        "assignments",
        Column("assignment_id", String(22), primary_key=True),
        Column("course_id", String(22), ForeignKey("courses.course_id"), nullable=False),
        Column("instructor_id", String(22), ForeignKey("users.user_id"), nullable=True),
        Column("name", String, nullable=False),
        Column("description", Text, nullable=True),
        Column("due_date", DateTime(timezone=True), nullable=False),
        Column("total_points", Integer, nullable=False, server_default="100"),
        Column("status", String, nullable=False, server_default="active"),
        *timestamps(),
        CheckConstraint("total_points > 0", name="assignments_total_points_positive"),
    )
    op.create_index("assignments_course_id_idx", "assignments", ["course_id"])

    op.create_table(
        "assignment_submissions",
        Column("submission_id", String(22), primary_key=True),
        Column("assignment_id", String(22), ForeignKey("assignments.assignment_id"), nullable=False),
        Column("student_id", String(22), ForeignKey("users.user_id"), nullable=False),
        Column("submission_number", Integer, nullable=False),
        Column("submitted_at", DateTime(timezone=True), nullable=False),
        Column("is_late", Boolean, nullable=False),
        Column("status", String, nullable=False),
        Column("content", Text, nullable=True),
        Column("points_earned", Float, nullable=True),
        Column("grade", Float, nullable=True),
        Column("letter_grade", String, nullable=True),
        Column("feedback", Text, nullable=True),
        Column("graded_at", DateTime(timezone=True), nullable=True),
        *timestamps(),
        UniqueConstraint(
            "assignment_id", "student_id", "submission_number", name="assignment_submissions_number_key"
        ),
    )

    # Grades
    op.create_table(
        "course_grades",
        Column("course_grade_id", String(22), primary_key=True),
        Column("course_id", String(22), ForeignKey("courses.course_id"), nullable=False),
        Column("student_id", String(22), ForeignKey("users.user_id"), nullable=False),
        Column("assignment_points_earned", Float, nullable=False, server_default="0"),
        Column("assignment_total_points", Float, nullable=False, server_default="0"),
        Column("assignment_percentage", Float, nullable=False, server_default="0"),
        Column("assignment_count", Integer, nullable=False, server_default="0"),
        Column("graded_assignment_count", Integer, nullable=False, server_default="0"),
        Column("quiz_points_earned", Float, nullable=False, server_default="0"),
        Column("quiz_total_points", Float, nullable=False, server_default="0"),
        Column("quiz_percentage", Float, nullable=False, server_default="0"),
        Column("quiz_count", Integer, nullable=False, server_default="0"),
        Column("attempted_quiz_count", Integer, nullable=False, server_default="0"),
        Column("assignment_weight", Float, nullable=False, server_default="60"),
        Column("quiz_weight", Float, nullable=False, server_default="40"),
        Column("final_percentage", Float, nullable=False, server_default="0"),
        Column("letter_grade", String, nullable=True),
        Column("grade_point", Float, nullable=True),
        Column("performance_description", String, nullable=True),
        *timestamps(),
        UniqueConstraint("course_id", "student_id", name="course_grades_course_student_key"),
    )
    op.create_index("course_grades_student_id_idx", "course_grades", ["student_id"])


def downgrade() -> None:
    op.drop_table("course_grades")
    op.drop_table("assignment_submissions")
    op.drop_table("assignments")
    op.drop_table("quiz_attempts")
    op.drop_table("question_options")
    op.drop_table("questions")
    op.drop_table("quizzes")
    op.drop_table("courses")
    op.drop_table("users")
