from __future__ import annotations

from sqlalchemy.orm import Session

import tally.lib.cli as click
from tally.core import di, TimestampProvider
from tally.grading import attempt as attempt_service
from tally.grading import AttemptClock
from tally.model import AttemptStatus, QuizID
from tally.storage import attempt as attempt_storage
from tally.storage import quiz as quiz_storage


@click.group("attempt")
def attempt(): ...


@attempt.command()
@click.option("-n", "--dry-run", is_flag=True, default=False, help="list overdue attempts without submitting them")
@di.inject
def expire(
    dry_run: bool,
    session: Session = di.Provide["storage.persistent.session"],
    utcnow: TimestampProvider = di.Provide["utcnow"],  # noqa: B008
):
    """Auto-submit every in-progress attempt whose time has run out."""
    with session.begin():
        if dry_run:
            overdue = attempt_storage.find_overdue(utcnow(), session=session)
            for a in overdue:
                click.echo(f"{a.attempt_id}\t{a.quiz_id}\t{a.student_id}\tstarted {a.started_at.isoformat()}")
            click.echo(f"{len(overdue)} overdue attempt(s)")
            return

        expired = attempt_service.expire_overdue(session=session)
        for a in expired:
            click.echo(f"{a.attempt_id}\t{a.letter_grade}\t{a.points_earned}/{a.total_points}")
        click.echo(f"auto-submitted {len(expired)} attempt(s)")


@attempt.command(name="list")
@click.argument("quiz_id", type=QuizID)
@click.option("--in-progress", is_flag=True, default=False)
@di.inject
def list_(
    quiz_id: QuizID,
    in_progress: bool,
    session: Session = di.Provide["storage.persistent.session"],
    utcnow: TimestampProvider = di.Provide["utcnow"],  # noqa: B008
):
    """List the attempts at a quiz with their time remaining."""
    clock = AttemptClock(utcnow)
    with session.begin():
        quiz = quiz_storage.get(quiz_id, session=session)
        if quiz is None:
            raise click.ClickException(f"quiz {quiz_id} not found")

        status = AttemptStatus.InProgress if in_progress else None
        for a in attempt_storage.find(quiz_id=quiz_id, status=status, session=session):
            if a.is_submitted:
                click.echo(f"{a.attempt_id}\t{a.student_id}\tsubmitted\t{a.percentage}%\t{a.letter_grade}")
            else:
                remaining = clock.remaining_minutes(a, quiz)
                click.echo(f"{a.attempt_id}\t{a.student_id}\tin progress\t{remaining} min left")
