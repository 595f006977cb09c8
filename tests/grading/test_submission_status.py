from __future__ import annotations

import datetime

from tally.grading import classify
from tally.model import SubmissionStatus

D = datetime.datetime(2026, 3, 9, 23, 59, tzinfo=datetime.UTC)
SECOND = datetime.timedelta(seconds=1)


class TestClassify(object):
    def test_on_time(self) -> None:
        assert classify(D, D - SECOND) is SubmissionStatus.Submitted

    def test_exactly_at_due_is_on_time(self) -> None:
        assert classify(D, D) is SubmissionStatus.Submitted

    def test_late(self) -> None:
        assert classify(D, D + SECOND) is SubmissionStatus.LateSubmitted

    def test_late_graded(self) -> None:
        assert classify(D, D + SECOND, graded_at=D + datetime.timedelta(days=2)) is SubmissionStatus.LateGraded

    def test_graded(self) -> None:
        assert classify(D, D - SECOND, graded_at=D) is SubmissionStatus.Graded

    def test_is_graded(self) -> None:
        assert SubmissionStatus.Graded.is_graded
        assert SubmissionStatus.LateGraded.is_graded
        assert not SubmissionStatus.Submitted.is_graded
        assert not SubmissionStatus.LateSubmitted.is_graded
