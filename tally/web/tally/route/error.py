from __future__ import annotations

import contextlib
import typing as t

from fastapi import HTTPException, status

from tally.grading import InvalidState, NotFound, ValidationError


@contextlib.contextmanager
def grading_errors() -> t.Iterator[None]:
    """Translate grading errors raised in the block into HTTP errors."""
    try:
        yield
    except NotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except InvalidState as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e
