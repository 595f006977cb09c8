"""Thin layer over :mod:`dependency_injector` used throughout Tally.

Services and route handlers declare what they need as keyword defaults::

    @di.inject
    def submit(..., session: Session = di.Provide["storage.persistent.session"]): ...

Callers that already hold a session pass it explicitly, which keeps one
transaction across nested service calls.
"""

from __future__ import annotations

__all__ = [
    "Manage",
    "Provide",
    "as_",
    "inject",
]

import functools
import typing as t

import dependency_injector.wiring as wiring
from dependency_injector.containers import Container
from dependency_injector.providers import Provider
from dependency_injector.wiring import ClassGetItemMeta, Closing, Provide, TypeModifier

P = t.ParamSpec("P")
TReturn = t.TypeVar("TReturn")
T = t.TypeVar("T")


def inject(fn: t.Callable[P, TReturn]) -> t.Callable[P, TReturn]:
    # same as wiring.inject, minus its loss of the signature's type
    reference_injections, reference_closing = wiring._fetch_reference_injections(fn)  # pyright: ignore [reportPrivateUsage] noqa: E501
    patched = wiring._get_patched(fn, reference_injections, reference_closing)  # pyright: ignore [reportPrivateUsage] noqa: E501

    # FastAPI resolves the handler's annotations against its module globals
    if fn.__module__.startswith("tally.web") and hasattr(fn, "__globals__"):
        return functools.wraps(fn, updated=("__globals__",))(patched)
    return patched


class Manage(object, metaclass=ClassGetItemMeta):
    """``Closing[Provide[...]]``: the provided resource is closed after the call."""

    def __new__(cls, provider: Provider[T] | Container | str):
        return Closing[Provide[provider]]

    @classmethod
    def __class_getitem__(cls, item: Provider[T] | Container | str):
        return cls(item)


def as_(type_: type[T]) -> TypeModifier:
    """Cast the provided config mapping into ``type_``."""
    return TypeModifier(type_)
