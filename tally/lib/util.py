import typing as t
from collections.abc import Mapping

KT = t.TypeVar("KT")
VT = t.TypeVar("VT")
RecursiveMapping = VT | Mapping[KT, "RecursiveMapping[KT, VT]"]


def deep_update(
    d1: dict[KT, RecursiveMapping[KT, VT]], d2: Mapping[KT, RecursiveMapping[KT, VT]]
) -> dict[KT, RecursiveMapping[KT, VT]]:
    """Merge ``d2`` into a copy of ``d1``, descending into nested mappings."""
    result = d1.copy()
    for k, v in d2.items():
        if isinstance(v, Mapping) and k in result and isinstance(result[k], Mapping):
            result[k] = deep_update(result[k], v)  # type: ignore
        else:
            result[k] = v
    return result


def parse_override(override: t.Iterable[str]) -> list[tuple[list[str], str]]:
    """Split ``a.b.c=value`` override strings into key paths and raw values."""
    parsed: list[tuple[list[str], str]] = []
    for o in override:
        if "=" not in o:
            raise ValueError(f"invalid override {o!r}: expected key.path=value")
        k, v = [s.strip() for s in o.split("=", 1)]
        parsed.append((k.split("."), v))
    return parsed
