"""
Order-preserving merge helpers.

Existing items always keep their position; incoming items are appended only
when their identity has not been seen yet, so the first-seen instance wins.
Neither input is ever mutated.
"""

from typing import Callable, Hashable, Iterable, TypeVar

T = TypeVar("T")


def _merge(existing: Iterable[T], incoming: Iterable[T], key_fn: Callable[[T], Hashable]) -> list[T]:
    out = list(existing)
    seen = {key_fn(item) for item in out}
    for item in incoming:
        key = key_fn(item)
        if key not in seen:
            seen.add(key)
            out.append(item)
    return out


def merge_unique_by_id(existing: Iterable[T], incoming: Iterable[T]) -> list[T]:
    """Merge by the ``id`` attribute (or ``"id"`` key for plain dicts)."""
    return _merge(existing, incoming, _id_of)


def merge_unique_by_key(
    existing: Iterable[T], incoming: Iterable[T], key_fn: Callable[[T], Hashable]
) -> list[T]:
    """Merge using a caller-supplied identity, e.g. a ``type:id`` composite key."""
    return _merge(existing, incoming, key_fn)


def _id_of(item) -> Hashable:
    if isinstance(item, dict):
        return item["id"]
    return item.id
