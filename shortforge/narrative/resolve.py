from typing import Optional, TypeVar

T = TypeVar("T")


def resolve(explicit: Optional[T], computed: T) -> T:
    """Return the caller's explicit value when present, else the computed default.

    Only ``None`` counts as absent; falsy values such as ``0`` are kept.
    """
    return explicit if explicit is not None else computed
