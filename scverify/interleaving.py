"""Enumeration of order-preserving merges of two sequences."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from typing import TypeVar

T = TypeVar("T")


def _merges(a: Sequence[T], b: Sequence[T]) -> Iterator[list[T]]:
    if not a and not b:
        yield []
        return
    if a:
        for rest in _merges(a[1:], b):
            yield [a[0], *rest]
    if b:
        for rest in _merges(a, b[1:]):
            yield [b[0], *rest]


def enumerate_interleavings(a: Sequence[T], b: Sequence[T]) -> list[list[T]]:
    """All interleavings of ``a`` and ``b`` that keep each one's order,
    taking from ``a`` before ``b`` at every choice."""
    return list(_merges(list(a), list(b)))