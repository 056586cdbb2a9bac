# image_toolbox/batch.py
from __future__ import annotations

"""
Sequential batch runner.

Items are processed strictly one after another. A ToolboxError marks only that
item as failed; SurfaceUnavailable aborts the whole run because no later item
could succeed either. Nothing is retried.
"""

from dataclasses import dataclass
from typing import Callable, Generic, Iterable, List, Optional, TypeVar

from .errors import SurfaceUnavailable, ToolboxError
from .utils import warn

S = TypeVar("S")
R = TypeVar("R")


@dataclass
class BatchItem(Generic[S, R]):
    source: S
    result: Optional[R] = None
    error: Optional[ToolboxError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def run_sequential(
    sources: Iterable[S],
    operation: Callable[[S], R],
    *,
    on_item: Optional[Callable[[BatchItem[S, R]], None]] = None,
) -> List[BatchItem[S, R]]:
    """Apply `operation` to each source in order; `on_item` sees every finished item."""
    items: List[BatchItem[S, R]] = []
    for source in sources:
        item: BatchItem[S, R] = BatchItem(source)
        try:
            item.result = operation(source)
        except SurfaceUnavailable:
            raise
        except ToolboxError as exc:
            warn(f"{source}: {exc}")
            item.error = exc
        items.append(item)
        if on_item is not None:
            on_item(item)
    return items


__all__ = ["BatchItem", "run_sequential"]
