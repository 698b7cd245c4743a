"""Dependency ordering for buckets.

Each bucket has at most one outgoing "depends on" edge, so the graph is a
set of chains. A three-colour depth-first walk (white = unvisited,
gray = on the current path, black = emitted) yields an order in which
every bucket follows the bucket it depends on. Reaching a gray node means
the path closed on itself.
"""

from __future__ import annotations

from collections.abc import Sequence

from multipr.exceptions import CycleDetectedError
from multipr.logging import get_logger
from multipr.types import BrokenEdge, Bucket, Resolution

logger = get_logger("resolver")

_WHITE, _GRAY, _BLACK = 0, 1, 2


def topological_order(buckets: Sequence[Bucket]) -> list[str]:
    """Order bucket names so that dependencies come first.

    Roots are visited in the given (insertion) order. An edge to a bucket
    that is not in ``buckets`` is ignored.

    Args:
        buckets: Buckets with their ``depends_on`` edges

    Returns:
        Every bucket name exactly once

    Raises:
        CycleDetectedError: If following edges revisits a bucket on the current path
    """
    by_name = {b.name: b for b in buckets}
    color = dict.fromkeys(by_name, _WHITE)
    order: list[str] = []

    for root in by_name:
        if color[root] != _WHITE:
            continue

        path: list[str] = []
        node: str | None = root
        while node is not None and color[node] == _WHITE:
            color[node] = _GRAY
            path.append(node)
            dep = by_name[node].depends_on
            node = dep if dep in by_name else None

        if node is not None and color[node] == _GRAY:
            cycle = path[path.index(node) :]
            raise CycleDetectedError(cycle, closing_bucket=path[-1])

        # Deepest dependency first
        for name in reversed(path):
            color[name] = _BLACK
            order.append(name)

    return order


class DependencyResolver:
    """Compute processing order, breaking cycles by removing edges."""

    def resolve(self, buckets: Sequence[Bucket], prefer_break: str | None = None) -> Resolution:
        """Order buckets and assign each its ``order`` index.

        On a cycle, the edge of ``prefer_break`` is cleared if that bucket
        lies on the cycle, otherwise the edge of the bucket that closed it.
        The sort then restarts from scratch. Every restart removes one
        edge, so this terminates after at most ``len(buckets)`` restarts.

        Args:
            buckets: Buckets to order; ``depends_on`` and ``order`` are mutated
            prefer_break: Bucket whose edge should be dropped first, typically
                the one whose dependency was just set

        Returns:
            Resolution with the order and any edges that were removed
        """
        by_name = {b.name: b for b in buckets}
        broken: list[BrokenEdge] = []

        while True:
            try:
                order = topological_order(buckets)
            except CycleDetectedError as e:
                victim = prefer_break if prefer_break in e.cycle else e.closing_bucket
                bucket = by_name[victim]
                edge = BrokenEdge(bucket=victim, depends_on=bucket.depends_on or "", cycle=tuple(e.cycle))
                bucket.depends_on = None
                broken.append(edge)
                logger.warning(
                    f"Circular dependency detected involving {victim}. "
                    f"Dependency on {edge.depends_on} removed."
                )
                continue
            break

        for index, name in enumerate(order):
            by_name[name].order = index

        return Resolution(order=order, broken=broken)
