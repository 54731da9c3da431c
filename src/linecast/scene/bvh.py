"""Bounding volume tree over scene shapes.

The tree is built once, top-down and balanced: each level splits its items
on the axis where their bounding box centers are most spread out, at the
median. Leaves hold exactly one shape and its bounding box; internal nodes
hold the union of their children's boxes.

Two traversals are provided:

- ``visit``: depth-first, left child before right. The visitor decides per
  node whether to descend further.
- ``best_first_search``: nodes are expanded in order of a cost the visitor
  assigns, such as the time of impact of a ray with the node's box. The
  search ends when no queued node can beat the best result so far, or the
  visitor exits early.

Example:
    >>> from linecast.scene.bvh import BoundingVolumeTree, VisitStatus
    >>> tree = BoundingVolumeTree([(shape, shape.bounding_box()) for shape in shapes])
    >>> class Collect:
    ...     def __init__(self):
    ...         self.names = []
    ...     def visit(self, node):
    ...         if node.is_leaf:
    ...             self.names.append(node.shape.name)
    ...         return VisitStatus.CONTINUE
    >>> collector = Collect()
    >>> tree.visit(collector)
"""

from __future__ import annotations

import heapq
import itertools
import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, Protocol, TypeVar

import numpy as np

from linecast.geometry.aabb import AABB

log = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


class VisitStatus(Enum):
    """Outcome of a depth-first visit of one node."""

    CONTINUE = 1
    STOP = 2


@dataclass(eq=False)
class BVTNode(Generic[T]):
    """A node of a ``BoundingVolumeTree``.

    Attributes:
        aabb: Bounding box of everything below this node.
        shape: The item of a leaf node, None for internal nodes.
        left: First child (internal nodes only).
        right: Second child (internal nodes only).
    """

    aabb: AABB
    shape: T | None = None
    left: BVTNode[T] | None = None
    right: BVTNode[T] | None = None

    @property
    def is_leaf(self) -> bool:
        return self.left is None

    def children(self) -> tuple[BVTNode[T], ...]:
        if self.left is None or self.right is None:
            return ()
        return (self.left, self.right)


@dataclass(frozen=True)
class BestFirstVisitStatus(Generic[R]):
    """Outcome of a best-first visit of one node.

    Use the constructors ``continue_with``, ``stop`` and ``exit_early``.

    Attributes:
        kind: "continue", "stop" or "exit_early".
        cost: Cost of the node's subtree (continue only). Children are
            queued with this cost.
        result: Candidate result (continue) or final result (exit_early).
    """

    kind: str
    cost: float = 0.0
    result: R | None = None

    @classmethod
    def continue_with(cls, cost: float, result: R | None = None) -> BestFirstVisitStatus[R]:
        """Descend into the node's children, optionally offering a result."""
        return cls("continue", cost, result)

    @classmethod
    def stop(cls) -> BestFirstVisitStatus[R]:
        """Ignore the node's children."""
        return cls("stop")

    @classmethod
    def exit_early(cls, result: R | None) -> BestFirstVisitStatus[R]:
        """End the whole search with ``result``."""
        return cls("exit_early", result=result)


class Visitor(Protocol[T]):
    def visit(self, node: BVTNode[T]) -> VisitStatus: ...


class BestFirstVisitor(Protocol[T, R]):
    def visit(self, best_cost: float, node: BVTNode[T]) -> BestFirstVisitStatus[R]: ...


class BoundingVolumeTree(Generic[T]):
    """A balanced binary tree of axis-aligned bounding boxes.

    Attributes:
        root: The root node, or None for an empty tree.
    """

    def __init__(self, items: Sequence[tuple[T, AABB]]) -> None:
        self.root: BVTNode[T] | None = _build(list(items)) if items else None
        log.debug("Built bounding volume tree: %d leaves, depth %d", len(items), self.depth)

    def __len__(self) -> int:
        return sum(1 for _ in self.leaves())

    @property
    def depth(self) -> int:
        """Number of levels in the tree (0 when empty)."""

        def node_depth(node: BVTNode[T] | None) -> int:
            if node is None:
                return 0
            return 1 + max(node_depth(node.left), node_depth(node.right))

        return node_depth(self.root)

    def leaves(self) -> list[BVTNode[T]]:
        """Return the leaves in left-to-right order."""
        leaves: list[BVTNode[T]] = []
        stack = [self.root] if self.root is not None else []
        while stack:
            node = stack.pop()
            if node.is_leaf:
                leaves.append(node)
            else:
                stack.extend(reversed(node.children()))
        return leaves

    def visit(self, visitor: Visitor[T]) -> None:
        """Visit nodes depth-first, skipping the children of STOP nodes."""
        stack = [self.root] if self.root is not None else []
        while stack:
            node = stack.pop()
            if visitor.visit(node) is VisitStatus.CONTINUE:
                # Right pushed first so the left subtree is visited first
                stack.extend(reversed(node.children()))

    def best_first_search(self, visitor: BestFirstVisitor[T, R]) -> R | None:
        """Expand nodes in order of increasing cost.

        Each queued node carries the cost its parent was given (the root
        starts at 0). Nodes with equal cost are expanded in the order they
        were queued.

        Returns:
            The result of an early exit if the visitor requested one,
            otherwise the result offered with the lowest cost, or None.
        """
        if self.root is None:
            return None

        counter = itertools.count()
        queue: list[tuple[float, int, BVTNode[T]]] = [(0.0, next(counter), self.root)]
        best_cost = math.inf
        best_result: R | None = None

        while queue:
            cost, _, node = heapq.heappop(queue)
            if cost >= best_cost:
                break

            status = visitor.visit(best_cost, node)
            if status.kind == "exit_early":
                return status.result
            if status.kind == "stop":
                continue

            if status.result is not None and status.cost < best_cost:
                best_cost = status.cost
                best_result = status.result
            for child in node.children():
                heapq.heappush(queue, (status.cost, next(counter), child))

        return best_result


def _build(items: list[tuple[Any, AABB]]) -> BVTNode[Any]:
    if len(items) == 1:
        shape, aabb = items[0]
        return BVTNode(aabb=aabb, shape=shape)

    centers = np.array([aabb.center for _, aabb in items])
    axis = int(np.argmax(centers.max(axis=0) - centers.min(axis=0)))
    ordered = sorted(items, key=lambda item: float(item[1].center[axis]))

    mid = len(ordered) // 2
    left = _build(ordered[:mid])
    right = _build(ordered[mid:])
    return BVTNode(aabb=left.aabb.merged(right.aabb), left=left, right=right)
