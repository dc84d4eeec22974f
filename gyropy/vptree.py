"""Vantage-point tree for nearest neighbour and range search.

A VP-tree only needs a distance function that satisfies the triangle
inequality, which makes it a natural index for hyperbolic space: queries use
the hyperbolic distance directly instead of Euclidean bounding volumes.

Each node stores a vantage point and the median distance ("radius") from it to
the other members of its subtree. Members with distance <= radius go to the
inside child, the rest to the outside child. During a query a child is only
visited when the triangle inequality cannot rule it out:

    inside child:  d(q, v) - radius <= tau
    outside child: radius - d(q, v) <= tau

where tau is the current search radius. The tests are written as
`not bound > tau` so that a NaN bound (inf - inf from a custom distance)
visits the child instead of dropping it.
"""

import heapq
import logging

import torch

from . import geodesics, poincare
from ._utils import as_tensor

logger = logging.getLogger(__name__)


class VPTree:
    """Immutable vantage-point tree over a fixed point set.

    The points are copied at construction time; moving the original points
    afterwards does not affect the tree. Rebuilding is the only way to index
    new coordinates. Queries never modify the tree, so a built tree can be
    shared between threads.

    With the default Poincare distance, points and queries are clamped into
    the ball first, so boundary points rank last instead of breaking the
    pruning bounds with infinite distances.

    Example:
        >>> import torch
        >>> import gyropy
        >>>
        >>> points = gyropy.project(torch.randn(200, 8, dtype=torch.float64) * 0.3)
        >>> tree = gyropy.VPTree(points, random_state=0)
        >>> tree.knn(points[0], 5)
        >>> tree.range(points[0], 1.0)
    """

    def __init__(self, points, ids=None, distance=None, random_state=None):
        """Build the tree.

        Args:
            points: torch.tensor of shape (n, dim) - points to index
            ids: sequence of length n, opaque identifiers returned by queries
                (default: 0, ..., n-1)
            distance: callable (x, y) -> distance tensor, broadcasting over
                leading dimensions (default: Poincare ball distance)
            random_state: Optional[int], seed for vantage point selection
        """
        points = as_tensor(points)
        if points.numel() == 0:
            points = points.reshape(0, points.shape[-1] if points.dim() > 1 else 0)
        if points.dim() != 2:
            raise ValueError(f"points must have shape (n, dim), got {tuple(points.shape)}")

        n = points.shape[0]
        ids = list(range(n)) if ids is None else list(ids)
        if len(ids) != n:
            raise ValueError(f"Got {len(ids)} ids for {n} points")

        self.distance = geodesics.distance if distance is None else distance
        self.random_state = random_state
        # Boundary points would otherwise sit at infinite distance
        self._clamp = distance is None
        self._points = self._prepare(points).detach().clone()
        self._ids = ids

        # Node arrays; children are node indices, -1 for none
        self._vantage = []
        self._radius = []
        self._inside = []
        self._outside = []

        generator = torch.Generator()
        if random_state is not None:
            generator.manual_seed(random_state)
        self._root, self.depth = self._build(generator)

        logger.debug("Built VPTree over %d points (%d nodes, depth %d)", n, len(self._vantage), self.depth)

    def _prepare(self, x):
        x = as_tensor(x)
        return poincare.project(x) if self._clamp else x

    def _new_node(self):
        self._vantage.append(-1)
        self._radius.append(0.0)
        self._inside.append(-1)
        self._outside.append(-1)
        return len(self._vantage) - 1

    def _build(self, generator):
        """Partition index sets with an explicit work stack.

        Returns:
            root: int, root node index (-1 for an empty tree)
            depth: int, number of levels
        """
        n = self._points.shape[0]
        if n == 0:
            return -1, 0

        root = self._new_node()
        stack = [(root, torch.arange(n), 1)]
        depth = 0
        while stack:
            node, indices, level = stack.pop()
            depth = max(depth, level)

            pick = int(torch.randint(len(indices), (1,), generator=generator))
            vantage = int(indices[pick])
            others = torch.cat((indices[:pick], indices[pick + 1 :]))
            self._vantage[node] = vantage
            if len(others) == 0:
                continue

            dists = self.distance(self._points[vantage], self._points[others])
            median = float(torch.sort(dists).values[len(others) // 2])
            inside = dists <= median
            self._radius[node] = median

            for children, members in ((self._inside, others[inside]), (self._outside, others[~inside])):
                if len(members) > 0:
                    child = self._new_node()
                    children[node] = child
                    stack.append((child, members, level + 1))

        return root, depth

    def _distance_to(self, query, node):
        return float(self.distance(query, self._points[self._vantage[node]]))

    def knn(self, query, k, return_distance=False):
        """Find the k nearest neighbours of a query point.

        Args:
            query: torch.tensor of shape (dim,)
            k: int, number of neighbours (all points if k exceeds the size)
            return_distance: bool, if True, also return the distances

        Returns:
            ids: list of ids ordered nearest first
            distances: list of floats (only if return_distance=True)
        """
        if k < 1:
            raise ValueError(f"k must be a positive integer, got {k}")
        query = self._prepare(query)

        heap = []  # max-heap of (-distance, point index)
        tau = float("inf")
        stack = [(self._root, 0.0)] if self._root >= 0 else []
        while stack:
            node, bound = stack.pop()
            if bound > tau:
                continue

            d = self._distance_to(query, node)
            vantage = self._vantage[node]
            if len(heap) < k:
                heapq.heappush(heap, (-d, vantage))
            elif d < -heap[0][0]:
                heapq.heapreplace(heap, (-d, vantage))
            if len(heap) == k:
                tau = -heap[0][0]

            radius = self._radius[node]
            children = [(self._inside[node], d - radius), (self._outside[node], radius - d)]
            if d < radius:
                # Search the inside child first
                children.reverse()
            for child, child_bound in children:
                if child >= 0 and not child_bound > tau:
                    stack.append((child, child_bound))

        found = sorted((-neg_d, idx) for neg_d, idx in heap)
        ids = [self._ids[idx] for _, idx in found]
        if return_distance:
            return ids, [d for d, _ in found]
        return ids

    def range(self, query, radius):
        """Find all points within a hyperbolic distance of the query.

        Args:
            query: torch.tensor of shape (dim,)
            radius: float, search radius

        Returns:
            list of ids with distance <= radius, in no particular order
        """
        query = self._prepare(query)
        results = []
        stack = [self._root] if self._root >= 0 else []
        while stack:
            node = stack.pop()
            d = self._distance_to(query, node)
            if d <= radius:
                results.append(self._ids[self._vantage[node]])

            split = self._radius[node]
            if self._inside[node] >= 0 and not d - radius > split:
                stack.append(self._inside[node])
            if self._outside[node] >= 0 and not d + radius < split:
                stack.append(self._outside[node])
        return results

    def __len__(self):
        return self._points.shape[0]

    def __repr__(self):
        return f"VPTree(n_points={len(self)}, depth={self.depth})"
