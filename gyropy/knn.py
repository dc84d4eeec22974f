"""Exact hyperbolic nearest neighbour search with FAISS.

Brute-force counterpart of the VP-tree, useful as a baseline and for large
batches of queries. Distances come from Lorentzian inner products.
"""

import numpy as np
import faiss
import torch

from . import hyperboloid

MODELS = ("poincare", "lorentz")


class LorentzKNN:
    """K-Nearest Neighbors search using Lorentzian distance.

    Uses a FAISS flat inner product index. The Lorentzian inner product
    <x, y>_L = -x_0*y_0 + x_1*y_1 + ... is obtained by negating the time
    coordinate of the indexed points before FAISS computes plain dot
    products, so that larger scores mean closer points:

        d(x, y) = arcosh(-<x, y>_L)

    FAISS works in float32. Where -<x, y>_L - 1 is within the float32 rounding
    error of the inner product, which grows with x_0 * y_0, the distance is
    snapped to zero.
    """

    def __init__(self, model="poincare"):
        """Initialize LorentzKNN.

        Args:
            model: str, coordinate model of added and queried points,
                "poincare" (ball coordinates) or "lorentz" (hyperboloid)
        """
        if model not in MODELS:
            raise ValueError(f"model must be one of {MODELS}, got {model!r}")
        self.model = model
        self.index = None
        self.ids = None
        self._time = None

    def _to_lorentz(self, points):
        if torch.is_tensor(points):
            points = points.detach().cpu()
        else:
            points = torch.as_tensor(np.asarray(points), dtype=torch.float64)
        if self.model == "poincare":
            points = hyperboloid.from_poincare(points.to(torch.float64))
        emb = points.numpy().astype(np.float32)
        return np.ascontiguousarray(emb.reshape(-1, emb.shape[-1]))

    def _check_built(self):
        if self.index is None:
            raise ValueError("Must call add() before search()")

    def add(self, points, ids=None):
        """Build FAISS index from points.

        Args:
            points: torch.tensor or np.ndarray of shape (n, dim) in the
                configured model
            ids: sequence of length n, identifiers returned by knn() and
                range() (default: 0, ..., n-1)

        Returns:
            self for method chaining
        """
        emb = self._to_lorentz(points)
        if ids is not None and len(ids) != emb.shape[0]:
            raise ValueError(f"Got {len(ids)} ids for {emb.shape[0]} points")

        # Negate time coordinate so that FAISS inner product gives <x, y>_L
        self._time = emb[:, 0].astype(np.float64)
        emb[:, 0] *= -1

        self.index = faiss.IndexFlatIP(emb.shape[1])
        self.index.add(emb)
        self.ids = list(range(emb.shape[0])) if ids is None else list(ids)
        return self

    def search(self, queries, n_neighbors):
        """Find k nearest neighbors.

        Args:
            queries: torch.tensor or np.ndarray of shape (n, dim) in the
                configured model
            n_neighbors: int, number of neighbors to find

        Returns:
            distances: np.ndarray of shape (n, n_neighbors) - hyperbolic distances
            indices: np.ndarray of shape (n, n_neighbors) - neighbor positions
        """
        self._check_built()
        emb = self._to_lorentz(queries)
        inner, indices = self.index.search(emb, n_neighbors)

        # inner is <query, indexed>_L, so -inner = cosh(d)
        cosh_d = -inner.astype(np.float64)
        distances = np.arccosh(np.maximum(cosh_d, 1.0))
        # Rounding error of a float32 dot product, including the conversion
        tol = 2 * (emb.shape[1] + 2) * np.finfo(np.float32).eps
        scale = emb[:, :1].astype(np.float64) * self._time[np.maximum(indices, 0)]
        distances[cosh_d - 1.0 <= tol * scale] = 0.0
        return distances, indices

    def knn(self, query, k):
        """Ids of the k nearest neighbours of a single query, nearest first."""
        self._check_built()
        _, indices = self.search(query, min(k, self.index.ntotal))
        return [self.ids[i] for i in indices[0] if i >= 0]

    def range(self, query, radius):
        """Ids of all indexed points within hyperbolic distance radius."""
        self._check_built()
        emb = self._to_lorentz(query)
        # d <= radius  <=>  <x, y>_L >= -cosh(radius)
        threshold = -float(np.cosh(radius))
        _, _, indices = self.index.range_search(emb[:1], threshold)
        return [self.ids[i] for i in indices]

    def __len__(self):
        return self.index.ntotal if self.index is not None else 0

    def __repr__(self):
        return f"LorentzKNN(model={self.model!r}, n_points={len(self)})"
