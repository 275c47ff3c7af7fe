"""
K-means clustering implementation for happymath.

This module provides k-means++ seeding and Lloyd refinement over
z-scored feature vectors. All randomness comes from an injected
numpy Generator so that runs can be reproduced.
"""

import logging
import numpy as np
from typing import Any, Dict, List, Optional, Union

from happymath.errors import InsufficientDataError
from happymath.math.named_matrix import FeatureMatrix
from happymath.math.normalize import zscore

logger = logging.getLogger(__name__)

RandomSource = Union[None, int, np.random.Generator]


class Cluster:
    """
    Represents a cluster in K-means clustering.
    """

    def __init__(self,
                 center: np.ndarray,
                 members: Optional[List[int]] = None,
                 id: Optional[int] = None):
        """
        Initialize a cluster with a center and optional members.

        Args:
            center: The center of the cluster
            members: Indices of members belonging to the cluster
            id: Unique identifier for the cluster
        """
        self.center = np.array(center, dtype=float)
        self.members = [] if members is None else list(members)
        self.id = id

    @property
    def size(self) -> int:
        return len(self.members)

    def add_member(self, idx: int) -> None:
        """
        Add a member to the cluster.

        Args:
            idx: Index of the member to add
        """
        self.members.append(idx)

    def __repr__(self) -> str:
        """String representation of the cluster."""
        return f"Cluster(id={self.id}, members={len(self.members)})"


class KMeansResult:
    """
    Outcome of a k-means run: centroids in normalized space and one
    cluster label per input point.
    """

    def __init__(self,
                 centroids: np.ndarray,
                 labels: np.ndarray,
                 iterations: int,
                 converged: bool,
                 inertia: float):
        self.centroids = centroids
        self.labels = labels
        self.iterations = iterations
        self.converged = converged
        self.inertia = inertia

    @property
    def k(self) -> int:
        return self.centroids.shape[0]

    def clusters(self) -> List[Cluster]:
        """
        Convert the result into Cluster objects, one per centroid.

        Empty clusters are kept.

        Returns:
            List of clusters ordered by id
        """
        clusters = [Cluster(center, [], i) for i, center in enumerate(self.centroids)]
        for idx, label in enumerate(self.labels):
            clusters[int(label)].add_member(idx)
        return clusters

    def __repr__(self) -> str:
        return (f"KMeansResult(k={self.k}, iterations={self.iterations}, "
                f"converged={self.converged})")


def make_rng(rng: RandomSource = None) -> np.random.Generator:
    """
    Resolve a random source into a numpy Generator.

    Args:
        rng: None (fresh entropy), an integer seed, or a Generator

    Returns:
        numpy Generator
    """
    if isinstance(rng, np.random.Generator):
        return rng
    if rng is None or isinstance(rng, (int, np.integer)):
        return np.random.default_rng(rng)
    raise ValueError(f"Unsupported random source: {rng!r}")


def squared_distances(data: np.ndarray, centroids: np.ndarray) -> np.ndarray:
    """
    Squared Euclidean distance from every point to every centroid.

    Args:
        data: Points (n x d)
        centroids: Centroids (k x d)

    Returns:
        Matrix of shape (n, k)
    """
    diff = data[:, np.newaxis, :] - centroids[np.newaxis, :, :]
    return np.sum(diff * diff, axis=2)


def init_centroids(data: np.ndarray, k: int, rng: np.random.Generator) -> np.ndarray:
    """
    Choose k initial centroids with k-means++ seeding.

    The first centroid is a uniformly random point. Each next one is drawn
    with probability proportional to the squared distance to the nearest
    centroid already chosen, using a roulette wheel over cumulative weights.
    When every weight is zero (all points coincide with chosen centroids)
    the draw falls back to uniform.

    Args:
        data: Points (n x d)
        k: Number of centroids
        rng: Random generator

    Returns:
        Centroid matrix (k x d)
    """
    n_points = data.shape[0]

    centers = [data[int(rng.integers(n_points))]]

    while len(centers) < k:
        weights = squared_distances(data, np.array(centers)).min(axis=1)
        cumulative = np.cumsum(weights)
        # The wheel spans exactly the cumulative sum, so a spin never passes its end
        total = cumulative[-1]

        if total <= 0:
            next_idx = int(rng.integers(n_points))
        else:
            spin = rng.random() * total
            # First index whose cumulative weight passes the spin; never a zero-weight point
            next_idx = min(int(np.searchsorted(cumulative, spin, side='right')), n_points - 1)

        centers.append(data[next_idx])

    return np.array(centers, dtype=float)


def assign_points(data: np.ndarray, centroids: np.ndarray, labels: np.ndarray):
    """
    Assign each point to its nearest centroid.

    Ties go to the lowest centroid index.

    Args:
        data: Points (n x d)
        centroids: Centroids (k x d)
        labels: Current labels

    Returns:
        Tuple of (new labels, whether any label changed)
    """
    new_labels = np.argmin(squared_distances(data, centroids), axis=1)
    changed = bool(np.any(new_labels != labels))
    return new_labels, changed


def update_centroids(data: np.ndarray, labels: np.ndarray, centroids: np.ndarray) -> np.ndarray:
    """
    Recompute each centroid as the mean of its assigned points.

    Centroids with no assigned points keep their previous position.

    Args:
        data: Points (n x d)
        labels: Cluster label per point
        centroids: Current centroids (k x d)

    Returns:
        Updated centroids
    """
    new_centroids = centroids.copy()
    for c in range(centroids.shape[0]):
        mask = labels == c
        if np.any(mask):
            new_centroids[c] = data[mask].mean(axis=0)
    return new_centroids


def kmeans(data: np.ndarray,
           k: int,
           max_iter: int = 100,
           rng: RandomSource = None) -> KMeansResult:
    """
    Perform K-means clustering on the data.

    Args:
        data: Data matrix (n x d), usually z-scored
        k: Number of clusters (2 <= k <= n)
        max_iter: Maximum number of assignment passes
        rng: Random source for seeding

    Returns:
        KMeansResult
    """
    data = np.asarray(data, dtype=float)
    if data.ndim != 2:
        raise ValueError(f"Expected a 2-dimensional matrix, got shape {data.shape}")

    if isinstance(k, bool) or not isinstance(k, (int, np.integer)) or k < 2:
        raise ValueError(f"k must be an integer >= 2, got {k!r}")
    if isinstance(max_iter, bool) or not isinstance(max_iter, (int, np.integer)) or max_iter < 1:
        raise ValueError(f"max_iter must be an integer >= 1, got {max_iter!r}")

    n_points = data.shape[0]
    if n_points < k:
        raise InsufficientDataError(
            f"Not enough rows for requested k: {n_points} < {k}",
            required=int(k),
            available=n_points
        )

    rng = make_rng(rng)
    centroids = init_centroids(data, k, rng)
    labels = np.zeros(n_points, dtype=int)

    iterations = 0
    converged = False
    for _ in range(max_iter):
        iterations += 1
        labels, changed = assign_points(data, centroids, labels)
        centroids = update_centroids(data, labels, centroids)
        if not changed:
            converged = True
            break

    inertia = float(np.sum((data - centroids[labels]) ** 2))

    logger.debug(f"k-means with k={k} on {n_points} points stopped after {iterations} "
                 f"iterations (converged={converged})")

    return KMeansResult(centroids, labels, iterations, converged, inertia)


def distance_matrix(data: np.ndarray) -> np.ndarray:
    """
    Calculate the distance matrix for a set of points.

    Args:
        data: Data matrix

    Returns:
        Matrix of pairwise Euclidean distances
    """
    return np.sqrt(np.maximum(squared_distances(data, data), 0.0))


def silhouette(data: np.ndarray, labels: np.ndarray) -> float:
    """
    Calculate the silhouette coefficient for a clustering.

    Points in singleton clusters score 0.

    Args:
        data: Data matrix
        labels: Cluster label per point

    Returns:
        Silhouette coefficient (between -1 and 1)
    """
    data = np.asarray(data, dtype=float)
    labels = np.asarray(labels)
    groups = [g for g in np.unique(labels)]

    if len(groups) <= 1 or data.shape[0] == 0:
        return 0.0

    dist = distance_matrix(data)
    values = []

    for idx in range(data.shape[0]):
        own = labels[idx]
        same = (labels == own)
        same[idx] = False

        if not np.any(same):
            values.append(0.0)
            continue

        a = dist[idx, same].mean()
        b = min(dist[idx, labels == g].mean() for g in groups if g != own)

        if a == 0 and b == 0:
            values.append(0.0)
        else:
            values.append((b - a) / max(a, b))

    return float(np.mean(values))


def cluster_named_matrix(nmat: FeatureMatrix,
                         k: int,
                         max_iter: int = 100,
                         rng: RandomSource = None) -> Dict[str, Any]:
    """
    Normalize a complete FeatureMatrix and cluster its rows.

    Args:
        nmat: FeatureMatrix without missing values
        k: Number of clusters
        max_iter: Maximum number of iterations
        rng: Random source for seeding

    Returns:
        Dictionary with the KMeansResult ('result'), the cluster list in
        dictionary form ('clusters') and the silhouette coefficient
    """
    normalized, _, _ = zscore(nmat.values)
    result = kmeans(normalized, k, max_iter, rng)

    features = nmat.colnames()
    rownames = nmat.rownames()

    clusters = []
    for cluster in result.clusters():
        clusters.append({
            'id': cluster.id,
            'center': {f: float(v) for f, v in zip(features, cluster.center)},
            'members': [rownames[idx] for idx in cluster.members],
            'member_indices': list(cluster.members),
            'size': cluster.size
        })

    return {
        'result': result,
        'clusters': clusters,
        'silhouette': silhouette(normalized, result.labels)
    }
