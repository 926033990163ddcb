"""Minimal usage example for tsneighbors on a delay-embedded time series."""

import numpy as np

from tsneighbors import KdTree, NeighborNumber, Theiler, WithinRange, bulksearch

num_samples = 2000
dimension = 3
delay = 8
theiler_window = 10

# Delay-embed a noisy sine wave: row i is (x[i], x[i + delay], x[i + 2 * delay]).
t = np.linspace(0, 40 * np.pi, num_samples + (dimension - 1) * delay)
x = np.sin(t) + 0.05 * np.random.randn(t.size)
embedding = np.column_stack([x[i * delay : i * delay + num_samples] for i in range(dimension)])

tree = KdTree(embedding, metric="chebyshev")

# Nearest neighbours that are at least `theiler_window` steps away in time.
idxs, dists = bulksearch(tree, embedding, NeighborNumber(3), Theiler(theiler_window), n_jobs=4)
print(f"point 0: neighbours {idxs[0]} at distances {np.round(dists[0], 4)}")

# Recurrence-style neighbourhoods: everything within a fixed radius.
idxs, _ = bulksearch(tree, embedding, WithinRange(0.1), theiler_window)
print(f"mean recurrences per point: {np.mean([len(ids) for ids in idxs]):.1f}")
