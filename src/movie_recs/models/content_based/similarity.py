import numpy as np


def cosine(u, v) -> float:
    """Cosine similarity of two vectors, or nan when either has zero norm."""
    u = np.asarray(u, dtype=float).ravel()
    v = np.asarray(v, dtype=float).ravel()
    if u.shape != v.shape:
        raise ValueError(f"Vectors differ in length: {u.shape[0]} vs {v.shape[0]}")

    denom = np.linalg.norm(u) * np.linalg.norm(v)
    if denom == 0:
        return float("nan")
    return float(np.clip(np.dot(u, v) / denom, -1.0, 1.0))


def row_norms(matrix) -> np.ndarray:
    return np.linalg.norm(np.asarray(matrix, dtype=float), axis=1)


def cosine_to_rows(query, matrix, norms=None) -> np.ndarray:
    """Cosine similarity of `query` against every row of `matrix`.

    Rows with zero norm, or every row when the query itself is zero, get nan.
    Pass precomputed `norms` (see row_norms) to skip recomputing them per query.
    """
    matrix = np.asarray(matrix, dtype=float)
    query = np.asarray(query, dtype=float).ravel()
    if matrix.ndim != 2 or matrix.shape[1] != query.shape[0]:
        raise ValueError(f"Query of length {query.shape[0]} does not match matrix of shape {matrix.shape}")

    if norms is None:
        norms = row_norms(matrix)
    denom = norms * np.linalg.norm(query)
    dots = matrix @ query

    scores = np.full(dots.shape, np.nan)
    np.divide(dots, denom, out=scores, where=denom > 0)
    return np.clip(scores, -1.0, 1.0)
