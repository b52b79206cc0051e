"""Site pattern compression of symbol matrices.

A pattern is the series of symbols at one column across all rows. Identical
columns are collapsed to a single representative with a weight equal to the
number of columns it stands for.
"""

from __future__ import annotations

import numpy


def column_keys(matrix: numpy.ndarray) -> numpy.ndarray:
    """returns the columns of a 2D symbol matrix as strings"""
    return numpy.array(["".join(column) for column in matrix.T.tolist()], dtype=str)


def column_patterns(matrix: numpy.ndarray) -> tuple[numpy.ndarray, numpy.ndarray, numpy.ndarray]:
    """identifies the distinct columns of matrix

    Parameters
    ----------
    matrix
        2D array of single character symbols, axis 0 is sequences

    Returns
    -------
    patterns
        2D array with one column per distinct pattern, ordered by the
        lexicographic order of the column strings
    weights
        number of columns of matrix matching each pattern
    inverse
        for each column of matrix, the index of its pattern

    Notes
    -----
    ``patterns[:, inverse]`` reproduces matrix.
    """
    if matrix.ndim != 2:
        msg = f"expected a 2D matrix, not {matrix.ndim}D"
        raise ValueError(msg)

    if matrix.shape[1] == 0:
        empty = numpy.zeros(0, dtype=int)
        return matrix.copy(), empty, empty

    _, first, inverse, weights = numpy.unique(
        column_keys(matrix),
        return_index=True,
        return_inverse=True,
        return_counts=True,
    )
    return matrix[:, first], weights, inverse.reshape(-1)


def expand_patterns(patterns: numpy.ndarray, weights) -> numpy.ndarray:
    """repeats each pattern column by its weight"""
    return numpy.repeat(patterns, numpy.asarray(weights, dtype=int), axis=1)
