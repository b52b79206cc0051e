import numpy
import pytest

from alignkit.core.pattern import column_keys, column_patterns, expand_patterns
from alignkit.core.sequence import as_symbols


@pytest.fixture
def matrix():
    return numpy.array([as_symbols("ACGTG"), as_symbols("TTCAC")])


def test_column_keys(matrix):
    assert column_keys(matrix).tolist() == ["AT", "CT", "GC", "TA", "GC"]


def test_column_patterns(matrix):
    patterns, weights, inverse = column_patterns(matrix)
    assert patterns.shape == (2, 4)
    assert weights.tolist() == [1, 1, 2, 1]
    assert inverse.tolist() == [0, 1, 2, 3, 2]
    assert numpy.array_equal(patterns[:, inverse], matrix)


def test_column_patterns_empty():
    matrix = numpy.empty((3, 0), dtype="<U1")
    patterns, weights, inverse = column_patterns(matrix)
    assert patterns.shape == (3, 0)
    assert len(weights) == len(inverse) == 0


def test_column_patterns_not_2d():
    with pytest.raises(ValueError):
        column_patterns(as_symbols("ACG"))


def test_expand_patterns(matrix):
    patterns, weights, _ = column_patterns(matrix)
    expanded = expand_patterns(patterns, weights)
    assert expanded.shape == matrix.shape
    # same multiset of columns, pattern order
    assert sorted(column_keys(expanded).tolist()) == sorted(column_keys(matrix).tolist())
