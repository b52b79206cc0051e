import numba
import numba.types as numba_types
import numpy

# turn off code coverage as jit-ted code not accessible to coverage


@numba.jit(cache=True)
def count_mutations(
    seq1: numba_types.uint8[:],
    seq2: numba_types.uint8[:],
    selected: numba_types.boolean[:],
    weights: numba_types.float64[:],
    num_states: numba_types.uint8,
) -> numba_types.float64[:]:  # pragma: no cover
    """weighted counts of differences between two indexed sequences

    Parameters
    ----------
    seq1, seq2
        sequences converted to state indices, values >= num_states are
        invalid and the position is skipped
    selected
        positions to consider
    weights
        weight of each position
    num_states
        number of valid states

    Returns
    -------
    array of transitions, transversions, differences and the total weight
    of compared positions

    Notes
    -----
    Transitions are only meaningful for nucleotides indexed in the order
    A, C, G, T, where a transition is a difference of 2 between indices.
    """
    transitions = 0.0
    transversions = 0.0
    diffs = 0.0
    total = 0.0
    for i in range(len(seq1)):
        if not selected[i]:
            continue
        a = seq1[i]
        b = seq2[i]
        if a >= num_states or b >= num_states:
            continue
        w = weights[i]
        total += w
        if a == b:
            continue
        diffs += w
        delta = numpy.int64(a) - numpy.int64(b)
        if delta == 2 or delta == -2:
            transitions += w
        else:
            transversions += w

    return numpy.array([transitions, transversions, diffs, total])
