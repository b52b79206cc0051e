"""Entropy helpers for frequency and count arrays."""

import numpy


def safe_p_log_p(data):
    """Returns -(p*log2(p)) for every nonzero p in data, 0 elsewhere.

    Raises FloatingPointError for a negative p.
    """
    data = numpy.asarray(data, dtype=float)
    non_zero = data != 0
    result = numpy.zeros(data.shape, dtype=float)
    with numpy.errstate(invalid="raise"):
        result[non_zero] = -data[non_zero] * numpy.log2(data[non_zero])
    return result


def entropy_from_counts(counts) -> float:
    """Shannon entropy (natural log) of the frequencies implied by counts

    Returns nan if counts total zero.
    """
    counts = numpy.asarray(counts, dtype=float)
    total = counts.sum()
    if total == 0:
        return numpy.nan
    probs = counts[counts > 0] / total
    return float(-(probs * numpy.log(probs)).sum())
