"""Position specific scoring matrices and per-site conservation."""

from __future__ import annotations

import numpy

from alignkit.core.alphabet import AMINOACIDS, GAP, alphabet_characters
from alignkit.core.seqbag import AlignmentError
from alignkit.maths.util import safe_p_log_p

PSSM_NORM_NONE = "none"
PSSM_NORM_UNIFORM = "uniform"
PSSM_NORM_FREQ = "freq"
PSSM_NORM_DATA = "data"
PSSM_NORM_LOGO = "logo"

PSSM_NORMALISATIONS = (
    PSSM_NORM_NONE,
    PSSM_NORM_UNIFORM,
    PSSM_NORM_FREQ,
    PSSM_NORM_DATA,
    PSSM_NORM_LOGO,
)

POSITION_IDENTICAL = 0
POSITION_CONSERVED = 1
POSITION_SEMI_CONSERVED = 2
POSITION_NOT_CONSERVED = 3

CONSERVATION_SYMBOLS = {
    POSITION_IDENTICAL: "*",
    POSITION_CONSERVED: ":",
    POSITION_SEMI_CONSERVED: ".",
    POSITION_NOT_CONSERVED: " ",
}

# amino acid substitution groups of the ClustalW conservation line
STRONG_GROUPS = tuple(
    frozenset(g)
    for g in ("STA", "NEQK", "NHQK", "NDEQ", "QHRK", "MILV", "MILF", "HY", "FYW")
)
WEAK_GROUPS = tuple(
    frozenset(g)
    for g in (
        "CSA",
        "ATV",
        "SAG",
        "STNK",
        "STPA",
        "SGND",
        "SNDEQK",
        "NDEQHK",
        "NEQHRK",
        "FVLIM",
        "HFY",
    )
)


class ProfileError(ValueError):
    pass


def _norm_factors(
    normalization: str,
    chars: tuple[str, ...],
    num_seqs: int,
    pseudocount: float,
    char_stats: dict[str, int],
) -> numpy.ndarray:
    num_chars = len(chars)
    denom = num_seqs + num_chars * pseudocount
    if normalization == PSSM_NORM_NONE:
        return numpy.ones(num_chars)
    if normalization == PSSM_NORM_UNIFORM:
        return numpy.full(num_chars, 1 / denom / (1 / num_chars))
    if normalization == PSSM_NORM_FREQ:
        return numpy.full(num_chars, 1 / denom)
    if normalization == PSSM_NORM_LOGO:
        return numpy.full(num_chars, 1 / num_seqs)
    if normalization == PSSM_NORM_DATA:
        missing = [c for c in chars if c not in char_stats]
        if missing:
            msg = f"characters {''.join(missing)!r} absent from alignment statistics"
            raise ProfileError(msg)
        freqs = numpy.array([char_stats[c] for c in chars], dtype=float)
        freqs /= freqs.sum()
        return 1 / denom / freqs

    msg = f"unknown normalization {normalization!r}, choose from {PSSM_NORMALISATIONS}"
    raise ProfileError(msg)


def make_pssm(
    aln,
    log: bool = False,
    pseudocount: float = 0.0,
    normalization: str = PSSM_NORM_NONE,
) -> dict[str, numpy.ndarray]:
    """position specific scoring matrix

    Parameters
    ----------
    aln
        Alignment with a nucleotide or protein alphabet
    log
        apply a log2 transform to the normalised values, ignored for
        PSSM_NORM_LOGO
    pseudocount
        added to every count
    normalization
        one of PSSM_NORM_NONE (counts), PSSM_NORM_UNIFORM (frequency divided
        by 1 / number of characters), PSSM_NORM_FREQ (frequency),
        PSSM_NORM_DATA (frequency divided by the frequency of the character
        in the whole alignment), PSSM_NORM_LOGO (frequency times the
        information content of the site)

    Returns
    -------
    {character: scores}, with one score per alignment site

    Notes
    -----
    Symbols are upper cased before counting, symbols that are not a
    standard character of the alphabet are not counted. For
    PSSM_NORM_LOGO, the site entropy is computed with 0 * log(0) taken as 0.
    """
    if normalization not in PSSM_NORMALISATIONS:
        msg = f"unknown normalization {normalization!r}, choose from {PSSM_NORMALISATIONS}"
        raise ProfileError(msg)

    if aln.num_seqs == 0:
        msg = "cannot compute a PSSM for an empty alignment"
        raise ProfileError(msg)

    chars = alphabet_characters(aln.alphabet)
    char_stats = aln.char_stats() if normalization == PSSM_NORM_DATA else {}
    factors = _norm_factors(normalization, chars, aln.num_seqs, pseudocount, char_stats)

    matrix = numpy.char.upper(aln.array_seqs)
    counts = numpy.array([(matrix == c).sum(axis=0) for c in chars], dtype=float)
    counts = counts.reshape(len(chars), max(aln.length, 0))
    if pseudocount > 0:
        counts += pseudocount

    scores = counts * factors[:, None]
    if normalization == PSSM_NORM_LOGO:
        entropy = safe_p_log_p(scores).sum(axis=0)
        scores = scores * (numpy.log2(len(chars)) - entropy)
    elif log:
        with numpy.errstate(divide="ignore"):
            scores = numpy.log2(scores)

    return {c: scores[i] for i, c in enumerate(chars)}


def site_conservation(aln, position: int) -> int:
    """conservation category of the column at position

    Returns
    -------
    POSITION_IDENTICAL if all symbols are equal and none is a gap,
    POSITION_CONSERVED (protein only) if all symbols belong to one strong
    group, POSITION_SEMI_CONSERVED (protein only) if all symbols belong to
    one weak group, otherwise POSITION_NOT_CONSERVED

    Raises
    ------
    AlignmentError if position is outside [0, aln.length)
    """
    if not 0 <= position < aln.length:
        msg = f"position {position} outside alignment range [0, {aln.length})"
        raise AlignmentError(msg)

    column = [seq.symbols[position] for seq in aln]
    if GAP not in column and len(set(column)) == 1:
        return POSITION_IDENTICAL

    if aln.alphabet != AMINOACIDS:
        return POSITION_NOT_CONSERVED

    observed = {c.upper() for c in column}
    if any(observed <= group for group in STRONG_GROUPS):
        return POSITION_CONSERVED
    if any(observed <= group for group in WEAK_GROUPS):
        return POSITION_SEMI_CONSERVED
    return POSITION_NOT_CONSERVED


def conservation_line(aln) -> str:
    """a ClustalW style conservation line, one character per site"""
    return "".join(
        CONSERVATION_SYMBOLS[site_conservation(aln, i)] for i in range(max(aln.length, 0))
    )
