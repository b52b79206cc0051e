"""Pairwise genetic distances between aligned sequences.

A distance model is initialised once per alignment with ``init_model()``,
which selects the sites to compare, then ``distance()`` is called for each
pair of sequences.
"""

from __future__ import annotations

from collections.abc import Sequence as PySeq
from typing import Protocol

import numpy

from alignkit.core.alphabet import (
    AMINOACIDS,
    GAP,
    STD_AMINOACIDS,
    STD_NUCLEOTIDES,
)
from alignkit.util.progress_display import display_wrap

from .pairwise_distance_numba import count_mutations


class DistanceModel(Protocol):
    def init_model(self, aln, weights=None) -> None: ...

    def distance(self, seq1, seq2, weights=None) -> float: ...


def get_index_array(states: str, aliases: dict[str, str] | None = None) -> numpy.ndarray:
    """returns an array mapping character ordinals to state indices

    Characters that are not states, in upper or lower case, map to
    ``len(states)``.
    """
    aliases = aliases or {}
    chars = states + "".join(aliases)
    chars = chars + chars.lower()
    max_ord = max(map(ord, chars))
    char_to_index = numpy.full(max_ord + 1, len(states), dtype=numpy.uint8)
    for i, c in enumerate(states):
        char_to_index[ord(c)] = char_to_index[ord(c.lower())] = i
    for alias, c in aliases.items():
        char_to_index[ord(alias)] = char_to_index[ord(alias.lower())] = states.index(c)
    return char_to_index


def seq_to_indices(seq, char_to_index: numpy.ndarray, invalid: int = 255) -> numpy.ndarray:
    """returns an array with sequence characters replaced by their index"""
    ords = numpy.fromiter(map(ord, seq), dtype=numpy.int64, count=len(seq))
    indices = numpy.full(len(ords), invalid, dtype=numpy.uint8)
    known = ords < len(char_to_index)
    indices[known] = char_to_index[ords[known]]
    return indices


_NUCLEOTIDE_INDEX = get_index_array(STD_NUCLEOTIDES, aliases={"U": "T"})
_AMINOACID_INDEX = get_index_array(STD_AMINOACIDS)


def _as_weights(weights, length: int) -> numpy.ndarray:
    if weights is None:
        return numpy.ones(length, dtype=numpy.float64)
    weights = numpy.asarray(weights, dtype=numpy.float64)
    if weights.shape != (length,):
        msg = f"expected {length} weights, got {weights.shape}"
        raise ValueError(msg)
    return weights


class _PairwiseDistance:
    """base class for distance models

    Parameters
    ----------
    remove_gaps
        if True, only sites without a gap in any sequence are compared

    Attributes
    ----------
    num_sites
        number of selected sites, or their total weight
    selected_sites
        boolean array, True for sites to be compared
    """

    states = STD_NUCLEOTIDES
    char_to_index = _NUCLEOTIDE_INDEX

    def __init__(self, remove_gaps: bool = False):
        self.remove_gaps = remove_gaps
        self.num_sites = 0.0
        self.selected_sites = None

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(remove_gaps={self.remove_gaps})"

    def init_model(self, aln, weights=None) -> None:
        """selects the sites of aln to compare

        Parameters
        ----------
        aln
            an Alignment
        weights
            number of original sites each site represents, as returned by
            ``Alignment.compress()``
        """
        matrix = aln.array_seqs
        length = matrix.shape[1]
        if self.remove_gaps:
            self.selected_sites = ~(matrix == GAP).any(axis=0)
        else:
            self.selected_sites = numpy.ones(length, dtype=bool)
        self.num_sites = float(_as_weights(weights, length)[self.selected_sites].sum())

    def _counts(self, seq1, seq2, weights) -> tuple[float, float, float, float]:
        if self.selected_sites is None:
            msg = f"{self.__class__.__name__}.init_model() has not been called"
            raise RuntimeError(msg)
        s1 = seq_to_indices(seq1, self.char_to_index)
        s2 = seq_to_indices(seq2, self.char_to_index)
        weights = _as_weights(weights, len(s1))
        transitions, transversions, diffs, total = count_mutations(
            s1, s2, self.selected_sites, weights, numpy.uint8(len(self.states))
        )
        return transitions, transversions, diffs, total

    @staticmethod
    def func(transitions: float, transversions: float, diffs: float, total: float) -> float:
        raise NotImplementedError  # over ride in subclasses

    def distance(self, seq1, seq2, weights=None) -> float:
        """distance between two sequences of the initialised alignment

        Only positions where both sequences have a standard state are
        compared. A distance that cannot be computed, is infinite (saturated
        sites) or is negative, is 0.
        """
        transitions, transversions, diffs, total = self._counts(seq1, seq2, weights)
        if total == 0:
            return 0.0
        with numpy.errstate(divide="ignore", invalid="ignore"):
            dist = self.func(transitions, transversions, diffs, total)
        return float(dist) if numpy.isfinite(dist) and dist > 0 else 0.0


class K2PModel(_PairwiseDistance):
    """Kimura two parameter distance between nucleotide sequences"""

    @staticmethod
    def func(transitions, transversions, diffs, total):
        p = transitions / total
        q = transversions / total
        return -0.5 * numpy.log(1 - 2 * p - q) - 0.25 * numpy.log(1 - 2 * q)


class JC69Model(_PairwiseDistance):
    """Jukes Cantor distance between nucleotide sequences"""

    @staticmethod
    def func(transitions, transversions, diffs, total):
        p = diffs / total
        return -0.75 * numpy.log(1 - (4 / 3) * p)


class PDistModel(_PairwiseDistance):
    """proportion of compared sites that differ

    Protein alignments are compared over the 20 standard amino acids.
    """

    def init_model(self, aln, weights=None) -> None:
        if aln.alphabet == AMINOACIDS:
            self.states = STD_AMINOACIDS
            self.char_to_index = _AMINOACID_INDEX
        else:
            self.states = STD_NUCLEOTIDES
            self.char_to_index = _NUCLEOTIDE_INDEX
        super().init_model(aln, weights=weights)

    @staticmethod
    def func(transitions, transversions, diffs, total):
        return diffs / total


_models = {
    "k2p": K2PModel,
    "jc69": JC69Model,
    "pdist": PDistModel,
}


def get_distance_model(name: str, **kwargs) -> DistanceModel:
    """returns a distance model

    name is converted to lower case"""
    name = name.lower()
    if name not in _models:
        msg = f'Unknown distance model "{name}", choose from {available_models()}'
        raise ValueError(msg)
    return _models[name](**kwargs)


def available_models() -> list[str]:
    """names of the distance models"""
    return list(_models)


class DistanceMatrix:
    """pairwise distance matrix

    Parameters
    ----------
    names
        sequence names, in the order of the rows of array
    array
        symmetric 2D array of distances
    """

    def __init__(self, names: PySeq[str], array: numpy.ndarray):
        array = numpy.asarray(array, dtype=float)
        if array.shape != (len(names), len(names)):
            msg = f"array shape {array.shape} does not match {len(names)} names"
            raise ValueError(msg)
        self._names = list(names)
        self._index = {n: i for i, n in enumerate(self._names)}
        self.array = array

    @property
    def names(self) -> list[str]:
        return list(self._names)

    @property
    def shape(self) -> tuple[int, int]:
        return self.array.shape

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(names={self._names!r})"

    def __getitem__(self, names: tuple[str, str]) -> float:
        name1, name2 = names
        return float(self.array[self._index[name1], self._index[name2]])

    def to_dict(self) -> dict[tuple[str, str], float]:
        """Returns a flattened dict with diagonal elements removed"""
        return {
            (n1, n2): float(self.array[i, j])
            for i, n1 in enumerate(self._names)
            for j, n2 in enumerate(self._names)
            if i != j
        }

    def take_dists(self, names, negate: bool = False) -> DistanceMatrix:
        """
        Parameters
        ----------
        names
            series of names
        negate : bool
            if True, elements in names will be excluded
        Returns
        -------
        DistanceMatrix for names x names
        """
        if isinstance(names, str):
            names = [names]
        names = set(names)
        keep = [i for i, n in enumerate(self._names) if (n in names) != negate]
        data = self.array.take(keep, axis=0).take(keep, axis=1)
        return self.__class__([self._names[i] for i in keep], data)


@display_wrap
def pairwise_distances(aln, model="k2p", weights=None, ui=None, **kwargs) -> DistanceMatrix:
    """distances between all pairs of sequences

    Parameters
    ----------
    aln
        an Alignment
    model
        a model name, see ``available_models()``, or a model instance
    weights
        number of original sites each site represents
    show_progress
        display a progress bar
    kwargs
        passed to the model constructor when model is a name

    Returns
    -------
    DistanceMatrix
    """
    if isinstance(model, str):
        model = get_distance_model(model, **kwargs)
    model.init_model(aln, weights=weights)

    names = aln.names
    seqs = [seq.symbols for seq in aln]
    dists = numpy.zeros((len(names), len(names)), dtype=float)
    pairs = [(i, j) for i in range(len(names) - 1) for j in range(i + 1, len(names))]
    for i, j in ui.series(pairs, noun="pair"):
        dists[i, j] = dists[j, i] = model.distance(seqs[i], seqs[j], weights=weights)
    return DistanceMatrix(names, dists)
