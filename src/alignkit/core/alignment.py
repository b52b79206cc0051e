"""Multiple sequence alignments.

An Alignment is a SeqBag whose sequences all have the same length. Columns
are referred to as sites.
"""

from __future__ import annotations

import warnings
from collections.abc import Mapping
from typing import Any

import numpy

from alignkit.core import alphabet as _alpha
from alignkit.core import pattern, profile, reading_frame
from alignkit.core.seqbag import (
    AlignmentError,
    MissingSequenceError,
    SeqBag,
    SeqBagError,
    _populate,
)
from alignkit.core.sequence import SYMBOL_DTYPE, Sequence
from alignkit.core.simulate import SimulationMixin
from alignkit.maths.util import entropy_from_counts
from alignkit.util.misc import get_rng, get_setting_from_environ

__all__ = [
    "Alignment",
    "AlignmentError",
    "MissingSequenceError",
    "SeqBagError",
    "make_aligned",
]

REPR_POLICY_ENV = "ALIGNKIT_ALIGNMENT_REPR_POLICY"

_special = list(_alpha.SPECIAL_SYMBOLS)


class Alignment(SimulationMixin, SeqBag):
    """sequences of equal length

    Parameters
    ----------
    alphabet
        one of the alignkit.core.alphabet tags

    Notes
    -----
    ``length`` is -1 for an alignment without sequences. Adding a sequence
    whose length differs from ``length`` raises AlignmentError and leaves
    the alignment unchanged.
    """

    def __init__(self, alphabet: int = _alpha.UNKNOWN):
        super().__init__(alphabet)
        self._length = -1
        self._repr_policy: dict[str, Any] = {"num_seqs": 10, "num_pos": 60}

    @property
    def length(self) -> int:
        return self._length

    def __repr__(self) -> str:
        settings = self._repr_policy.copy()
        env_vals = get_setting_from_environ(REPR_POLICY_ENV, {"num_seqs": int, "num_pos": int})
        settings.update(env_vals)
        limit = settings["num_pos"]
        seqs = []
        for count, seq in enumerate(self._seqs):
            if count == settings["num_seqs"]:
                seqs.append("...")
                break
            elts = list(str(seq)[: limit + 1])
            if len(elts) > limit:
                elts[-1] = "..."
            seqs.append(f"{seq.name}[{''.join(elts)}]")
        seqs_str = ", ".join(seqs)
        return (
            f"{self.num_seqs} x {max(self._length, 0)} {self.alphabet_str()} alignment: {seqs_str}"
        )

    def set_repr_policy(self, num_seqs: int | None = None, num_pos: int | None = None) -> None:
        """specify policy for repr(self)

        Parameters
        ----------
        num_seqs
            number of sequences to include in represented display.
        num_pos
            length of sequences to include in represented display.
        """
        if num_seqs:
            if not isinstance(num_seqs, int):
                msg = "num_seqs is not an integer"
                raise TypeError(msg)
            self._repr_policy["num_seqs"] = num_seqs

        if num_pos:
            if not isinstance(num_pos, int):
                msg = "num_pos is not an integer"
                raise TypeError(msg)
            self._repr_policy["num_pos"] = num_pos

    def clone(self) -> Alignment:
        """returns a deep copy, including the repr policy"""
        new = super().clone()
        new._repr_policy = self._repr_policy.copy()
        return new

    def _check_symbols(self, symbols: numpy.ndarray) -> None:
        if self._length != -1 and len(symbols) != self._length:
            msg = (
                f"sequence length {len(symbols)} differs from alignment length {self._length}"
            )
            raise AlignmentError(msg)
        super()._check_symbols(symbols)

    def _insert(self, seq: Sequence) -> None:
        super()._insert(seq)
        self._length = len(seq)

    def _replace_sequences(self, seqs: list[Sequence]) -> None:
        super()._replace_sequences(seqs)
        self._length = len(seqs[0]) if seqs else -1

    def _new_like(self) -> Alignment:
        return self.__class__(self._alphabet)

    @property
    def array_seqs(self) -> numpy.ndarray:
        """a 2D copy of the symbols, axis 0 is sequences in order of names"""
        if not self._seqs:
            return numpy.empty((0, max(self._length, 0)), dtype=SYMBOL_DTYPE)
        return numpy.array([s.symbols for s in self._seqs], dtype=SYMBOL_DTYPE)

    def _write_back(self, matrix: numpy.ndarray) -> None:
        """copies rows of matrix into the existing symbol arrays"""
        for seq, row in zip(self._seqs, matrix):
            seq.symbols[:] = row

    def _set_matrix(self, matrix: numpy.ndarray) -> None:
        """replaces the symbol arrays with rows of matrix"""
        for seq, row in zip(self._seqs, matrix):
            seq.symbols = row.copy()
        self._length = matrix.shape[1] if self._seqs else -1

    def _check_site(self, site: int) -> None:
        if not 0 <= site < self._length:
            msg = f"site {site} outside alignment range [0, {max(self._length, 0)})"
            raise AlignmentError(msg)

    def translate(self, phase: int = 0, code: int | str = 1) -> None:
        """translates all sequences in place to amino acids

        Parameters
        ----------
        phase
            0, 1 or 2 the index of the first translated nucleotide. -1
            replaces every sequence with its three forward frame translations
            named ``<name>_0``, ``<name>_1`` and ``<name>_2``, it fails
            if the frames do not have the same length
        code
            genetic code identifier, see ``get_code()``
        """
        translated = self._translated(phase, code)
        if len({len(s) for s in translated}) > 1:
            msg = "translated sequences differ in length, translate a SeqBag instead"
            raise AlignmentError(msg)
        self._replace_sequences(translated)
        self._alphabet = _alpha.AMINOACIDS

    def remove_gap_sites(self, cutoff: float, ends: bool = False) -> int:
        """removes sites with a proportion of gaps >= cutoff

        Parameters
        ----------
        cutoff
            a value in [0, 1]. 0, and any value outside the range, means sites
            with at least one gap are removed.
        ends
            only remove the runs of qualifying sites at the start and the end
            of the alignment

        Returns
        -------
        the number of sites removed

        Notes
        -----
        Example with a cutoff of 0.3, ends=True and per site gap
        proportions 0.4 0.5 0.1 0.5 0.6 0.1 0.8, sites 0, 1 and 6 are removed.
        """
        if not 0 <= cutoff <= 1:
            cutoff = 0

        if self._length <= 0 or not self._seqs:
            return 0

        matrix = self.array_seqs
        nb_gaps = (matrix == _alpha.GAP).sum(axis=0)
        if cutoff > 0:
            remove = nb_gaps >= cutoff * self.num_seqs
        else:
            remove = nb_gaps > 0

        if ends:
            leading = len(remove) if remove.all() else int(numpy.argmin(remove))
            trailing = len(remove) if remove.all() else int(numpy.argmin(remove[::-1]))
            remove = numpy.zeros(len(remove), dtype=bool)
            remove[:leading] = True
            remove[len(remove) - trailing :] = True

        self._set_matrix(matrix[:, ~remove])
        return int(remove.sum())

    def remove_gap_seqs(self, cutoff: float) -> list[str]:
        """removes sequences with a proportion of gaps >= cutoff

        Parameters
        ----------
        cutoff
            a value in [0, 1]. 0, and any value outside the range, means
            sequences with at least one gap are removed.

        Returns
        -------
        names of the removed sequences
        """
        if not 0 <= cutoff <= 1:
            cutoff = 0

        if self._length <= 0:
            return []

        nb_gaps = (self.array_seqs == _alpha.GAP).sum(axis=1)
        if cutoff > 0:
            remove = nb_gaps >= cutoff * self._length
        else:
            remove = nb_gaps > 0

        names = [n for n, r in zip(self.names, remove) if r]
        if names:
            self.remove_sequences(names)
        return names

    def replace_match_chars(self) -> None:
        """replaces '.' with the corresponding symbol of the first sequence

        A '.' is left unchanged if the first sequence also has a '.'.
        """
        if self.num_seqs <= 1:
            return

        matrix = self.array_seqs
        ref = matrix[0]
        replace = (matrix[1:] == _alpha.MATCH) & (ref != _alpha.MATCH)
        for seq, selected in zip(self._seqs[1:], replace):
            seq.symbols[selected] = ref[selected]

    def mask(self, start: int, length: int) -> None:
        """replaces symbols of sites [start, start + length) with N or X

        Sites beyond the end of the alignment are ignored.
        """
        if start < 0:
            msg = f"mask start {start} cannot be < 0"
            raise AlignmentError(msg)
        if start > self._length:
            msg = f"mask start {start} cannot be > alignment length {self._length}"
            raise AlignmentError(msg)
        if self._alphabet not in (_alpha.NUCLEOTIDES, _alpha.AMINOACIDS):
            msg = f"cannot mask an alignment with {self.alphabet_str()} alphabet"
            raise AlignmentError(msg)

        rep = _alpha.any_symbol(self._alphabet)
        end = min(start + max(length, 0), self._length)
        for seq in self._seqs:
            seq.symbols[start:end] = rep

    def trim_sequences(self, trim_size: int, from_start: bool) -> None:
        """removes trim_size sites from the start or the end"""
        if trim_size < 0:
            msg = f"trim size {trim_size} must not be < 0"
            raise AlignmentError(msg)
        if trim_size >= self._length:
            msg = f"trim size {trim_size} must be < alignment length {self._length}"
            raise AlignmentError(msg)

        matrix = self.array_seqs
        if from_start:
            matrix = matrix[:, trim_size:]
        else:
            matrix = matrix[:, : self._length - trim_size]
        self._set_matrix(matrix)

    def sub_align(self, start: int, length: int) -> Alignment:
        """returns a new alignment of sites [start, start + length)"""
        if not 0 <= start <= self._length:
            msg = f"start {start} is outside the alignment"
            raise AlignmentError(msg)
        if length < 0 or start + length > self._length:
            msg = f"start + length {start + length} is outside the alignment"
            raise AlignmentError(msg)
        return self._window(start, length)

    def rand_sub_align(self, length: int, rng=None) -> Alignment:
        """returns a new alignment of length sites from a random start"""
        if length > self._length:
            msg = f"sub alignment length {length} exceeds alignment length {self._length}"
            raise AlignmentError(msg)
        if length <= 0:
            msg = "sub alignment cannot have 0 or negative length"
            raise AlignmentError(msg)

        rng = get_rng(rng)
        start = int(rng.integers(self._length - length + 1))
        return self._window(start, length)

    def _window(self, start: int, length: int) -> Alignment:
        sub = self._new_like()
        for seq in self._seqs:
            sub.add_sequence_char(seq.name, seq.symbols[start : start + length].copy(), seq.comment)
        return sub

    def compress(self) -> list[int]:
        """collapses identical sites in place

        Returns
        -------
        the number of original sites represented by each remaining site

        Notes
        -----
        Remaining sites are ordered by the lexicographic order of the
        column strings, not by their original position.
        """
        if self._length <= 0 or not self._seqs:
            return []

        patterns, weights, _ = pattern.column_patterns(self.array_seqs)
        self._set_matrix(patterns)
        return weights.tolist()

    def concat(self, other: Alignment) -> None:
        """appends the sites of other

        A sequence absent from one of the alignments is represented by gaps
        over the sites of that alignment. Sequences only in other are added
        at the end.
        """
        if self._alphabet != other.alphabet:
            msg = (
                f"cannot concatenate {self.alphabet_str()} and "
                f"{other.alphabet_str()} alignments"
            )
            raise AlignmentError(msg)

        own_width = max(self._length, 0)
        other_width = max(other.length, 0)
        joined = {}
        for seq in self._seqs:
            if seq.name in other:
                right = other.get_sequence_char(seq.name)
            else:
                right = numpy.full(other_width, _alpha.GAP, dtype=SYMBOL_DTYPE)
            joined[seq.name] = numpy.concatenate([seq.symbols, right])

        added = []
        for seq in other:
            if seq.name in self:
                continue
            left = numpy.full(own_width, _alpha.GAP, dtype=SYMBOL_DTYPE)
            added.append(Sequence(seq.name, numpy.concatenate([left, seq.symbols]), seq.comment))

        lengths = {len(s) for s in joined.values()} | {len(s) for s in added}
        if len(lengths) > 1:
            msg = "sequences of the concatenated alignment do not have the same length"
            raise AlignmentError(msg)

        for seq in self._seqs:
            seq.symbols = joined[seq.name]
        self._replace_sequences(self._seqs + added)

    def codon_align(self, nt_seqs: SeqBag) -> Alignment:
        """returns a codon alignment of nt_seqs following self

        Parameters
        ----------
        nt_seqs
            unaligned nucleotide sequences with the same names as self

        Notes
        -----
        Each non-gap amino acid consumes the next three nucleotides, a gap
        becomes ``---``. Up to 2 trailing nucleotides are dropped with a
        UserWarning. Translation of the nucleotides is not checked.
        """
        if self._alphabet != _alpha.AMINOACIDS:
            msg = "codon alignment requires a protein alignment"
            raise AlignmentError(msg)
        if nt_seqs.alphabet != _alpha.NUCLEOTIDES:
            msg = f"cannot codon align {nt_seqs.alphabet_str()} sequences"
            raise AlignmentError(msg)

        codon_seqs = []
        for seq in self._seqs:
            if seq.name not in nt_seqs:
                msg = f"sequence {seq.name!r} missing from the nucleotide sequences"
                raise AlignmentError(msg)

            nt = nt_seqs.get_sequence_char(seq.name)
            codons = []
            index = 0
            for aa in seq.symbols.tolist():
                if aa == _alpha.GAP:
                    codons.append("---")
                    continue
                if index + 3 > len(nt):
                    msg = f"nucleotide sequence {seq.name!r} is shorter than its protein"
                    raise AlignmentError(msg)
                codons.append("".join(nt[index : index + 3].tolist()))
                index += 3

            leftover = len(nt) - index
            if leftover > 2:
                msg = (
                    f"nucleotide sequence {seq.name!r} is longer than its protein "
                    f"({leftover} nucleotides remaining)"
                )
                raise AlignmentError(msg)
            if leftover:
                warnings.warn(
                    f"{seq.name}: dropping {leftover} additional nucleotides",
                    UserWarning,
                    stacklevel=2,
                )
            codon_seqs.append((seq.name, "".join(codons), seq.comment))

        result = Alignment(_alpha.NUCLEOTIDES)
        for name, codons, comment in codon_seqs:
            result.add_sequence(name, codons, comment)
        return result

    def diff_with_first(self) -> None:
        """replaces symbols identical to the first sequence with '.'"""
        if self.num_seqs < 2:
            return

        ref = self._seqs[0].symbols
        for seq in self._seqs[1:]:
            seq.symbols[seq.symbols == ref] = _alpha.MATCH

    def count_differences(self) -> tuple[list[str], list[dict[str, int]]]:
        """counts differences of each sequence from the first

        Returns
        -------
        all_diffs
            every difference observed, as "<reference><other>" e.g. "AC",
            in order of first occurrence
        diffs
            {difference: count} for each sequence after the first
        """
        all_diffs: dict[str, None] = {}
        diffs = []
        if self.num_seqs < 2:
            return [], diffs

        ref = self._seqs[0].symbols
        for seq in self._seqs[1:]:
            counts: dict[str, int] = {}
            differ = seq.symbols != ref
            for key in numpy.char.add(ref[differ], seq.symbols[differ]).tolist():
                counts[key] = counts.get(key, 0) + 1
                all_diffs[key] = None
            diffs.append(counts)
        return list(all_diffs), diffs

    def avg_alleles_per_site(self) -> float:
        """mean number of distinct symbols per site

        Gaps, '.' and '*' are not counted, sites with only those symbols are
        excluded from the mean. Returns nan if no site is eligible.
        """
        num_alleles = 0
        num_sites = 0
        for column in self.array_seqs.T.tolist():
            alleles = set(column).difference(_special)
            if alleles:
                num_sites += 1
                num_alleles += len(alleles)
        return num_alleles / num_sites if num_sites else numpy.nan

    def _column(self, site: int) -> numpy.ndarray:
        self._check_site(site)
        return numpy.array([s.symbols[site] for s in self._seqs], dtype=SYMBOL_DTYPE)

    @staticmethod
    def _column_entropy(column: numpy.ndarray, remove_gaps: bool) -> float:
        exclude = [_alpha.MATCH, _alpha.OTHER]
        if remove_gaps:
            exclude.append(_alpha.GAP)
        column = column[~numpy.isin(column, exclude)]
        _, counts = numpy.unique(column, return_counts=True)
        return entropy_from_counts(counts)

    def entropy(self, site: int, remove_gaps: bool) -> float:
        """Shannon entropy (natural log) of the symbols at site

        '.' and '*' are excluded, gaps are excluded if remove_gaps. Returns nan
        if no symbol is counted.
        """
        return self._column_entropy(self._column(site), remove_gaps)

    def entropy_per_site(self, remove_gaps: bool) -> numpy.ndarray:
        """entropy of every site"""
        return numpy.array(
            [self._column_entropy(column, remove_gaps) for column in self.array_seqs.T],
            dtype=float,
        )

    def nb_variable_sites(self) -> int:
        """number of sites with at least 2 distinct symbols

        Gaps, '.' and '*' are not considered.
        """
        return sum(
            len(set(column).difference(_special)) > 1 for column in self.array_seqs.T.tolist()
        )

    def char_stats_site(self, site: int) -> dict[str, int]:
        """counts of each upper cased symbol at site"""
        chars, counts = numpy.unique(numpy.char.upper(self._column(site)), return_counts=True)
        return dict(zip(chars.tolist(), counts.tolist()))

    def max_char_stats(self, exclude_gaps: bool = False) -> tuple[list[str], list[int]]:
        """most frequent upper cased symbol at each site, and its count

        Parameters
        ----------
        exclude_gaps
            if True, gaps are not considered. A site of only gaps is then
            reported as a gap with count 0.

        Notes
        -----
        Ties are resolved in favour of the lexicographically smallest symbol.
        """
        chars = []
        occurrences = []
        for column in numpy.char.upper(self.array_seqs).T:
            if exclude_gaps:
                column = column[column != _alpha.GAP]
            if not len(column):
                chars.append(_alpha.GAP)
                occurrences.append(0)
                continue
            values, counts = numpy.unique(column, return_counts=True)
            index = int(numpy.argmax(counts))
            chars.append(str(values[index]))
            occurrences.append(int(counts[index]))
        return chars, occurrences

    def pssm(
        self,
        log: bool = False,
        pseudocount: float = 0.0,
        normalization: str = profile.PSSM_NORM_NONE,
    ) -> dict[str, numpy.ndarray]:
        """position specific scoring matrix, see ``profile.make_pssm()``"""
        return profile.make_pssm(
            self, log=log, pseudocount=pseudocount, normalization=normalization
        )

    def site_conservation(self, position: int) -> int:
        """conservation category of a site, see ``profile.site_conservation()``"""
        self._check_site(position)
        return profile.site_conservation(self, position)

    def conservation_line(self) -> str:
        """ClustalW style conservation line"""
        return profile.conservation_line(self)

    def frameshifts(
        self, starting_gaps_as_incomplete: bool = False
    ) -> list[reading_frame.Frameshift]:
        """longest out of frame region of each sequence relative to the first"""
        return reading_frame.frameshifts(self, starting_gaps_as_incomplete)

    def stops(self, starting_gaps_as_incomplete: bool = False, code: int | str = 1) -> list[int]:
        """position of the first in frame stop codon of each sequence"""
        return reading_frame.stops(self, starting_gaps_as_incomplete, code=code)


def make_aligned(
    data: Mapping[str, str] | None = None, alphabet: int | str | None = None
) -> Alignment:
    """returns an Alignment

    Parameters
    ----------
    data
        {name: sequence}, all sequences must have the same length
    alphabet
        an alphabet tag or label such as "dna" or "protein". If None, the
        alphabet is detected from the symbols.
    """
    return _populate(Alignment, data, alphabet)
