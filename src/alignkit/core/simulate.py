"""Stochastic perturbation and resampling of alignments.

Every operation takes an ``rng`` argument, see ``alignkit.util.misc.get_rng``.
Operations that modify an alignment do so in place, the others return a new
alignment.
"""

from __future__ import annotations

import numpy

from alignkit.core.alphabet import (
    AMINOACIDS,
    GAP,
    SPECIAL_SYMBOLS,
    STD_AMINOACIDS,
    STD_NUCLEOTIDES,
    alphabet_characters,
)
from alignkit.core.seqbag import AlignmentError
from alignkit.util.misc import get_rng


class SimulationMixin:
    """random operations on an alignment

    Requires ``array_seqs``, ``_write_back()``, ``_new_like()``
    and ``length`` from the host class.
    """

    def shuffle_sites(
        self,
        rate: float,
        rogue_rate: float = 0.0,
        rand_rogue_first: bool = False,
        rng=None,
    ) -> list[str]:
        """shuffles symbols among sequences for a proportion of sites

        Parameters
        ----------
        rate
            proportion of sites whose symbols are shuffled across all sequences
        rogue_rate
            proportion of sequences, the rogues, whose symbols are shuffled at
            a further ``int(rate * (1 - rate) * length)`` sites
        rand_rogue_first
            if True, the sequence permutation is drawn before the site
            permutation so that, for a given seed, rogues are the same for
            alignments of differing length
        rng
            random number generator or seed

        Returns
        -------
        names of the rogue sequences
        """
        if not 0 <= rate <= 1:
            msg = f"shuffle rate must be in [0, 1], not {rate}"
            raise AlignmentError(msg)
        if not 0 <= rogue_rate <= 1:
            msg = f"shuffle rogue rate must be in [0, 1], not {rogue_rate}"
            raise AlignmentError(msg)

        length = max(self.length, 0)
        num_seqs = self.num_seqs
        nb_sites = int(rate * length)
        nb_rogue_sites = int(rate * (1.0 - rate) * length)
        nb_rogue_seqs = int(rogue_rate * num_seqs)
        if nb_sites + nb_rogue_sites > length:
            msg = f"too many sites to shuffle ({nb_rogue_sites}+{nb_sites}>{length})"
            raise AlignmentError(msg)

        rng = get_rng(rng)
        if rand_rogue_first:
            seq_order = rng.permutation(num_seqs)
            site_order = rng.permutation(length)
        else:
            site_order = rng.permutation(length)
            seq_order = rng.permutation(num_seqs)

        matrix = self.array_seqs
        for site in site_order[:nb_sites]:
            # Fisher-Yates over the sequences
            for n in range(num_seqs - 1, 0, -1):
                r = rng.integers(n + 1)
                matrix[[n, r], site] = matrix[[r, n], site]

        rogues = seq_order[:nb_rogue_seqs]
        for site in site_order[nb_sites : nb_sites + nb_rogue_sites]:
            for r in range(nb_rogue_seqs):
                j = rng.integers(r + 1)
                a, b = rogues[r], rogues[j]
                matrix[[a, b], site] = matrix[[b, a], site]

        self._write_back(matrix)
        names = self.names
        return [names[i] for i in rogues]

    def swap(self, rate: float, rng=None) -> None:
        """swaps the suffix, from a random site, between pairs of sequences

        ``int(rate * num_seqs) // 2`` pairs are formed. Does nothing if rate is
        outside [0, 1].
        """
        length = self.length
        if not 0 <= rate <= 1 or length <= 0:
            return

        rng = get_rng(rng)
        nb_pairs = int(rate * self.num_seqs) // 2
        order = rng.permutation(self.num_seqs)
        matrix = self.array_seqs
        for i in range(nb_pairs):
            pos = rng.integers(length)
            a, b = order[i], order[i + nb_pairs]
            matrix[[a, b], pos:] = matrix[[b, a], pos:]
        self._write_back(matrix)

    def recombine(self, prop: float, len_prop: float, rng=None) -> None:
        """copies a random segment from one sequence into another

        For ``int(prop * num_seqs)`` sequences, a segment of
        ``int(len_prop * length)`` sites is overwritten with the same segment
        of a distinct donor sequence. Does nothing if prop is outside
        [0, 0.5] or len_prop is outside [0, 1].
        """
        length = self.length
        if not 0 <= prop <= 0.5 or not 0 <= len_prop <= 1 or length <= 0:
            return

        rng = get_rng(rng)
        nb = int(prop * self.num_seqs)
        size = int(len_prop * length)
        order = rng.permutation(self.num_seqs)
        matrix = self.array_seqs
        for i in range(nb):
            pos = rng.integers(length - size + 1)
            matrix[order[i], pos : pos + size] = matrix[order[i + nb], pos : pos + size]
        self._write_back(matrix)

    def add_gaps(self, len_prop: float, prop: float, rng=None) -> None:
        """sets ``int(len_prop * length)`` random sites to gaps in
        ``int(prop * num_seqs)`` sequences

        Does nothing if either proportion is outside [0, 1].
        """
        length = self.length
        if not 0 <= prop <= 1 or not 0 <= len_prop <= 1 or length <= 0:
            return

        rng = get_rng(rng)
        nb = int(prop * self.num_seqs)
        nb_gaps = int(len_prop * length)
        order = rng.permutation(self.num_seqs)
        matrix = self.array_seqs
        for i in range(nb):
            sites = rng.permutation(length)[:nb_gaps]
            matrix[order[i], sites] = GAP
        self._write_back(matrix)

    def mutate(self, rate: float, rng=None) -> None:
        """substitutes symbols with probability rate

        A substituted symbol is replaced by a standard character drawn
        uniformly, it may be identical to the original. Gaps and the other
        special symbols are never substituted. rate is capped at 1, and
        nothing is done if rate <= 0.
        """
        length = self.length
        if rate <= 0 or length <= 0:
            return

        rate = min(rate, 1.0)
        chars = numpy.array(
            list(STD_AMINOACIDS if self.alphabet == AMINOACIDS else STD_NUCLEOTIDES),
            dtype="<U1",
        )
        rng = get_rng(rng)
        matrix = self.array_seqs
        special = numpy.isin(matrix, list(SPECIAL_SYMBOLS))
        selected = (rng.random(matrix.shape) <= rate) & ~special
        matrix[selected] = chars[rng.integers(len(chars), size=int(selected.sum()))]
        self._write_back(matrix)

    def simulate_rogue(
        self, prop: float, prop_len: float, rng=None
    ) -> tuple[list[str], list[str]] | tuple[None, None]:
        """shuffles sites within a proportion of sequences

        For each of ``int(prop * num_seqs)`` rogue sequences,
        ``int(prop_len * length)`` of its own sites are permuted.

        Returns
        -------
        (rogue names, intact names), or (None, None) if either proportion
        is outside [0, 1]. If prop_len is 0 there are no rogues.
        """
        if not 0 <= prop <= 1 or not 0 <= prop_len <= 1:
            return None, None

        if prop_len == 0:
            prop = 0.0

        rng = get_rng(rng)
        length = max(self.length, 0)
        nb = int(prop * self.num_seqs)
        size = int(prop_len * length)
        order = rng.permutation(self.num_seqs)
        matrix = self.array_seqs
        for r in range(nb):
            row = matrix[order[r]]
            sites = rng.permutation(length)[:size]
            for i in range(size):
                j = rng.integers(i + 1)
                row[[sites[i], sites[j]]] = row[[sites[j], sites[i]]]
        self._write_back(matrix)

        names = self.names
        rogues = [names[i] for i in order[:nb]]
        intact = [names[i] for i in order[nb:]]
        return rogues, intact

    def build_bootstrap(self, rng=None):
        """returns a new alignment of sites sampled with replacement

        The same sampled sites are used for every sequence.
        """
        length = max(self.length, 0)
        rng = get_rng(rng)
        indices = rng.integers(length, size=length) if length else numpy.zeros(0, dtype=int)
        boot = self._new_like()
        for seq in self:
            boot.add_sequence_char(seq.name, seq.symbols[indices], seq.comment)
        return boot

    def sample(self, nb: int, rng=None):
        """returns a new alignment of nb sequences sampled without replacement"""
        if nb > self.num_seqs:
            msg = f"cannot sample {nb} from {self.num_seqs} sequences"
            raise AlignmentError(msg)
        if nb < 1:
            msg = "cannot sample less than 1 sequence"
            raise AlignmentError(msg)

        rng = get_rng(rng)
        order = rng.permutation(self.num_seqs)[:nb]
        seqs = list(self)
        sampled = self._new_like()
        for i in order:
            seq = seqs[i]
            sampled.add_sequence_char(seq.name, seq.symbols.copy(), seq.comment)
        return sampled

    def rarefy(self, nb: int, counts: dict[str, int], rng=None):
        """returns the distinct sequences of a random draw of nb individuals

        Parameters
        ----------
        nb
            number of individuals drawn, without replacement, from the
            population described by counts
        counts
            {sequence name: number of individuals}, sequences not present
            are considered to have count 0
        rng
            random number generator or seed

        Notes
        -----
        Names are considered in sorted order. For each draw, a uniform
        variate is compared with the cumulative proportions of the remaining
        counts, the chosen count is decremented and the name is dropped when
        its count reaches 0.
        """
        remaining = {}
        for name, count in counts.items():
            if count <= 0:
                msg = f"count for {name!r} must be positive, not {count}"
                raise AlignmentError(msg)
            if name not in self:
                msg = f"sequence {name!r} does not exist in the alignment"
                raise AlignmentError(msg)
            remaining[name] = count

        total = sum(remaining.values())
        if nb >= total:
            msg = f"number of sequences to sample {nb} is >= sum of the counts {total}"
            raise AlignmentError(msg)

        rng = get_rng(rng)
        keys = sorted(remaining)
        selected = set()
        for _ in range(nb):
            unif = rng.random()
            cumulative = 0.0
            for key in keys:
                cumulative += remaining[key] / total
                if unif < cumulative:
                    selected.add(key)
                    remaining[key] -= 1
                    if remaining[key] == 0:
                        keys.remove(key)
                    break
            total -= 1

        rarefied = self._new_like()
        for seq in self:
            if seq.name in selected:
                rarefied.add_sequence_char(seq.name, seq.symbols.copy(), seq.comment)
        return rarefied


def random_alignment(alphabet: int, length: int, num_seqs: int, rng=None):
    """an alignment of uniformly drawn standard characters

    Sequences are named ``Seq0000``, ``Seq0001``, ...
    """
    from alignkit.core.alignment import Alignment

    chars = numpy.array(alphabet_characters(alphabet), dtype="<U1")
    rng = get_rng(rng)
    aln = Alignment(alphabet)
    for i in range(num_seqs):
        aln.add_sequence_char(f"Seq{i:04d}", chars[rng.integers(len(chars), size=length)])
    return aln
