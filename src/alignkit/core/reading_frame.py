"""Reading frame tracking relative to a reference sequence.

The first sequence of an alignment is taken as an in-frame reference. For
every other sequence a running phase is maintained, a gap in the reference
advances the phase by one and a gap in the sequence moves it back by one
(modulo 3). Positions are reported in ungapped sequence coordinates.
"""

from __future__ import annotations

from collections import namedtuple

from alignkit.core.alphabet import GAP
from alignkit.core.genetic_code import get_code

Frameshift = namedtuple("Frameshift", ("start", "end"))


class _PhaseTracker:
    """phase of a sequence relative to the reference"""

    def __init__(self, starting_gaps_as_incomplete: bool):
        self.incomplete_start = starting_gaps_as_incomplete
        self.phase = 0
        self.started = False

    def step(self, ref_char: str, seq_char: str) -> bool:
        """updates the phase, returns True if seq_char is a counted position"""
        if ref_char == GAP:
            self.phase = (self.phase + 1) % 3

        if seq_char == GAP:
            self.phase = (self.phase - 1) % 3
            return False

        if not self.started and self.incomplete_start and self.phase != 0:
            # leading positions before the sequence is in frame
            self.phase = (self.phase - 1) % 3
            return False

        self.started = True
        return True


def _longest_frameshift(ref, seq, starting_gaps_as_incomplete: bool) -> Frameshift:
    tracker = _PhaseTracker(starting_gaps_as_incomplete)
    best = Frameshift(0, 0)
    start = pos = 0
    last = len(ref) - 1
    for i, (ref_char, seq_char) in enumerate(zip(ref, seq)):
        if tracker.step(ref_char, seq_char):
            pos += 1

        size = pos - start
        if (tracker.phase == 0 or i == last) and size > 1 and size > best.end - best.start:
            best = Frameshift(start, pos)

        if tracker.phase == 0:
            start = pos
    return best


def frameshifts(aln, starting_gaps_as_incomplete: bool = False) -> list[Frameshift]:
    """the longest out of frame region of each sequence

    Parameters
    ----------
    aln
        Alignment whose first sequence is the in-frame reference
    starting_gaps_as_incomplete
        if True, leading positions of a sequence are not counted until its
        phase returns to 0

    Returns
    -------
    a Frameshift(start, end) per sequence, in ungapped coordinates of that
    sequence. The reference, and sequences that never leave the frame for
    more than one position, have Frameshift(0, 0).
    """
    if aln.num_seqs == 0:
        return []

    seqs = [s.symbols.tolist() for s in aln]
    ref = seqs[0]
    result = [Frameshift(0, 0)]
    result.extend(_longest_frameshift(ref, seq, starting_gaps_as_incomplete) for seq in seqs[1:])
    return result


def _first_stop(ref, seq, starting_gaps_as_incomplete: bool, code) -> int:
    tracker = _PhaseTracker(starting_gaps_as_incomplete)
    codon = []
    pos = 0
    for i in range(len(ref) - 2):
        tracker.step(ref[i], seq[i])
        if seq[i] != GAP and (not starting_gaps_as_incomplete or tracker.started):
            codon.append(seq[i])
            pos += 1

        if len(codon) == 3:
            if code["".join(codon)] == "*":
                return pos
            codon = []
    return -1


def stops(aln, starting_gaps_as_incomplete: bool = False, code: int | str = 1) -> list[int]:
    """ungapped position just after the first in frame stop codon of each sequence

    Parameters
    ----------
    aln
        Alignment whose first sequence is the in-frame reference
    starting_gaps_as_incomplete
        if True, leading positions of a sequence are not read until its
        phase returns to 0
    code
        genetic code identifier, see ``get_code()``

    Returns
    -------
    one int per sequence, -1 if no stop was found. The reference is
    always -1.

    Raises
    ------
    GeneticCodeError if code is unknown
    """
    code = get_code(code)
    if aln.num_seqs == 0:
        return []

    seqs = [s.symbols.tolist() for s in aln]
    ref = seqs[0]
    result = [-1]
    result.extend(_first_stop(ref, seq, starting_gaps_as_incomplete, code) for seq in seqs[1:])
    return result
