from __future__ import annotations

import numpy

from alignkit.core.alphabet import (
    IUPAC_DNA_ambiguities_complements,
    AlphabetError,
)

SYMBOL_DTYPE = "<U1"

_complements = {
    **IUPAC_DNA_ambiguities_complements,
    **{
        k.lower(): v.lower()
        for k, v in IUPAC_DNA_ambiguities_complements.items()
        if k.isalpha()
    },
}


def as_symbols(data) -> numpy.ndarray:
    """returns a new 1D array of single character symbols

    Parameters
    ----------
    data
        a string or a series of single character strings

    Raises
    ------
    AlphabetError if an element is not exactly one character
    """
    if isinstance(data, str):
        return numpy.array(list(data), dtype=SYMBOL_DTYPE)

    symbols = numpy.array(data, dtype=str)
    if symbols.ndim != 1:
        msg = f"symbols must be one dimensional, not {symbols.ndim}"
        raise AlphabetError(msg)

    if symbols.size and (numpy.char.str_len(symbols) != 1).any():
        msg = "every symbol must be a single character"
        raise AlphabetError(msg)

    return symbols.astype(SYMBOL_DTYPE)


class Sequence:
    """a named series of symbols

    The ``symbols`` array is owned by the instance and may be modified in
    place.
    """

    __slots__ = ("name", "symbols", "comment")

    def __init__(self, name: str, symbols, comment: str = ""):
        self.name = name
        self.symbols = as_symbols(symbols)
        self.comment = comment

    def __len__(self) -> int:
        return len(self.symbols)

    def __str__(self) -> str:
        return "".join(self.symbols.tolist())

    def __repr__(self) -> str:
        seq = str(self)
        if len(seq) > 10:
            seq = f"{seq[:10]}..."
        return f"{self.__class__.__name__}({self.name!r}, {seq!r})"

    def __eq__(self, other) -> bool:
        if not isinstance(other, Sequence):
            return NotImplemented
        return (
            self.name == other.name
            and self.comment == other.comment
            and numpy.array_equal(self.symbols, other.symbols)
        )

    __hash__ = None

    def copy(self) -> Sequence:
        """deep copy"""
        return self.__class__(self.name, self.symbols.copy(), self.comment)

    def char_stats(self) -> dict[str, int]:
        """counts of each upper case symbol"""
        chars, counts = numpy.unique(numpy.char.upper(self.symbols), return_counts=True)
        return dict(zip(chars.tolist(), counts.tolist()))

    def reverse_complement(self) -> None:
        """reverse complements the symbols in place"""
        try:
            rc = [_complements[c] for c in self.symbols[::-1].tolist()]
        except KeyError as err:
            msg = f"cannot complement symbol {err.args[0]!r} in {self.name!r}"
            raise AlphabetError(msg) from err
        self.symbols = numpy.array(rc, dtype=SYMBOL_DTYPE)

    def translate(self, code, phase: int = 0) -> str:
        """returns the amino acid translation from phase

        Parameters
        ----------
        code
            a GeneticCode instance
        phase
            index of the first nucleotide of the first codon

        Notes
        -----
        A trailing partial codon is ignored.
        """
        seq = str(self)
        if phase >= len(seq):
            return ""
        return code.translate(seq, start=phase)
