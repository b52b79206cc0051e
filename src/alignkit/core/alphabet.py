"""Alphabet tags, control symbols and IUPAC character tables.

Symbols are single character strings. The control symbols ``GAP``, ``MATCH``,
``OTHER`` and ``MISSING`` are valid in every alphabet.
"""

from __future__ import annotations

from collections.abc import Iterable

AMINOACIDS = 0
NUCLEOTIDES = 1
BOTH = 2
UNKNOWN = 3

GAP = "-"
MATCH = "."
OTHER = "*"
MISSING = "?"

ALL_NUCLE = "N"
ALL_AMINO = "X"

CONTROL_SYMBOLS = frozenset((GAP, MATCH, OTHER, MISSING))
# symbols excluded from allele and frequency counting
SPECIAL_SYMBOLS = frozenset((GAP, MATCH, OTHER))

STD_NUCLEOTIDES = "ACGT"
STD_AMINOACIDS = "ARNDCQEGHILKMFPSTWYV"

IUPAC_DNA_ambiguities: dict[str, frozenset[str]] = {
    "N": frozenset(("A", "C", "T", "G")),
    "R": frozenset(("A", "G")),
    "Y": frozenset(("C", "T")),
    "W": frozenset(("A", "T")),
    "S": frozenset(("C", "G")),
    "K": frozenset(("T", "G")),
    "M": frozenset(("C", "A")),
    "B": frozenset(("C", "T", "G")),
    "D": frozenset(("A", "T", "G")),
    "H": frozenset(("A", "C", "T")),
    "V": frozenset(("A", "C", "G")),
}

IUPAC_DNA_ambiguities_complements = {
    "A": "T",
    "C": "G",
    "G": "C",
    "T": "A",
    "U": "A",
    "-": "-",
    "M": "K",
    "K": "M",
    "N": "N",
    "R": "Y",
    "Y": "R",
    "W": "W",
    "S": "S",
    "X": "X",  # not technically an IUPAC ambiguity, but used by repeatmasker
    "V": "B",
    "B": "V",
    "H": "D",
    "D": "H",
    "?": "?",
    ".": ".",
    "*": "*",
}

IUPAC_PROTEIN_ambiguities: dict[str, frozenset[str]] = {
    "B": frozenset(["N", "D"]),
    "X": frozenset(STD_AMINOACIDS),
    "Z": frozenset(["Q", "E"]),
    "J": frozenset(["I", "L"]),
}

# selenocysteine and pyrrolysine
_NONSTANDARD_AMINOACIDS = "UO"

_NUCLEOTIDE_CHARS = frozenset(
    STD_NUCLEOTIDES + "U" + "".join(IUPAC_DNA_ambiguities) + ALL_AMINO
)
_AMINOACID_CHARS = frozenset(
    STD_AMINOACIDS + _NONSTANDARD_AMINOACIDS + "".join(IUPAC_PROTEIN_ambiguities)
)

_labels = {AMINOACIDS: "protein", NUCLEOTIDES: "nucleotide", UNKNOWN: "unknown"}


class AlphabetError(ValueError): ...


def check_alphabet(alphabet: int) -> int:
    """returns a valid alphabet tag, ``BOTH`` is resolved to ``NUCLEOTIDES``"""
    if alphabet == BOTH:
        return NUCLEOTIDES
    if alphabet not in _labels:
        msg = f"unexpected sequence alphabet {alphabet!r}"
        raise AlphabetError(msg)
    return alphabet


def alphabet_from_string(label: str) -> int:
    """returns the alphabet tag corresponding to label"""
    label = label.lower()
    if label in ("dna", "rna", "nucleotide", "nt"):
        return NUCLEOTIDES
    if label in ("protein", "aa", "aminoacid"):
        return AMINOACIDS
    return UNKNOWN


def alphabet_name(alphabet: int) -> str:
    return _labels[check_alphabet(alphabet)]


def alphabet_characters(alphabet: int) -> tuple[str, ...]:
    """the standard (non-ambiguous) characters of an alphabet"""
    if alphabet == AMINOACIDS:
        return tuple(STD_AMINOACIDS)
    if alphabet in (NUCLEOTIDES, BOTH):
        return tuple(STD_NUCLEOTIDES)
    msg = "no standard characters for an unknown alphabet"
    raise AlphabetError(msg)


def any_symbol(alphabet: int) -> str:
    """the symbol standing for 'any character' in alphabet"""
    if alphabet == AMINOACIDS:
        return ALL_AMINO
    if alphabet == NUCLEOTIDES:
        return ALL_NUCLE
    msg = f"no generic symbol for the {_labels.get(alphabet, alphabet)} alphabet"
    raise AlphabetError(msg)


def alphabet_closure(alphabet: int) -> frozenset[str] | None:
    """upper case symbols valid for alphabet, None if any symbol is valid"""
    if alphabet == AMINOACIDS:
        return _AMINOACID_CHARS | CONTROL_SYMBOLS
    if alphabet in (NUCLEOTIDES, BOTH):
        return _NUCLEOTIDE_CHARS | CONTROL_SYMBOLS
    return None


def validate_symbols(symbols: Iterable[str], alphabet: int) -> None:
    """raises AlphabetError if a symbol is not in the alphabet closure"""
    closure = alphabet_closure(alphabet)
    if closure is None:
        return
    invalid = {s for s in symbols if s.upper() not in closure}
    if invalid:
        chars = "".join(sorted(invalid))
        msg = f"invalid {alphabet_name(alphabet)} characters {chars!r}"
        raise AlphabetError(msg)


def detect_alphabet(symbols: Iterable[str]) -> int:
    """guesses the alphabet from the non-control symbols present

    Notes
    -----
    A sequence composed only of nucleotide codes (including IUPAC
    ambiguities) is considered nucleotide even though those letters are
    also valid amino acids.
    """
    observed = {s.upper() for s in symbols} - CONTROL_SYMBOLS
    if observed <= _NUCLEOTIDE_CHARS:
        return NUCLEOTIDES
    if observed <= _AMINOACID_CHARS:
        return AMINOACIDS
    return UNKNOWN
