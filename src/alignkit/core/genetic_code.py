"""Translates DNA or RNA codons to amino acids.

NOTE: * is used to denote termination (as per NCBI standard).
NOTE: a codon of three gaps translates to a gap, a codon containing any
other non-canonical character translates to X.
"""

from __future__ import annotations

from itertools import product


class GeneticCodeError(ValueError):
    pass


class InvalidCodonError(KeyError, GeneticCodeError):
    pass


_bases = "TCAG"

GAP_CODON = "---"


class GeneticCode:
    """Holds codon to amino acid mapping, and vice versa.

    Use the `get_code()` function to get one of the included code instances.

    >>> gc = get_code(1)
    >>> gc['UUU'] == 'F'
    >>> gc['TTT'] == 'F'
    >>> gc['*'] == ['TAA', 'TAG', 'TGA']

    GeneticCode is immutable once created.
    """

    _codons = tuple(map("".join, product(_bases, _bases, _bases)))

    def __init__(self, code_sequence: str, ID: int | None = None, name: str | None = None):
        """
        Parameters
        ----------
        code_sequence
            64-character string containing NCBI representation of the genetic code.
        ID
            NCBI identifier
        name
            name of the Genetic code
        """
        if len(code_sequence) != 64:
            msg = (
                f"code_sequence: {code_sequence} has length {len(code_sequence)}, "
                "but expected 64"
            )
            raise GeneticCodeError(msg)

        self.code_sequence = code_sequence
        self.ID = ID
        self.name = name
        self.codons = dict(zip(self._codons, code_sequence))
        synonyms: dict[str, list[str]] = {}
        for codon, aa in self.codons.items():
            synonyms.setdefault(aa, []).append(codon)
        self.synonyms = synonyms

    @property
    def stop_codons(self) -> set[str]:
        return set(self.synonyms.get("*", []))

    def __str__(self) -> str:
        return self.code_sequence

    def __repr__(self) -> str:
        return f"GeneticCode(ID={self.ID}, name={self.name!r})"

    def __eq__(self, other) -> bool:
        return str(self) == str(other)

    def __hash__(self) -> int:
        return hash(self.code_sequence)

    def __getitem__(self, item: str) -> str | list[str]:
        """Returns amino acid corresponding to codon, or codons for an aa.

        Returns [] for an amino acid with no codons, 'X' for an unknown codon.
        """
        if not isinstance(item, str):
            msg = f"Codon or aa {item!r} is not a string"
            raise InvalidCodonError(msg)
        if len(item) == 1:
            return self.synonyms.get(item, [])
        if len(item) == 3:
            key = item.upper().replace("U", "T")
            if key == GAP_CODON:
                return "-"
            return self.codons.get(key, "X")
        msg = f"Codon or aa {item} has wrong length"
        raise InvalidCodonError(msg)

    def translate(self, dna: str, start: int = 0) -> str:
        """Translates DNA to protein from start, ignoring a trailing partial codon"""
        if not dna:
            return ""
        if start + 1 > len(dna):
            msg = "Translation starts after end of sequence"
            raise GeneticCodeError(msg)
        return "".join([self[dna[i : i + 3]] for i in range(start, len(dna) - 2, 3)])

    def is_stop(self, codon: str) -> bool:
        """Returns True if codon is a stop codon, False otherwise."""
        return self[codon] == "*"


# NCBI translation tables, {ID: (name, amino acids in TCAG codon order)}
_ncbi_tables = {
    1: (
        "Standard",
        "FFLLSSSSYY**CC*WLLLLPPPPHHQQRRRRIIIMTTTTNNKKSSRRVVVVAAAADDEEGGGG",
    ),
    2: (
        "Vertebrate Mitochondrial",
        "FFLLSSSSYY**CCWWLLLLPPPPHHQQRRRRIIMMTTTTNNKKSS**VVVVAAAADDEEGGGG",
    ),
    3: (
        "Yeast Mitochondrial",
        "FFLLSSSSYY**CCWWTTTTPPPPHHQQRRRRIIMMTTTTNNKKSSRRVVVVAAAADDEEGGGG",
    ),
    4: (
        "Mold, Protozoan, and Coelenterate Mitochondrial, and Mycoplasma/Spiroplasma Nuclear",
        "FFLLSSSSYY**CCWWLLLLPPPPHHQQRRRRIIIMTTTTNNKKSSRRVVVVAAAADDEEGGGG",
    ),
    5: (
        "Invertebrate Mitochondrial",
        "FFLLSSSSYY**CCWWLLLLPPPPHHQQRRRRIIMMTTTTNNKKSSSSVVVVAAAADDEEGGGG",
    ),
    6: (
        "Ciliate, Dasycladacean and Hexamita Nuclear",
        "FFLLSSSSYYQQCC*WLLLLPPPPHHQQRRRRIIIMTTTTNNKKSSRRVVVVAAAADDEEGGGG",
    ),
    9: (
        "Echinoderm and Flatworm Mitochondrial",
        "FFLLSSSSYY**CCWWLLLLPPPPHHQQRRRRIIIMTTTTNNNKSSSSVVVVAAAADDEEGGGG",
    ),
    10: (
        "Euplotid Nuclear",
        "FFLLSSSSYY**CCCWLLLLPPPPHHQQRRRRIIIMTTTTNNKKSSRRVVVVAAAADDEEGGGG",
    ),
    11: (
        "Bacterial Nuclear and Plant Plastid",
        "FFLLSSSSYY**CC*WLLLLPPPPHHQQRRRRIIIMTTTTNNKKSSRRVVVVAAAADDEEGGGG",
    ),
    12: (
        "Alternative Yeast Nuclear",
        "FFLLSSSSYY**CC*WLLLSPPPPHHQQRRRRIIIMTTTTNNKKSSRRVVVVAAAADDEEGGGG",
    ),
    13: (
        "Ascidian Mitochondrial",
        "FFLLSSSSYY**CCWWLLLLPPPPHHQQRRRRIIMMTTTTNNKKSSGGVVVVAAAADDEEGGGG",
    ),
    14: (
        "Alternative Flatworm Mitochondrial",
        "FFLLSSSSYYY*CCWWLLLLPPPPHHQQRRRRIIIMTTTTNNNKSSSSVVVVAAAADDEEGGGG",
    ),
    15: (
        "Blepharisma Nuclear",
        "FFLLSSSSYY*QCC*WLLLLPPPPHHQQRRRRIIIMTTTTNNKKSSRRVVVVAAAADDEEGGGG",
    ),
    16: (
        "Chlorophycean Mitochondrial",
        "FFLLSSSSYY*LCC*WLLLLPPPPHHQQRRRRIIIMTTTTNNKKSSRRVVVVAAAADDEEGGGG",
    ),
    20: (
        "Trematode Mitochondrial",
        "FFLLSSSSYY**CCWWLLLLPPPPHHQQRRRRIIMMTTTTNNNKSSSSVVVVAAAADDEEGGGG",
    ),
    22: (
        "Scenedesmus obliquus Mitochondrial",
        "FFLLSS*SYY*LCC*WLLLLPPPPHHQQRRRRIIIMTTTTNNKKSSRRVVVVAAAADDEEGGGG",
    ),
    23: (
        "Thraustochytrium Mitochondrial",
        "FF*LSSSSYY**CC*WLLLLPPPPHHQQRRRRIIIMTTTTNNKKSSRRVVVVAAAADDEEGGGG",
    ),
}

NcbiGeneticCodeData = [
    GeneticCode(code_sequence, ID, name) for ID, (name, code_sequence) in _ncbi_tables.items()
]

# keyed by ID as int
GeneticCodes = {gc.ID: gc for gc in NcbiGeneticCodeData}

DEFAULT = GeneticCodes[1]


def get_code(code_id: int | str | GeneticCode | None = 1) -> GeneticCode:
    """returns the genetic code

    Parameters
    ----------
    code_id
        genetic code identifier, name, number or string(number), defaults to
        standard genetic code
    """
    if code_id is None:
        return DEFAULT
    if isinstance(code_id, GeneticCode):
        return code_id

    code = None
    if isinstance(code_id, int) or str(code_id).isdigit():
        code = GeneticCodes.get(int(code_id))
    else:
        for gc in NcbiGeneticCodeData:
            if gc.name.lower() == str(code_id).lower():
                code = gc

    if code is None:
        msg = f'No genetic code matching "{code_id}"'
        raise GeneticCodeError(msg)

    return code


def available_codes() -> list[tuple[int, str]]:
    """returns (ID, name) of the available genetic codes"""
    return [(gc.ID, gc.name) for gc in NcbiGeneticCodeData]
