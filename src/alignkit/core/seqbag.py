from __future__ import annotations

import warnings
from collections.abc import Callable, Iterable, Iterator, Mapping

import numpy

from alignkit.core import alphabet as _alpha
from alignkit.core.genetic_code import get_code
from alignkit.core.sequence import Sequence, as_symbols


class SeqBagError(Exception):
    pass


class MissingSequenceError(SeqBagError, KeyError):
    pass


class AlignmentError(SeqBagError, ValueError):
    """raised when an alignment operation precondition is not met"""


class SeqBag:
    """an ordered collection of uniquely named, unaligned sequences

    Parameters
    ----------
    alphabet
        one of the alignkit.core.alphabet tags, ``BOTH`` is treated as
        ``NUCLEOTIDES``

    Notes
    -----
    Sequences are held in insertion order with a name to index table kept
    in sync on every insertion and removal. Adding a sequence whose name is
    already present renames it ``<name>_0001`` (the first free index) and
    issues a UserWarning.
    """

    def __init__(self, alphabet: int = _alpha.UNKNOWN):
        self._alphabet = _alpha.check_alphabet(alphabet)
        self._seqs: list[Sequence] = []
        self._name_index: dict[str, int] = {}

    @property
    def alphabet(self) -> int:
        return self._alphabet

    def __len__(self) -> int:
        return len(self._seqs)

    def __iter__(self) -> Iterator[Sequence]:
        yield from self._seqs

    def __contains__(self, name: str) -> bool:
        return name in self._name_index

    def __repr__(self) -> str:
        seqs = []
        for count, seq in enumerate(self._seqs):
            if count == 3:
                seqs.append("...")
                break
            seqs.append(f"{seq.name}[{str(seq)[:10]}]")
        seqs_str = ", ".join(seqs)
        return f"{self.num_seqs} x {self.alphabet_str()} {self.__class__.__name__}: {seqs_str}"

    @property
    def names(self) -> list[str]:
        return [s.name for s in self._seqs]

    @property
    def num_seqs(self) -> int:
        return len(self._seqs)

    def _check_symbols(self, symbols: numpy.ndarray) -> None:
        _alpha.validate_symbols(symbols.tolist(), self._alphabet)

    def _unique_name(self, name: str) -> str:
        if name not in self._name_index:
            return name

        index = 1
        while (new_name := f"{name}_{index:04d}") in self._name_index:
            index += 1

        warnings.warn(
            f"sequence name {name!r} already exists, renamed to {new_name!r}",
            UserWarning,
            stacklevel=3,
        )
        return new_name

    def _reindex(self) -> None:
        self._name_index = {s.name: i for i, s in enumerate(self._seqs)}

    def _insert(self, seq: Sequence) -> None:
        self._name_index[seq.name] = len(self._seqs)
        self._seqs.append(seq)

    def add_sequence(self, name: str, sequence: str, comment: str = "") -> str:
        """adds a sequence from a string, returns the name it was stored under"""
        return self.add_sequence_char(name, as_symbols(sequence), comment)

    def add_sequence_char(self, name: str, symbols, comment: str = "") -> str:
        """adds a sequence from a series of symbols

        Returns
        -------
        the name the sequence was stored under, which differs from name
        if that was already present

        Raises
        ------
        AlphabetError if any symbol is invalid for the alphabet, in which
        case nothing is added
        """
        symbols = as_symbols(symbols)
        self._check_symbols(symbols)
        name = self._unique_name(name)
        self._insert(Sequence(name, symbols, comment))
        return name

    def _index_of(self, name: str) -> int:
        try:
            return self._name_index[name]
        except KeyError:
            msg = f"no sequence named {name!r}"
            raise MissingSequenceError(msg) from None

    def _check_index(self, index: int) -> None:
        if not 0 <= index < self.num_seqs:
            msg = f"sequence index {index} outside [0, {self.num_seqs})"
            raise IndexError(msg)

    def get_sequence(self, name: str) -> str:
        return str(self._seqs[self._index_of(name)])

    def get_sequence_char(self, name: str) -> numpy.ndarray:
        """the symbols array of the named sequence, not a copy"""
        return self._seqs[self._index_of(name)].symbols

    def get_sequence_by_id(self, index: int) -> str:
        self._check_index(index)
        return str(self._seqs[index])

    def get_sequence_name(self, index: int) -> str:
        self._check_index(index)
        return self._seqs[index].name

    def char_stats(self) -> dict[str, int]:
        """counts of each symbol, upper cased, across all sequences"""
        if not self._seqs:
            return {}
        symbols = numpy.char.upper(numpy.concatenate([s.symbols for s in self._seqs]))
        chars, counts = numpy.unique(symbols, return_counts=True)
        return dict(zip(chars.tolist(), counts.tolist()))

    def char_stats_seq(self, index: int) -> dict[str, int]:
        """counts of each symbol, upper cased, in the sequence at index"""
        self._check_index(index)
        return self._seqs[index].char_stats()

    def iterate_all(self, func: Callable[[str, numpy.ndarray, str], None]) -> None:
        """applies func(name, symbols, comment) to each sequence in order

        func may modify symbols in place but must not add or remove
        sequences.
        """
        for seq in self._seqs:
            func(seq.name, seq.symbols, seq.comment)

    def iterate_char(self, func: Callable[[str, numpy.ndarray], None]) -> None:
        """applies func(name, symbols) to each sequence in order"""
        for seq in self._seqs:
            func(seq.name, seq.symbols)

    def clone(self):
        """returns a deep copy"""
        new = self.__class__(self._alphabet)
        for seq in self._seqs:
            new.add_sequence_char(seq.name, seq.symbols.copy(), seq.comment)
        return new

    def _replace_sequences(self, seqs: list[Sequence]) -> None:
        self._seqs = seqs
        self._reindex()

    def remove_sequences(self, names: Iterable[str]) -> None:
        """removes the named sequences

        Raises
        ------
        MissingSequenceError if any name is absent, nothing is removed
        """
        names = set(names)
        for name in names:
            self._index_of(name)
        self._replace_sequences([s for s in self._seqs if s.name not in names])

    def rename(self, mapping: Mapping[str, str]) -> None:
        """renames sequences according to {old name: new name}

        Raises
        ------
        MissingSequenceError if an old name is absent, SeqBagError if the
        result would not have unique names
        """
        for name in mapping:
            self._index_of(name)

        new_names = [mapping.get(n, n) for n in self.names]
        if len(set(new_names)) != len(new_names):
            msg = "renaming would create duplicate sequence names"
            raise SeqBagError(msg)

        for seq, new_name in zip(self._seqs, new_names):
            seq.name = new_name
        self._reindex()

    def append_seq_identifier(self, identifier: str, right: bool) -> None:
        """adds identifier to the right or the left of every name"""
        if not identifier:
            return
        for seq in self._seqs:
            seq.name = f"{seq.name}{identifier}" if right else f"{identifier}{seq.name}"
        self._reindex()

    def auto_alphabet(self) -> int:
        """sets the alphabet from the symbols present and returns it"""
        observed = set()
        for seq in self._seqs:
            observed.update(numpy.unique(seq.symbols).tolist())
        self._alphabet = _alpha.detect_alphabet(observed)
        return self._alphabet

    def alphabet_str(self) -> str:
        return _alpha.alphabet_name(self._alphabet)

    def alphabet_characters(self) -> tuple[str, ...]:
        return _alpha.alphabet_characters(self._alphabet)

    def to_dict(self) -> dict[str, str]:
        return {s.name: str(s) for s in self._seqs}

    def _translated(self, phase: int, code) -> list[Sequence]:
        if self._alphabet != _alpha.NUCLEOTIDES:
            msg = f"cannot translate {self.alphabet_str()} sequences"
            raise _alpha.AlphabetError(msg)

        if phase not in (-1, 0, 1, 2):
            msg = f"phase must be one of -1, 0, 1, 2 not {phase!r}"
            raise ValueError(msg)

        code = get_code(code)
        translated = []
        for seq in self._seqs:
            if phase == -1:
                translated.extend(
                    Sequence(f"{seq.name}_{frame}", seq.translate(code, frame), seq.comment)
                    for frame in range(3)
                )
            else:
                translated.append(Sequence(seq.name, seq.translate(code, phase), seq.comment))
        return translated

    def translate(self, phase: int = 0, code: int | str = 1) -> None:
        """translates all sequences in place to amino acids

        Parameters
        ----------
        phase
            0, 1 or 2 the index of the first translated nucleotide. -1
            replaces every sequence with its three forward frame translations
            named ``<name>_0``, ``<name>_1`` and ``<name>_2``
        code
            genetic code identifier, see ``get_code()``
        """
        self._replace_sequences(self._translated(phase, code))
        self._alphabet = _alpha.AMINOACIDS

    def reverse_complement(self) -> None:
        """reverse complements all sequences in place"""
        if self._alphabet != _alpha.NUCLEOTIDES:
            msg = f"cannot reverse complement {self.alphabet_str()} sequences"
            raise _alpha.AlphabetError(msg)
        for seq in self._seqs:
            seq.reverse_complement()


def make_seqbag(data: Mapping[str, str] | None = None, alphabet: int | str | None = None) -> SeqBag:
    """returns a SeqBag

    Parameters
    ----------
    data
        {name: sequence}
    alphabet
        an alphabet tag or label such as "dna" or "protein". If None, the
        alphabet is detected from the symbols.
    """
    return _populate(SeqBag, data, alphabet)


def _populate(klass, data, alphabet):
    data = data or {}
    if isinstance(alphabet, str):
        alphabet = _alpha.alphabet_from_string(alphabet)

    if alphabet is None:
        observed = set()
        for seq in data.values():
            observed.update(seq)
        alphabet = _alpha.detect_alphabet(observed)

    collection = klass(alphabet)
    for name, seq in data.items():
        collection.add_sequence(name, seq)
    return collection
