"""Batch processing of several alignments."""

from __future__ import annotations

import time
from collections.abc import Iterable, Iterator

from scitrack import CachingLogger

from alignkit.core.alignment import Alignment


class AlignmentStream:
    """a lazy, single pass, iterator over alignments

    Parameters
    ----------
    source
        iterable producing Alignment instances, typically a parser

    Notes
    -----
    An exception raised by source ends the iteration and is stored on the
    ``error`` attribute instead of propagating, so alignments produced
    before the failure can still be processed.
    """

    def __init__(self, source: Iterable[Alignment]):
        self._source = iter(source)
        self._done = False
        self.error: Exception | None = None

    def __iter__(self) -> Iterator[Alignment]:
        return self

    def __next__(self) -> Alignment:
        if self._done:
            raise StopIteration
        try:
            return next(self._source)
        except StopIteration:
            self._done = True
            raise
        except Exception as err:
            self._done = True
            self.error = err
            raise StopIteration from err

    def __repr__(self) -> str:
        state = "exhausted" if self._done else "open"
        error = f", error={self.error!r}" if self.error else ""
        return f"{self.__class__.__name__}({state}{error})"


def alignment_stats(aln: Alignment) -> dict:
    """summary statistics of an alignment

    Returns
    -------
    dict with keys 'length', 'nseqs', 'avgalleles', 'variable sites',
    'char stats' ({char: (count, frequency)}) and 'alphabet'
    """
    char_stats = aln.char_stats()
    total = sum(char_stats.values())
    return {
        "length": aln.length,
        "nseqs": aln.num_seqs,
        "avgalleles": aln.avg_alleles_per_site(),
        "variable sites": aln.nb_variable_sites(),
        "char stats": {c: (n, n / total) for c, n in sorted(char_stats.items())},
        "alphabet": aln.alphabet_str(),
    }


def summarise_stream(stream: Iterable[Alignment], logger: CachingLogger | None = None) -> list[dict]:
    """computes alignment_stats() for every alignment of stream

    Parameters
    ----------
    stream
        an AlignmentStream, or any iterable of alignments which is wrapped
        in one
    logger
        scitrack logger recording each result, one is created if not
        provided

    Returns
    -------
    the statistics in stream order. A failure of the stream is logged with
    the label 'ERROR' and remains available from ``stream.error``.
    """
    if logger is None:
        logger = CachingLogger(create_dir=True)
    if not isinstance(logger, CachingLogger):
        msg = f"logger must be of type CachingLogger not {type(logger)}"
        raise TypeError(msg)

    if not isinstance(stream, AlignmentStream):
        stream = AlignmentStream(stream)

    start = time.time()
    logger.log_versions(["alignkit"])
    results = []
    for index, aln in enumerate(stream):
        stats = alignment_stats(aln)
        logger.log_message(f"{index}: {stats}", label="alignment stats")
        results.append(stats)

    if stream.error is not None:
        logger.log_message(f"{type(stream.error).__name__}: {stream.error}", label="ERROR")

    taken = time.time() - start
    logger.log_message(f"{taken}", label="TIME TAKEN")
    return results
