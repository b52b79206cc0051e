"""alignkit: in-memory representation, statistics and transformation of
multiple sequence alignments."""

import logging
import os
import typing
import warnings
from importlib import import_module

from alignkit._version import __version__

__license__ = "BSD-3"


def __getattr__(name: str) -> typing.Any:  # noqa: ANN401
    if (attr := globals().get(name)) is not None:
        return attr

    if name not in _import_mapping:
        msg = f"module {__name__!r} has no attribute {name!r}"
        raise AttributeError(msg)

    module_name = _import_mapping[name]
    module = import_module(f".{module_name}", package=__name__)
    attr = getattr(module, name)
    globals()[name] = attr
    return attr


_import_mapping = {
    "Alignment": "core.alignment",
    "AlignmentError": "core.alignment",
    "make_aligned": "core.alignment",
    "SeqBag": "core.seqbag",
    "SeqBagError": "core.seqbag",
    "MissingSequenceError": "core.seqbag",
    "make_seqbag": "core.seqbag",
    "Sequence": "core.sequence",
    "AlphabetError": "core.alphabet",
    "AMINOACIDS": "core.alphabet",
    "NUCLEOTIDES": "core.alphabet",
    "BOTH": "core.alphabet",
    "UNKNOWN": "core.alphabet",
    "available_codes": "core.genetic_code",
    "get_code": "core.genetic_code",
    "GeneticCodeError": "core.genetic_code",
    "ProfileError": "core.profile",
    "random_alignment": "core.simulate",
    "AlignmentStream": "core.stream",
    "alignment_stats": "core.stream",
    "summarise_stream": "core.stream",
    "available_models": "evolve.fast_distance",
    "get_distance_model": "evolve.fast_distance",
    "pairwise_distances": "evolve.fast_distance",
    "DistanceMatrix": "evolve.fast_distance",
}


def __dir__() -> list[str]:
    return list(_import_mapping.keys()) + list(globals().keys())


__all__ = list(_import_mapping.keys())

version = __version__
version_info = tuple(int(v) for v in version.split(".") if v.isdigit())


warn_env = "ALIGNKIT_WARNINGS"

if warn := os.environ.get(warn_env):
    warnings.simplefilter(warn)


# suppress numba warnings
__numba_logger = logging.getLogger("numba")
__numba_logger.setLevel(logging.WARNING)
