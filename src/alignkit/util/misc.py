"""Generally useful utility functions"""

from __future__ import annotations

import os
import warnings

import numpy

RANDOM_ENV = "ALIGNKIT_RANDOM"


def get_setting_from_environ(environ_var: str, params_types: dict) -> dict:
    """extract settings from environment variable

    Parameters
    ----------
    environ_var : str
        name of an environment variable
    params_types : dict
        {param name: type}, values will be cast to type

    Returns
    -------
    dict

    Notes
    -----
    settings must of form 'param_name1=param_val,param_name2=param_val2'
    """
    var = os.environ.get(environ_var, None)
    if var is None:
        return {}

    result = {}
    for item in var.split(","):
        item = item.split("=")
        if len(item) != 2 or item[0] not in params_types:
            continue

        name, val = item
        try:
            result[name] = params_types[name](val)
        except ValueError:
            warnings.warn(
                f"could not cast {name}={val} to type {params_types[name]}, skipping",
                UserWarning,
                stacklevel=2,
            )

    return result


def get_rng(rng: numpy.random.Generator | int | None = None) -> numpy.random.Generator:
    """returns a random number generator

    Parameters
    ----------
    rng
        a Generator is returned as is, an int is used as a seed. If None,
        the seed is taken from the ALIGNKIT_RANDOM environment variable
        (e.g. ``ALIGNKIT_RANDOM="seed=42"``) when set, otherwise from fresh
        entropy.
    """
    if isinstance(rng, numpy.random.Generator):
        return rng

    if rng is None:
        rng = get_setting_from_environ(RANDOM_ENV, {"seed": int}).get("seed")

    return numpy.random.default_rng(rng)
