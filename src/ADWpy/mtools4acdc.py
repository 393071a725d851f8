"""
Miscellaneous numerical helpers shared by the ADWpy modules.
"""
from numbers import Number

import numpy as np

__author__ = "Andras Sobester"


def recastasnpfloatarray(scalarorvec):
    """
    Recast a scalar, list, or tuple as a numpy array of floats.

    Args:
        scalarorvec: A number, or a sequence of numbers.

    Returns:
        An array of at least one dimension, with dtype float.

    """
    if isinstance(scalarorvec, Number):
        scalarorvec = [scalarorvec]
    return np.array(scalarorvec, dtype=float, ndmin=1)


def reverttoscalar(scalarorvec):
    """Return scalar response to scalar input."""
    if isinstance(scalarorvec, np.ndarray):
        if scalarorvec.ndim == 0:
            return scalarorvec.item()
        if scalarorvec.size == 1:
            return scalarorvec.flat[0].item()
    return scalarorvec
