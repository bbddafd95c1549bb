"""
In-place arithmetic on equal-length float arrays.

The first argument is always the output buffer. Lengths are not checked.
"""
import numpy as np


def dot_product(a: np.ndarray, b: np.ndarray) -> np.float64:
    # numpy scalar: dividing by a zero curvature yields inf/nan, not ZeroDivisionError
    return np.dot(a, b)


def add(a: np.ndarray, b: np.ndarray) -> None:
    # a += b
    np.add(a, b, out=a)


def add_mult(a: np.ndarray, b: np.ndarray, c: float) -> None:
    # a += b * c
    np.add(a, b * c, out=a)


def add_mult_into(a: np.ndarray, b: np.ndarray, c: np.ndarray, d: float) -> None:
    # a = b + c * d
    np.add(b, c * d, out=a)


def scale(a: np.ndarray, b: float) -> None:
    np.multiply(a, b, out=a)


def scale_into(a: np.ndarray, b: np.ndarray, c: float) -> None:
    # a = b * c
    np.multiply(b, c, out=a)
