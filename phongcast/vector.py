"""Vector helpers over 3-tuples of floats.

Every helper is self-contained (no calls between them) so that
``numba.njit`` can wrap them directly for the compiled renderer.
"""
import math

from phongcast.common import Vec3


def add(a: Vec3, b: Vec3) -> Vec3:
    return a[0] + b[0], a[1] + b[1], a[2] + b[2]


def sub(a: Vec3, b: Vec3) -> Vec3:
    return a[0] - b[0], a[1] - b[1], a[2] - b[2]


def scale(v: Vec3, s: float) -> Vec3:
    return v[0] * s, v[1] * s, v[2] * s


def dot(a: Vec3, b: Vec3) -> float:
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]


def normalize(v: Vec3) -> Vec3:
    """Return ``v`` scaled to unit length. ``v`` must not be the zero vector."""
    norm = math.sqrt(v[0] * v[0] + v[1] * v[1] + v[2] * v[2])
    return v[0] / norm, v[1] / norm, v[2] / norm


def reflect(incident: Vec3, normal: Vec3) -> Vec3:
    """Mirror ``incident`` about the unit vector ``normal``."""
    k = 2.0 * (incident[0] * normal[0] + incident[1] * normal[1] + incident[2] * normal[2])
    return incident[0] - normal[0] * k, incident[1] - normal[1] * k, incident[2] - normal[2] * k
