# contactsim/physics/vectors.py
import numpy as np


def as_vec3(v):
    """Coerce a length-3 sequence (or an (N, 3) stack) into a float array."""
    arr = np.asarray(v, dtype=float)
    if arr.shape[-1:] != (3,):
        raise ValueError(f"Cannot coerce {v!r} to 3D vector")
    return arr


def norm(v):
    return np.linalg.norm(v, axis=-1)


def dot(a, b):
    return np.sum(np.asarray(a) * np.asarray(b), axis=-1)


def safe_unit(v, eps: float = 1e-12):
    """
    Normalize vectors along the last axis without ever producing NaN.
    Returns (unit, ok) where ok is False for zero-length or non-finite rows;
    those rows come back as zeros.
    """
    v = as_vec3(v)
    n = norm(v)
    ok = np.isfinite(n) & (n > eps)
    safe_n = np.where(ok, n, 1.0)
    unit = np.where(ok[..., None], v / safe_n[..., None], 0.0)
    return unit, ok
