# contactsim/physics/geometry.py
import numpy as np

from contactsim.physics.vectors import as_vec3, dot, norm


def segment_min_distance(r1, r2):
    """
    Minimum distance from the body centre (origin) to the segment [r1, r2].
    Inputs:
        r1, r2 : positions (km), shape (3,) or stacked (N, 3)
    Returns:
        distance (km), scalar or shape (N,)
    Note: the projection parameter is clamped to [0, 1], so a centre lying
    beyond either end measures to the nearer endpoint.
    """
    r1 = as_vec3(r1)
    r2 = as_vec3(r2)
    v = r2 - r1
    vv = dot(v, v)

    coincident = vv == 0.0
    safe_vv = np.where(coincident, 1.0, vv)
    t = np.clip(-dot(r1, v) / safe_vv, 0.0, 1.0)
    t = np.where(coincident, 0.0, t)

    closest = r1 + t[..., None] * v
    return norm(closest)


def is_occluded(r1, r2, radius_km: float):
    """True where the sphere of radius_km blocks the segment [r1, r2]."""
    return segment_min_distance(r1, r2) < radius_km


def subpoint(position):
    """
    Latitude / longitude (degrees) directly beneath an inertial position.
    Earth rotation is ignored, so this is only meaningful at the epoch.
    """
    p = as_vec3(position)
    r = norm(p)
    lat = np.degrees(np.arcsin(p[..., 2] / r))
    lon = np.degrees(np.arctan2(p[..., 1], p[..., 0]))
    if np.ndim(lat) == 0:
        return {"latitude": float(lat), "longitude": float(lon)}
    return {"latitude": lat, "longitude": lon}
