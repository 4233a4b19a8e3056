"""Spatial utility functions for angles, directions and rotations.

Conventions: the world frame is local ENU (x east, y north, z up), camera poses are given as wTi
(camera-to-world) and cameras look along their +z axis. Angles are in radians unless stated otherwise.
"""

import math
from typing import Sequence

import numpy as np
from gtsam import Rot3
from scipy.spatial.transform import Rotation

WORLD_UP = np.array([0.0, 0.0, 1.0])
CAMERA_OPTICAL_AXIS = np.array([0.0, 0.0, 1.0])


def wrap_angle(angle: float) -> float:
    """Wrap an angle into the half-open interval (-pi, pi]."""
    # remainder is exact and lies in [-pi, pi]; only the lower bound needs folding.
    wrapped = math.remainder(angle, 2 * math.pi)
    if wrapped <= -math.pi:
        return math.pi
    return wrapped


def angle_difference(angle1: float, angle2: float) -> float:
    """Signed difference angle2 - angle1, wrapped into (-pi, pi]."""
    return wrap_angle(angle2 - angle1)


def angle_between_vector2(v1x: float, v1y: float, v2x: float, v2y: float) -> float:
    """Signed planar angle which rotates the 2d vector v1 onto v2, counter-clockwise positive."""
    return angle_difference(math.atan2(v1y, v1x), math.atan2(v2y, v2x))


def angle_to_plane(vector: Sequence[float], plane_normal: Sequence[float]) -> float:
    """Signed angle between a vector and the plane with the given normal.

    Positive when the vector points to the side of the plane the normal points to. A zero vector lies in every
    plane and gets a zero angle.
    """
    vector = np.asarray(vector, dtype=float)
    plane_normal = np.asarray(plane_normal, dtype=float)

    vector_norm = np.linalg.norm(vector)
    normal_norm = np.linalg.norm(plane_normal)
    if normal_norm == 0:
        raise ValueError("Plane normal must be non-zero.")
    if vector_norm == 0:
        return 0.0

    projection = np.dot(vector, plane_normal) / (vector_norm * normal_norm)
    return float(np.arcsin(np.clip(projection, -1.0, 1.0)))


def viewing_direction(wRi: Rot3) -> np.ndarray:
    """Unit viewing direction of a camera in the world frame."""
    return wRi.matrix() @ CAMERA_OPTICAL_AXIS


def relative_rotation_angle(wRi1: Rot3, wRi2: Rot3) -> float:
    """Unsigned angle of the rotation between two camera orientations, in [0, pi].

    Note: the angle is the norm of the angle-axis representation.
    """
    i1Ri2 = wRi1.between(wRi2)
    scaled_axis = Rotation.from_matrix(i1Ri2.matrix()).as_rotvec()
    return float(np.linalg.norm(scaled_axis))


def deg_to_rad(degrees: float) -> float:
    return float(np.deg2rad(degrees))


def rad_to_deg(radians: float) -> float:
    return float(np.rad2deg(radians))
