# planet_generator/transforms.py

"""
Orientation helpers shared by the scatter pass and the placement tracker.

Rotations are `scipy.spatial.transform.Rotation` objects. Instances stand
upright along their local +Y axis, so "aligning" an instance means rotating
+Y onto the outward surface direction.
"""
import numpy as np
from scipy.spatial.transform import Rotation

UP_AXIS = np.array([0.0, 1.0, 0.0])

# Below this dot product the two directions are treated as opposite.
_ANTIPARALLEL_EPSILON = 1e-6


def normalize(vector: np.ndarray) -> np.ndarray:
    """Unit vector along `vector`; the zero vector is returned unchanged."""
    vector = np.asarray(vector, dtype=np.float64)
    length = np.linalg.norm(vector)
    if length == 0.0:
        return vector.copy()
    return vector / length


def outward_direction(position: np.ndarray, origin: np.ndarray) -> np.ndarray:
    """Direction from the mesh origin to a world-space point, normalized."""
    return normalize(np.asarray(position, dtype=np.float64) - np.asarray(origin, dtype=np.float64))


def align_up_to(direction: np.ndarray) -> Rotation:
    """
    Shortest-arc rotation taking UP_AXIS onto `direction`. A zero direction
    yields the identity; the exactly opposite direction picks an arbitrary
    perpendicular axis for the half turn.
    """
    target = normalize(direction)
    if not np.any(target):
        return Rotation.identity()

    r = float(np.dot(UP_AXIS, target)) + 1.0
    if r < _ANTIPARALLEL_EPSILON:
        # Half turn about any axis perpendicular to UP_AXIS.
        return Rotation.from_quat([1.0, 0.0, 0.0, 0.0])

    axis = np.cross(UP_AXIS, target)
    return Rotation.from_quat([axis[0], axis[1], axis[2], r])


def random_spin(rng: np.random.Generator) -> Rotation:
    """Intrinsic rotation about the local X, then Y, then Z axis by uniform angles in [0, 2pi)."""
    return Rotation.from_euler('XYZ', rng.uniform(0.0, 2.0 * np.pi, size=3))
