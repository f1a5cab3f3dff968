# stereo_runner/core/pose.py
from __future__ import annotations

from typing import Optional
import numpy as np


def as_pose(T: Optional[np.ndarray]) -> Optional[np.ndarray]:
    """
    Normalize an engine pose: None or an empty array means "not tracked".
    Anything else must reshape to a 4x4 matrix.
    """
    if T is None:
        return None
    T = np.asarray(T, dtype=np.float64)
    if T.size == 0:
        return None
    if T.size != 16:
        raise ValueError(f"expected a 4x4 pose, got shape {T.shape}")
    return T.reshape(4, 4)


def invert_rigid(T_cw: np.ndarray) -> np.ndarray:
    """T_wc from T_cw without a general inverse: R_wc = R_cw^T, t_wc = -R_wc t_cw."""
    R_wc = T_cw[:3, :3].T
    t_wc = -R_wc @ T_cw[:3, 3]

    T_wc = np.eye(4, dtype=np.float64)
    T_wc[:3, :3] = R_wc
    T_wc[:3, 3] = t_wc
    return T_wc


def camera_centers(poses_wc: list[np.ndarray]) -> np.ndarray:
    """(N,3) camera positions in world from a list of T_wc."""
    if not poses_wc:
        return np.zeros((0, 3), dtype=np.float64)
    return np.stack([T[:3, 3] for T in poses_wc]).astype(np.float64)
