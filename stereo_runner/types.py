from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol
import numpy as np


# -----------------------------
# Frame records and loaded frames
# -----------------------------

@dataclass(frozen=True)
class FrameRecord:
    index: int
    left_name: str     # filename inside the left channel dir
    right_name: str    # filename inside the right channel dir
    timestamp_s: float


@dataclass(frozen=True)
class StereoFrame:
    index: int
    timestamp_s: float
    left: np.ndarray   # HxW or HxWxC, as decoded (IMREAD_UNCHANGED)
    right: np.ndarray


@dataclass(frozen=True)
class FrameResult:
    index: int
    timestamp_s: float
    latency_s: float
    T_wc: Optional[np.ndarray]  # (4,4) camera->world, None on tracking miss

    @property
    def tracked(self) -> bool:
        return self.T_wc is not None


# -----------------------------
# Provider / engine interfaces
# -----------------------------

class IFrameProvider(Protocol):
    """Yields StereoFrame in index order."""
    def has_next(self) -> bool: ...
    def next_frame(self) -> StereoFrame: ...


class IStereoEngine(Protocol):
    """
    External visual-SLAM engine, always driven in stereo mode.

    track_stereo returns the world->camera pose T_cw (4x4), or None / an
    empty array when the frame could not be tracked. Engines may also
    offer save_trajectory(path) for their own trajectory export.
    """
    def initialize(self, vocabulary_path: str, settings_path: str, use_viewer: bool) -> None: ...
    def track_stereo(self, left: np.ndarray, right: np.ndarray, timestamp_s: float) -> Optional[np.ndarray]: ...
    def shutdown(self) -> None: ...
    def keyframe_count(self) -> int: ...


# -----------------------------
# Errors
# -----------------------------

class DiscoveryError(RuntimeError):
    pass


class PairingError(DiscoveryError):
    pass


class TimestampError(RuntimeError):
    pass


class ImageLoadError(FileNotFoundError):
    pass


class EngineLoadError(RuntimeError):
    pass


class RunWindowError(ValueError):
    pass


# -----------------------------
# Utility: strict timestamp check
# -----------------------------

def assert_non_decreasing(prev_t: Optional[float], new_t: float, name: str) -> float:
    if prev_t is not None and new_t < prev_t:
        raise TimestampError(f"{name}: timestamps decreased ({new_t} < {prev_t})")
    return new_t
