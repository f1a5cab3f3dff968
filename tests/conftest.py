from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Optional

import cv2
import numpy as np
import pytest


def pose_cw(yaw: float, t: Iterable[float]) -> np.ndarray:
    c, s = np.cos(yaw), np.sin(yaw)
    T = np.eye(4, dtype=np.float64)
    T[:3, :3] = np.array([[c, -s, 0.0], [s, c, 0.0], [0.0, 0.0, 1.0]])
    T[:3, 3] = np.asarray(list(t), dtype=np.float64)
    return T


class FakeEngine:
    """Records calls; returns a pose per frame unless the call index is in `misses`."""

    def __init__(self, misses: Iterable[int] = (), keyframes: int = 2, empty_miss: bool = False):
        self.misses = set(misses)
        self.keyframes = keyframes
        self.empty_miss = empty_miss
        self.calls: List[float] = []
        self.shapes: List[tuple] = []
        self.init_args: Optional[tuple] = None
        self.shutdown_calls = 0

    def initialize(self, vocabulary_path: str, settings_path: str, use_viewer: bool) -> None:
        self.init_args = (vocabulary_path, settings_path, use_viewer)

    def track_stereo(self, left, right, timestamp_s):
        k = len(self.calls)
        self.calls.append(timestamp_s)
        self.shapes.append((left.shape, right.shape))
        if k in self.misses:
            return np.empty((0, 0)) if self.empty_miss else None
        return pose_cw(0.1 * k, [k, 0.0, 0.5])

    def shutdown(self) -> None:
        self.shutdown_calls += 1

    def keyframe_count(self) -> int:
        return self.keyframes


class ExportingEngine(FakeEngine):
    def save_trajectory(self, path) -> None:
        Path(path).write_text("native\n")


def write_sequence(root: Path, names: List[str], right_names: Optional[List[str]] = None,
                   left_dir: str = "image_0", right_dir: str = "image_1") -> Path:
    (root / left_dir).mkdir(parents=True, exist_ok=True)
    (root / right_dir).mkdir(parents=True, exist_ok=True)
    img = np.full((8, 12), 127, dtype=np.uint8)
    for n in names:
        assert cv2.imwrite(str(root / left_dir / n), img)
    for n in (right_names if right_names is not None else names):
        assert cv2.imwrite(str(root / right_dir / n), img)
    return root


def stamp_names(n: int, start_us: int = 1_000_000, step_us: int = 50_000) -> List[str]:
    return [f"{start_us + i * step_us}.png" for i in range(n)]


@pytest.fixture
def fake_engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def sequence3(tmp_path: Path) -> Path:
    return write_sequence(tmp_path / "seq", stamp_names(3))
