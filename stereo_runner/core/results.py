# stereo_runner/core/results.py
# Plain-text output: trajectory, per-frame tracking time, keyframe stats
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import IO, Optional
import numpy as np

DEFAULT_PREFIX = "ORB-stereo-robot"


@dataclass(frozen=True)
class OutputPaths:
    trajectory: Path
    timing: Path
    stats: Path
    native_trajectory: Path
    trajectory_plot: Path
    timing_plot: Path

    @staticmethod
    def in_dir(output_dir: str | Path, prefix: str = DEFAULT_PREFIX) -> "OutputPaths":
        d = Path(output_dir)
        return OutputPaths(
            trajectory=d / f"{prefix}.txt",
            timing=d / f"{prefix}-time.txt",
            stats=d / f"{prefix}-stat.txt",
            native_trajectory=d / f"{prefix}-native.txt",
            trajectory_plot=d / f"{prefix}-trajectory.png",
            timing_plot=d / f"{prefix}-time.png",
        )


def format_trajectory_line(timestamp_s: float, T_wc: np.ndarray) -> str:
    # timestamp r00 r01 r02 t0 r10 r11 r12 t1 r20 r21 r22 t2
    vals = [timestamp_s] + [float(v) for v in T_wc[:3, :4].reshape(-1)]
    return " ".join(f"{v:.9f}" for v in vals)


def format_timing_line(latency_s: float) -> str:
    return f"{latency_s:.6f}"


def format_stats_line(keyframes: int, frames: int) -> str:
    ratio = keyframes / frames if frames else 0.0
    return f"KeyFrame ratio: {keyframes} / {frames} = {ratio:.6f}"


class ResultWriter:
    """
    Owns the trajectory and timing files for one run. Both are opened once,
    truncated, and appended to in frame order; the stats file is written in
    one shot at the end.
    """

    def __init__(self, paths: OutputPaths):
        self.paths = paths
        self._traj: Optional[IO[str]] = None
        self._time: Optional[IO[str]] = None

    def open(self) -> "ResultWriter":
        self.paths.trajectory.parent.mkdir(parents=True, exist_ok=True)
        self._traj = self.paths.trajectory.open("w")
        self._time = self.paths.timing.open("w")
        return self

    def close(self) -> None:
        for f in (self._traj, self._time):
            if f is not None:
                f.close()
        self._traj = self._time = None

    def __enter__(self) -> "ResultWriter":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def write_pose(self, timestamp_s: float, T_wc: np.ndarray) -> None:
        if self._traj is None:
            raise RuntimeError("ResultWriter is not open")
        self._traj.write(format_trajectory_line(timestamp_s, T_wc) + "\n")

    def write_latency(self, latency_s: float) -> None:
        if self._time is None:
            raise RuntimeError("ResultWriter is not open")
        self._time.write(format_timing_line(latency_s) + "\n")

    def write_stats(self, keyframes: int, frames: int) -> None:
        with self.paths.stats.open("w") as f:
            f.write(format_stats_line(keyframes, frames) + "\n")
