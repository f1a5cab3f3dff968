# stereo_runner/core/plotting.py
from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

import matplotlib
matplotlib.use("Agg")  # runs headless, figures only go to disk
import matplotlib.pyplot as plt
import numpy as np

logger = logging.getLogger(__name__)


def plot_trajectory(positions_w: np.ndarray, out_path: str | Path, title: str = "Camera trajectory") -> Path:
    """positions_w: (N,3) camera centers in world."""
    out_path = Path(out_path)
    p = np.asarray(positions_w, dtype=np.float64).reshape(-1, 3)

    fig = plt.figure()
    ax = fig.add_subplot(111, projection="3d")
    if len(p):
        ax.plot(p[:, 0], p[:, 1], p[:, 2], label="estimate", color="tab:blue")
        ax.scatter(*p[0], marker="o", color="tab:blue")
        ax.scatter(*p[-1], marker="x", color="tab:blue")

        # equal axis scaling
        mins, maxs = p.min(axis=0), p.max(axis=0)
        mid = (mins + maxs) / 2
        r = max((maxs - mins).max() / 2, 1e-3)
        ax.set_xlim(mid[0]-r, mid[0]+r)
        ax.set_ylim(mid[1]-r, mid[1]+r)
        ax.set_zlim(mid[2]-r, mid[2]+r)

    ax.set_xlabel("x (m)")
    ax.set_ylabel("y (m)")
    ax.set_zlabel("z (m)")
    ax.set_title(f"{title} ({len(p)} poses)")
    if len(p):
        ax.legend()

    fig.savefig(out_path, dpi=200, bbox_inches="tight")
    plt.close(fig)
    logger.info("Saved trajectory plot to %s", out_path)
    return out_path


def plot_latencies(frame_indices: Sequence[int], latencies_s: Sequence[float], out_path: str | Path) -> Path:
    out_path = Path(out_path)
    lat_ms = np.asarray(latencies_s, dtype=np.float64) * 1e3

    fig = plt.figure()
    ax = fig.add_subplot(111)
    ax.plot(list(frame_indices), lat_ms, color="tab:orange")
    if lat_ms.size:
        ax.axhline(float(np.median(lat_ms)), linestyle="--", color="gray", label="median")
        ax.legend()
    ax.set_title("Tracking time per frame")
    ax.set_xlabel("frame index")
    ax.set_ylabel("tracking time (ms)")

    fig.savefig(out_path, dpi=200, bbox_inches="tight")
    plt.close(fig)
    logger.info("Saved tracking time plot to %s", out_path)
    return out_path
