"""
Engine adapters.

OrbSlam3StereoEngine wraps the `orbslam3` pybind module (ORB-SLAM3 Python
bindings, built and installed separately from this package). Any other
engine can be plugged in by dotted path, e.g. `mypkg.engines:MyEngine`,
as long as it implements IStereoEngine.
"""
from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Any, Optional

import numpy as np

from stereo_runner.types import EngineLoadError, IStereoEngine

logger = logging.getLogger(__name__)

DEFAULT_ENGINE = "stereo_runner.engines.orbslam3_engine:OrbSlam3StereoEngine"


class OrbSlam3StereoEngine(IStereoEngine):
    def __init__(self):
        self._system: Any = None

    def initialize(self, vocabulary_path: str, settings_path: str, use_viewer: bool) -> None:
        try:
            orbslam3 = importlib.import_module("orbslam3")
        except ImportError as e:
            raise EngineLoadError(
                "ORB-SLAM3 Python bindings (module 'orbslam3') are not installed"
            ) from e

        self._system = orbslam3.system(str(vocabulary_path), str(settings_path), orbslam3.Sensor.STEREO)
        self._system.set_use_viewer(bool(use_viewer))
        self._system.initialize()
        logger.info("ORB-SLAM3 initialized (stereo, viewer=%s)", use_viewer)

    def track_stereo(self, left: np.ndarray, right: np.ndarray, timestamp_s: float) -> Optional[np.ndarray]:
        T_cw = self._system.process_image_stereo(left, right, float(timestamp_s))
        if T_cw is None:
            return None
        T_cw = np.asarray(T_cw)
        return T_cw if T_cw.size else None

    def shutdown(self) -> None:
        if self._system is not None:
            self._system.shutdown()

    def keyframe_count(self) -> int:
        return len(self._system.get_keyframe_points())

    def save_trajectory(self, path: str | Path) -> None:
        # rows of (timestamp, 3x4 T_wc), same layout as the runner's own trajectory
        points = self._system.get_trajectory_points()
        with Path(path).open("w") as f:
            for t, pose in points:
                P = np.asarray(pose, dtype=np.float64).reshape(-1)[:12]
                f.write(" ".join(f"{v:.9f}" for v in [float(t), *P]) + "\n")


def load_engine(spec: str = DEFAULT_ENGINE) -> IStereoEngine:
    """Instantiate an engine from 'package.module:ClassName'."""
    module_name, sep, attr = spec.partition(":")
    if not sep or not module_name or not attr:
        raise EngineLoadError(f"Engine must be given as 'module:attr', got {spec!r}")

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise EngineLoadError(f"Cannot import engine module {module_name!r}: {e}") from e

    factory = getattr(module, attr, None)
    if factory is None:
        raise EngineLoadError(f"Module {module_name!r} has no attribute {attr!r}")

    engine = factory()
    for name in ("initialize", "track_stereo", "shutdown", "keyframe_count"):
        if not callable(getattr(engine, name, None)):
            raise EngineLoadError(f"{spec} does not implement {name}()")
    return engine
