# stereo_runner/frontend/sequence_runner.py
# Single-threaded driver: one frame in, one tracking call, results out
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

import numpy as np

from stereo_runner.core.pose import as_pose, invert_rigid
from stereo_runner.core.results import ResultWriter
from stereo_runner.core.timing import TimingStats, summarize_latencies
from stereo_runner.types import FrameResult, IFrameProvider, IStereoEngine

logger = logging.getLogger(__name__)


@dataclass
class RunSummary:
    frames: int
    tracked: int
    keyframes: int
    timing: TimingStats
    results: List[FrameResult] = field(default_factory=list, repr=False)

    @property
    def keyframe_ratio(self) -> float:
        return self.keyframes / self.frames if self.frames else 0.0

    def poses_wc(self) -> List[np.ndarray]:
        return [r.T_wc for r in self.results if r.T_wc is not None]


class SequenceRunner:
    def __init__(
        self,
        provider: IFrameProvider,
        engine: IStereoEngine,
        writer: ResultWriter,
        clock: Callable[[], float] = time.perf_counter,
    ):
        self.provider = provider
        self.engine = engine
        self.writer = writer
        self._clock = clock
        self.results: List[FrameResult] = []

    def step(self) -> Optional[FrameResult]:
        if not self.provider.has_next():
            return None

        frame = self.provider.next_frame()   # ImageLoadError propagates, run is over

        t1 = self._clock()
        T_cw = self.engine.track_stereo(frame.left, frame.right, frame.timestamp_s)
        t2 = self._clock()
        latency = t2 - t1

        T_cw = as_pose(T_cw)
        T_wc: Optional[np.ndarray] = None
        if T_cw is not None:
            T_wc = invert_rigid(T_cw)
            self.writer.write_pose(frame.timestamp_s, T_wc)
        else:
            logger.debug("frame %d (t=%.6f): no pose", frame.index, frame.timestamp_s)

        self.writer.write_latency(latency)

        res = FrameResult(index=frame.index, timestamp_s=frame.timestamp_s, latency_s=latency, T_wc=T_wc)
        self.results.append(res)
        return res

    def run(self) -> RunSummary:
        """
        Drain the provider, then shut the engine down and collect stats.
        The engine is shut down on the error path too; output written so
        far stays on disk.
        """
        try:
            with self.writer:
                while self.step() is not None:
                    pass
        finally:
            self.engine.shutdown()

        keyframes = int(self.engine.keyframe_count())
        n = len(self.results)
        timing = summarize_latencies([r.latency_s for r in self.results])
        self.writer.write_stats(keyframes, n)

        tracked = sum(1 for r in self.results if r.tracked)
        logger.info("median tracking time: %.6f", timing.median_s)
        logger.info("mean tracking time: %.6f", timing.mean_s)
        logger.info("tracked %d / %d frames, %d keyframes", tracked, n, keyframes)

        return RunSummary(frames=n, tracked=tracked, keyframes=keyframes, timing=timing, results=list(self.results))
