'''
Runs an external stereo SLAM engine over an image sequence:
-discovers <seq>/image_0 and <seq>/image_1, timestamps from left filenames
-tracks frames [begin, end) one at a time
-writes trajectory, per-frame tracking time and keyframe ratio to OUTPUT_DIR
'''
from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from stereo_runner.core.pose import camera_centers
from stereo_runner.core.results import DEFAULT_PREFIX, OutputPaths, ResultWriter
from stereo_runner.core.sequence import LEFT_DIR, RIGHT_DIR
from stereo_runner.engines.orbslam3_engine import DEFAULT_ENGINE, load_engine
from stereo_runner.frontend.sequence_runner import RunSummary, SequenceRunner
from stereo_runner.providers.stereo_sequence_provider import StereoSequenceProvider
from stereo_runner.types import (
    DiscoveryError,
    EngineLoadError,
    ImageLoadError,
    RunWindowError,
    TimestampError,
)
from stereo_runner.util.log_utils import get_logger, setup_logging

logger = get_logger(__name__)


@dataclass
class RunnerConfig:
    vocabulary: Path
    settings: Path
    sequence: Path
    output_dir: Path
    begin: int = 0
    end: Optional[int] = None
    left_dir: str = LEFT_DIR
    right_dir: str = RIGHT_DIR
    prefix: str = DEFAULT_PREFIX
    engine: str = DEFAULT_ENGINE
    viewer: bool = False
    strict_pairing: bool = False
    save_native_trajectory: bool = False
    plot: bool = False


class _ArgumentParser(argparse.ArgumentParser):
    # usage errors exit with 1, not argparse's 2
    def error(self, message: str):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    ap = _ArgumentParser(description="Feed a stereo image sequence into a SLAM engine and record poses + timing")
    ap.add_argument("vocabulary", type=Path, help="Path to the ORB vocabulary file")
    ap.add_argument("settings", type=Path, help="Path to the engine settings (camera) YAML")
    ap.add_argument("sequence", type=Path, help="Sequence root containing the left/right image dirs")
    ap.add_argument("output_dir", type=Path, help="Directory for trajectory/time/stat files")
    ap.add_argument("--begin", type=int, default=0, help="First frame index (inclusive)")
    ap.add_argument("--end", type=int, default=None, help="Last frame index (exclusive), clipped to sequence length")
    ap.add_argument("--left-dir", default=LEFT_DIR, help="Left channel subdirectory")
    ap.add_argument("--right-dir", default=RIGHT_DIR, help="Right channel subdirectory")
    ap.add_argument("--prefix", default=DEFAULT_PREFIX, help="Output filename prefix")
    ap.add_argument("--engine", default=DEFAULT_ENGINE, help="Engine class as 'module:attr'")
    ap.add_argument("--viewer", action="store_true", help="Enable the engine's viewer")
    ap.add_argument("--strict-pairing", action="store_true",
                    help="Require identical left/right filenames at every index")
    ap.add_argument("--save-native-trajectory", action="store_true",
                    help="Also ask the engine to export its own trajectory")
    ap.add_argument("--plot", action="store_true", help="Save trajectory and tracking-time plots")
    ap.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    ap.add_argument("--log-file", type=Path, default=None)
    return ap


def config_from_args(args: argparse.Namespace) -> RunnerConfig:
    return RunnerConfig(
        vocabulary=args.vocabulary,
        settings=args.settings,
        sequence=args.sequence,
        output_dir=args.output_dir,
        begin=args.begin,
        end=args.end,
        left_dir=args.left_dir,
        right_dir=args.right_dir,
        prefix=args.prefix,
        engine=args.engine,
        viewer=args.viewer,
        strict_pairing=args.strict_pairing,
        save_native_trajectory=args.save_native_trajectory,
        plot=args.plot,
    )


def run(cfg: RunnerConfig) -> RunSummary:
    provider = StereoSequenceProvider.from_directory(
        cfg.sequence,
        begin=cfg.begin,
        end=cfg.end,
        left_dir=cfg.left_dir,
        right_dir=cfg.right_dir,
        strict_pairing=cfg.strict_pairing,
    )
    paths = OutputPaths.in_dir(cfg.output_dir, cfg.prefix)
    cfg.output_dir.mkdir(parents=True, exist_ok=True)

    logger.info("input seq path: %s", cfg.sequence)
    logger.info("output dir: %s", cfg.output_dir)
    logger.info("Images in the sequence: %d", provider.sequence_length)
    logger.info("test sequence: %d --> %d", provider.begin, provider.end)

    engine = load_engine(cfg.engine)
    engine.initialize(str(cfg.vocabulary), str(cfg.settings), cfg.viewer)

    runner = SequenceRunner(provider, engine, ResultWriter(paths))
    summary = runner.run()

    if cfg.save_native_trajectory:
        save = getattr(engine, "save_trajectory", None)
        if callable(save):
            save(paths.native_trajectory)
            logger.info("Saved native trajectory to %s", paths.native_trajectory)
        else:
            logger.warning("engine %s has no save_trajectory(), skipping native export", cfg.engine)

    if cfg.plot:
        from stereo_runner.core.plotting import plot_latencies, plot_trajectory
        plot_trajectory(camera_centers(summary.poses_wc()), paths.trajectory_plot)
        plot_latencies([r.index for r in summary.results], [r.latency_s for r in summary.results], paths.timing_plot)

    logger.info("KeyFrame ratio: %d / %d = %.6f", summary.keyframes, summary.frames, summary.keyframe_ratio)
    return summary


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level, args.log_file)
    cfg = config_from_args(args)

    try:
        run(cfg)
    except (DiscoveryError, TimestampError) as e:
        logger.error("sequence discovery failed: %s", e)
        return 1
    except ImageLoadError as e:
        logger.error("%s", e)
        return 1
    except EngineLoadError as e:
        logger.error("engine load failed: %s", e)
        return 1
    except RunWindowError as e:
        logger.error("invalid run window: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
