'''
-discovers a stereo sequence without running any engine
-checks that left-filename timestamps are non-decreasing
-prints frame count, time span, estimated frame rate
-prints inter-frame dt stats
'''

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

import numpy as np

from stereo_runner.core.sequence import LEFT_DIR, RIGHT_DIR, discover_sequence
from stereo_runner.types import DiscoveryError, TimestampError, assert_non_decreasing
from stereo_runner.util.log_utils import get_logger, setup_logging

logger = get_logger(__name__)


def summarize_dts(name: str, dts_s: List[float]) -> None:
    if not dts_s:
        print(f"{name}: no dt samples")
        return
    arr_s = np.asarray(dts_s, dtype=np.float64)
    print(
        f"{name}: n={len(arr_s)}  "
        f"mean={arr_s.mean():.6f}s  std={arr_s.std():.6f}s  "
        f"min={arr_s.min():.6f}s  p50={np.percentile(arr_s, 50):.6f}s  "
        f"p95={np.percentile(arr_s, 95):.6f}s  max={arr_s.max():.6f}s"
    )


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("sequence", type=Path, help="Sequence root containing the left/right image dirs")
    ap.add_argument("--left-dir", default=LEFT_DIR)
    ap.add_argument("--right-dir", default=RIGHT_DIR)
    ap.add_argument("--n", default=None, type=int, help="Only look at the first n frames")
    args = ap.parse_args(argv)
    setup_logging("WARNING")

    try:
        records = discover_sequence(args.sequence, args.left_dir, args.right_dir)
    except (DiscoveryError, TimestampError) as e:
        logger.error("sequence discovery failed: %s", e)
        return 1

    if args.n is not None:
        records = records[:args.n]
    if not records:
        print("No frames found.")
        return 0

    last_t: Optional[float] = None
    dts: List[float] = []
    monotonic = True
    for rec in records:
        try:
            prev = last_t
            last_t = assert_non_decreasing(last_t, rec.timestamp_s, "sanity/left")
        except TimestampError as e:
            logger.warning("%s (frame %d, %s)", e, rec.index, rec.left_name)
            monotonic = False
            last_t = rec.timestamp_s
            continue
        if prev is not None:
            dts.append(rec.timestamp_s - prev)

    t_first = records[0].timestamp_s
    t_last = records[-1].timestamp_s
    span_s = t_last - t_first

    print("\n=== stereo sequence sanity ===")
    print(f"Sequence: {args.sequence}")
    print(f"Frames: {len(records)}")
    print(f"Time span: {span_s:.3f}s  (t_first={t_first:.6f}, t_last={t_last:.6f})")
    if span_s > 0:
        print(f"Approx rate over span: {(len(records) - 1) / span_s:.2f} Hz")

    print()
    summarize_dts("Frame dt", dts)

    uniq = len({r.timestamp_s for r in records})
    repeats = len(records) - uniq
    print()
    print(f"Timestamps: unique={uniq}/{len(records)} (repeats={repeats})")
    if repeats > 0:
        print("WARNING: repeated timestamps found (possible naming issue).")

    if monotonic:
        print("\nOK: timestamps are non-decreasing.")
    else:
        print("\nWARNING: timestamps are not sorted with the filenames.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
