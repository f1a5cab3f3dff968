# stereo_runner/core/sequence.py
# Lists the two channel dirs, pairs them by index and derives timestamps
from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from stereo_runner.types import DiscoveryError, FrameRecord, PairingError, RunWindowError, TimestampError

logger = logging.getLogger(__name__)

LEFT_DIR = "image_0"
RIGHT_DIR = "image_1"
TIMESTAMP_DIVISOR = 1e6   # filename stamps are microseconds

# leading decimal number, optional sign/fraction/exponent ("1403636579.5e3abc" -> 1403636579.5e3)
_LEADING_NUMBER = re.compile(r"^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")

Lister = Callable[[Path], List[str]]


def list_regular_files(directory: str | Path) -> List[str]:
    """
    Names of the regular files directly inside `directory`, sorted by name.
    Subdirectories and other non-regular entries are skipped, no recursion.
    """
    d = Path(directory)
    if not d.exists():
        raise DiscoveryError(f"Directory does not exist: {d}")
    if not d.is_dir():
        raise DiscoveryError(f"Not a directory: {d}")

    try:
        with os.scandir(d) as it:
            names = [e.name for e in it if e.is_file(follow_symlinks=False)]
    except OSError as e:
        raise DiscoveryError(f"Can't open {d}: {e}") from e

    # plain str sort == code-point order, same as byte order for ASCII names
    return sorted(names)


def parse_timestamp(filename: str, divisor: float = TIMESTAMP_DIVISOR) -> float:
    m = _LEADING_NUMBER.match(filename)
    if m is None:
        raise TimestampError(f"No leading numeric timestamp in filename: {filename!r}")
    return float(m.group(0)) / divisor


def discover_sequence(
    seq_root: str | Path,
    left_dir: str = LEFT_DIR,
    right_dir: str = RIGHT_DIR,
    lister: Lister = list_regular_files,
    strict_pairing: bool = False,
) -> List[FrameRecord]:
    if not str(seq_root):
        raise DiscoveryError("Sequence path is empty")
    root = Path(seq_root)

    left = lister(root / left_dir)
    right = lister(root / right_dir)

    if len(left) != len(right):
        raise PairingError(
            f"Image number not equal: {len(left)} left ({left_dir}) vs {len(right)} right ({right_dir})"
        )

    if strict_pairing:
        for i, (ln, rn) in enumerate(zip(left, right)):
            if ln != rn:
                raise PairingError(f"Filename mismatch at index {i}: {ln!r} vs {rn!r}")

    records = [
        FrameRecord(index=i, left_name=ln, right_name=rn, timestamp_s=parse_timestamp(ln))
        for i, (ln, rn) in enumerate(zip(left, right))
    ]
    logger.debug("discovered %d stereo pairs under %s", len(records), root)
    return records


def clip_window(n_frames: int, begin: int = 0, end: Optional[int] = None) -> Tuple[int, int]:
    """
    Resolve [begin, end) against a sequence of n_frames.
    end=None means the whole sequence; end past the sequence is clipped.
    """
    if end is None or end > n_frames:
        end = n_frames
    if begin < 0:
        raise RunWindowError(f"begin must be >= 0 (got {begin})")
    if end <= begin:
        raise RunWindowError(f"empty run window [{begin}, {end}) for a sequence of {n_frames} frames")
    return begin, end
