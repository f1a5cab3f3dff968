from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, List, Optional

import numpy as np
import cv2

from stereo_runner.core.sequence import LEFT_DIR, RIGHT_DIR, clip_window, discover_sequence
from stereo_runner.types import FrameRecord, IFrameProvider, ImageLoadError, StereoFrame

logger = logging.getLogger(__name__)

ImageReader = Callable[[Path], np.ndarray]


def read_unchanged(path: Path) -> np.ndarray:
    img = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
    if img is None or img.size == 0:
        raise ImageLoadError(f"Failed to load image at: {path}")
    return img


class StereoSequenceProvider(IFrameProvider):
    """
    Walks frame records [begin, end) in index order, decoding both
    channels on demand. A frame that fails to decode raises ImageLoadError.
    """

    def __init__(
        self,
        seq_root: str | Path,
        records: List[FrameRecord],
        begin: int = 0,
        end: Optional[int] = None,
        left_dir: str = LEFT_DIR,
        right_dir: str = RIGHT_DIR,
        image_reader: ImageReader = read_unchanged,
    ):
        self.seq_root = Path(seq_root)
        self.records = records
        self.left_dir = left_dir
        self.right_dir = right_dir
        self._read = image_reader

        self.begin, self.end = clip_window(len(records), begin, end)
        self._i = self.begin

    @classmethod
    def from_directory(
        cls,
        seq_root: str | Path,
        begin: int = 0,
        end: Optional[int] = None,
        left_dir: str = LEFT_DIR,
        right_dir: str = RIGHT_DIR,
        strict_pairing: bool = False,
        image_reader: ImageReader = read_unchanged,
    ) -> "StereoSequenceProvider":
        records = discover_sequence(seq_root, left_dir, right_dir, strict_pairing=strict_pairing)
        return cls(seq_root, records, begin, end, left_dir, right_dir, image_reader)

    def __len__(self) -> int:
        """Frames in the run window."""
        return self.end - self.begin

    @property
    def sequence_length(self) -> int:
        return len(self.records)

    def has_next(self) -> bool:
        return self._i < self.end

    def next_frame(self) -> StereoFrame:
        if not self.has_next():
            raise StopIteration

        rec = self.records[self._i]
        self._i += 1

        left = self._read(self.seq_root / self.left_dir / rec.left_name)
        right = self._read(self.seq_root / self.right_dir / rec.right_name)
        return StereoFrame(index=rec.index, timestamp_s=rec.timestamp_s, left=left, right=right)
