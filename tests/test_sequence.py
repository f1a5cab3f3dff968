from pathlib import Path

import pytest

from stereo_runner.core.sequence import clip_window, discover_sequence, list_regular_files, parse_timestamp
from stereo_runner.types import DiscoveryError, PairingError, RunWindowError, TimestampError


def make_lister(channels):
    def lister(path: Path):
        return sorted(channels[path.name])
    return lister


def test_parse_timestamp_divides_by_1e6():
    assert parse_timestamp("1234567") == pytest.approx(1.234567)
    assert parse_timestamp("1234567.png") == pytest.approx(1.234567)
    assert parse_timestamp("1403636579763555584.png") == pytest.approx(1403636579763.555584)


def test_parse_timestamp_rejects_non_numeric():
    with pytest.raises(TimestampError):
        parse_timestamp("left_000001.png")


def test_discover_index_aligned_and_sorted():
    lister = make_lister({
        "image_0": ["000300.png", "000100.png", "000200.png"],
        "image_1": ["000200.png", "000300.png", "000100.png"],
    })
    recs = discover_sequence("/seq", lister=lister)

    assert [r.index for r in recs] == [0, 1, 2]
    assert [r.left_name for r in recs] == ["000100.png", "000200.png", "000300.png"]
    assert [r.right_name for r in recs] == ["000100.png", "000200.png", "000300.png"]
    assert [r.timestamp_s for r in recs] == pytest.approx([0.0001, 0.0002, 0.0003])


def test_discover_mismatched_counts_fail():
    lister = make_lister({
        "image_0": [f"{i}.png" for i in range(5)],
        "image_1": [f"{i}.png" for i in range(4)],
    })
    with pytest.raises(PairingError):
        discover_sequence("/seq", lister=lister)


def test_strict_pairing_checks_names():
    lister = make_lister({"image_0": ["1.png", "2.png"], "image_1": ["1.png", "3.png"]})

    assert len(discover_sequence("/seq", lister=lister)) == 2
    with pytest.raises(PairingError, match="index 1"):
        discover_sequence("/seq", lister=lister, strict_pairing=True)


def test_discover_fails_on_bad_timestamp():
    lister = make_lister({"image_0": ["abc.png"], "image_1": ["abc.png"]})
    with pytest.raises(TimestampError):
        discover_sequence("/seq", lister=lister)


def test_list_regular_files_skips_dirs(tmp_path):
    (tmp_path / "b.png").write_bytes(b"x")
    (tmp_path / "a.png").write_bytes(b"x")
    (tmp_path / "B.png").write_bytes(b"x")
    (tmp_path / "sub").mkdir()
    (tmp_path / "sub" / "c.png").write_bytes(b"x")

    assert list_regular_files(tmp_path) == ["B.png", "a.png", "b.png"]


def test_list_regular_files_errors(tmp_path):
    with pytest.raises(DiscoveryError):
        list_regular_files(tmp_path / "missing")

    f = tmp_path / "file.txt"
    f.write_text("x")
    with pytest.raises(DiscoveryError):
        list_regular_files(f)


def test_discover_missing_root(tmp_path):
    with pytest.raises(DiscoveryError):
        discover_sequence(tmp_path / "nope")


def test_clip_window():
    assert clip_window(10) == (0, 10)
    assert clip_window(10, 2, 5) == (2, 5)
    assert clip_window(10, 3, 100) == (3, 10)

    with pytest.raises(RunWindowError):
        clip_window(10, 5, 5)
    with pytest.raises(RunWindowError):
        clip_window(10, 10)
    with pytest.raises(RunWindowError):
        clip_window(10, -1, 4)
    with pytest.raises(RunWindowError):
        clip_window(0)
