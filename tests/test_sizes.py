# tests/test_sizes.py

import pytest

from testfilegen.sizes import (
  MIB, TargetFile, build_targets, display_name, file_name, human_readable_bytes
)

@pytest.mark.parametrize("size_mb, expected", [
  (1, "testfile_1MiB.bin"),
  (500, "testfile_500MiB.bin"),
  (1024, "testfile_1GiB.bin"),
  (10240, "testfile_10GiB.bin"),
])
def test_file_name(size_mb, expected):
  assert file_name(size_mb) == expected

def test_display_name():
  assert display_name(100) == "100 MiB"
  assert display_name(3072) == "3 GiB"

@pytest.mark.parametrize("n, expected", [
  (0, "0 B"),
  (512, "512 B"),
  (1536, "1.5 KiB"),
  (MIB, "1 MiB"),
  (10 * MIB, "10 MiB"),
  (1024 * MIB, "1 GiB"),
  (int(2.25 * 1024 * MIB), "2.25 GiB"),
])
def test_human_readable_bytes(n, expected):
  assert human_readable_bytes(n) == expected

def test_target_file_completeness(tmp_path):
  """Só é completo quando o tamanho é exatamente o esperado."""
  target = TargetFile(str(tmp_path), 1)
  assert target.actual_bytes() is None
  assert not target.is_complete()

  (tmp_path / target.filename).write_bytes(b"x" * (MIB - 1))
  assert target.actual_bytes() == MIB - 1
  assert not target.is_complete()

  (tmp_path / target.filename).write_bytes(b"x" * MIB)
  assert target.is_complete()
  assert target.tmp_path == target.path + ".tmp"

def test_build_targets_keeps_order(tmp_path):
  targets = build_targets(str(tmp_path), [10, 1, 2048])
  assert [t.filename for t in targets] == [
    "testfile_10MiB.bin", "testfile_1MiB.bin", "testfile_2GiB.bin"
  ]
