# tests/test_progress.py

import json

from testfilegen.progress import ProgressMarker

def test_load_without_marker(tmp_path):
  marker = ProgressMarker(str(tmp_path / ".generation_progress"))
  assert not marker.exists()
  assert marker.load() == set()

def test_mark_completed_accumulates(tmp_path):
  path = tmp_path / ".generation_progress"
  marker = ProgressMarker(str(path))
  marker.mark_completed(10)
  marker.mark_completed(1)
  marker.mark_completed(10)

  assert marker.load() == {1, 10}
  assert json.loads(path.read_text()) == [1, 10]

def test_corrupt_marker_is_ignored(tmp_path):
  path = tmp_path / ".generation_progress"
  path.write_text("{not json")
  assert ProgressMarker(str(path)).load() == set()

def test_clear(tmp_path):
  marker = ProgressMarker(str(tmp_path / ".generation_progress"))
  marker.mark_completed(1)
  marker.clear()
  assert not marker.exists()
  # Limpar de novo não falha
  marker.clear()
