# tests/test_index.py

from testfilegen.index import (
  collect_index_entries, render_html, render_txt, write_index_files
)
from testfilegen.sizes import MIB, build_targets

def make_targets(tmp_path):
  targets = build_targets(str(tmp_path), [1, 2, 3])
  (tmp_path / "testfile_1MiB.bin").write_bytes(b"\0" * MIB)
  (tmp_path / "testfile_2MiB.bin").write_bytes(b"\0" * 10)  # incompleto
  (tmp_path / "testfile_3MiB.bin").write_bytes(b"\0" * 3 * MIB)
  return targets

def test_only_complete_files_are_listed(tmp_path):
  entries = collect_index_entries(make_targets(tmp_path))
  assert [e["filename"] for e in entries] == ["testfile_1MiB.bin", "testfile_3MiB.bin"]
  assert entries[1]["display_name"] == "3 MiB"
  assert entries[1]["size_formatted"] == "3 MiB"

def test_render_txt():
  entries = [{"filename": "a.bin"}, {"filename": "b.bin"}]
  assert render_txt(entries) == "a.bin\nb.bin\n"

def test_render_html_escapes_and_totals():
  entries = [{
    "filename": "x<y>.bin", "display_name": "1 MiB",
    "size": MIB, "size_formatted": "1 MiB",
  }]
  html = render_html(entries)
  assert "<title>Test Files</title>" in html
  assert "<p>Total: 1 files (1 MiB)</p>" in html
  assert 'href="x&lt;y&gt;.bin"' in html
  assert '<a href="index.txt">index.txt</a>' in html

def test_write_index_files(tmp_path):
  entries = write_index_files(str(tmp_path), make_targets(tmp_path))
  assert len(entries) == 2
  assert (tmp_path / "index.txt").read_text() == "testfile_1MiB.bin\ntestfile_3MiB.bin\n"
  assert "Total: 2 files (4 MiB)" in (tmp_path / "index.html").read_text()
