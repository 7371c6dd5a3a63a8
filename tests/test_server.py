# tests/test_server.py

import os
import threading
import time

import pytest
import requests

from testfilegen.server import cli, create_server_socket, resolve_path, serve_forever

INDEX_CONTENT = "<html><body>Test Files</body></html>"

@pytest.fixture
def running_server(tmp_path):
  """
  Sobe o servidor em uma thread, servindo um diretório temporário.
  """
  (tmp_path / "index.html").write_text(INDEX_CONTENT)
  (tmp_path / "testfile_1MiB.bin").write_bytes(os.urandom(1024 * 1024))

  # Porta 0: o sistema escolhe uma porta livre
  server_socket = create_server_socket("127.0.0.1", 0)
  port = server_socket.getsockname()[1]
  thread = threading.Thread(target=serve_forever, args=(server_socket, str(tmp_path)), daemon=True)
  thread.start()

  yield f"http://127.0.0.1:{port}", tmp_path

  server_socket.close()

def test_root_serves_index(running_server):
  base, _ = running_server
  response = requests.get(f"{base}/", timeout=5)
  assert response.status_code == 200
  assert response.text == INDEX_CONTENT
  assert response.headers["Content-Type"].startswith("text/html")

def test_binary_file_is_streamed_completely(running_server):
  base, root = running_server
  response = requests.get(f"{base}/testfile_1MiB.bin", timeout=5)
  assert response.status_code == 200
  assert response.headers["Content-Type"] == "application/octet-stream"
  assert response.content == (root / "testfile_1MiB.bin").read_bytes()

def test_head_returns_length_without_body(running_server):
  base, _ = running_server
  response = requests.head(f"{base}/testfile_1MiB.bin", timeout=5)
  assert response.status_code == 200
  assert response.headers["Content-Length"] == str(1024 * 1024)
  assert response.content == b""

def test_conditional_get_with_etag(running_server):
  base, _ = running_server
  etag = requests.get(f"{base}/index.html", timeout=5).headers["ETag"]

  response = requests.get(f"{base}/index.html", headers={"If-None-Match": etag}, timeout=5)
  assert response.status_code == 304
  assert response.text == ""

def test_conditional_get_with_last_modified(running_server):
  base, _ = running_server
  last_modified = requests.get(f"{base}/index.html", timeout=5).headers["Last-Modified"]

  response = requests.get(f"{base}/index.html", headers={"If-Modified-Since": last_modified}, timeout=5)
  assert response.status_code == 304

def test_modified_file_returns_200(running_server):
  base, root = running_server
  original_etag = requests.get(f"{base}/index.html", timeout=5).headers["ETag"]

  time.sleep(0.05)
  (root / "index.html").write_text("<html><body>Atualizado</body></html>")
  os.utime(root / "index.html", (time.time() + 10, time.time() + 10))

  response = requests.get(f"{base}/index.html", headers={"If-None-Match": original_etag}, timeout=5)
  assert response.status_code == 200
  assert "Atualizado" in response.text
  assert response.headers["ETag"] != original_etag

def test_missing_file_returns_404(running_server):
  base, _ = running_server
  assert requests.get(f"{base}/nope.bin", timeout=5).status_code == 404

def test_post_not_allowed(running_server):
  base, _ = running_server
  assert requests.post(f"{base}/index.html", timeout=5).status_code == 405

def test_resolve_path_blocks_traversal(tmp_path):
  root = str(tmp_path)
  assert resolve_path(root, "/") == os.path.join(os.path.abspath(root), "index.html")
  assert resolve_path(root, "/index.txt?x=1") == os.path.join(os.path.abspath(root), "index.txt")
  assert resolve_path(root, "/../etc/passwd") is None

def test_percent_encoded_path_is_decoded(running_server):
  base, root = running_server
  (root / "testfile 1.bin").write_bytes(b"abc")

  response = requests.get(f"{base}/testfile%201.bin", timeout=5)
  assert response.status_code == 200
  assert response.content == b"abc"

def test_resolve_path_decodes_before_traversal_check(tmp_path):
  root = str(tmp_path)
  assert resolve_path(root, "/testfile%201.bin") == os.path.join(os.path.abspath(root), "testfile 1.bin")
  assert resolve_path(root, "/%2e%2e/etc/passwd") is None

def test_cli_exits_with_error_when_port_is_busy(tmp_path):
  busy = create_server_socket("127.0.0.1", 0)
  port = busy.getsockname()[1]
  try:
    with pytest.raises(SystemExit) as excinfo:
      cli([
        "--root", str(tmp_path), "--host", "127.0.0.1", "--port", str(port),
        "--log-file", str(tmp_path / "logs" / "server.log"),
      ])
    assert excinfo.value.code == 1
  finally:
    busy.close()
