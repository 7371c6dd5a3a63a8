# testfilegen/server.py

import argparse
import hashlib
import logging
import os
import socket
import sys
import threading
from datetime import datetime, timezone
from email.utils import formatdate, parsedate_to_datetime
from urllib.parse import unquote

from . import config
from .generator import setup_logging

"""
Servidor HTTP mínimo para disponibilizar os arquivos gerados para download.

Suporta GET e HEAD, keep-alive, streaming em chunks (os arquivos vão até
10 GiB, então nada é carregado inteiro na memória) e requisições
condicionais com ETag / Last-Modified.
"""

MIME_TYPES = {
  '.html': 'text/html; charset=utf-8',
  '.txt': 'text/plain; charset=utf-8',
  '.bin': 'application/octet-stream',
}

STATUS_TEXT = {
  200: "OK", 304: "Not Modified", 400: "Bad Request", 403: "Forbidden",
  404: "Not Found", 405: "Method Not Allowed", 500: "Internal Server Error"
}

def get_mime_type(filepath):
  _, ext = os.path.splitext(filepath)
  return MIME_TYPES.get(ext.lower(), 'application/octet-stream')

def generate_etag(stat):
  """ETag opaca baseada no tamanho e na data de modificação."""
  raw = f"{stat.st_size}-{stat.st_mtime}"
  return '"' + hashlib.sha1(raw.encode('utf-8')).hexdigest() + '"'

def parse_http_date(date_str):
  try:
    return parsedate_to_datetime(date_str).timestamp()
  except (TypeError, ValueError, IndexError):
    return None

def parse_request(request_str):
  """
  Separa a linha de requisição e os cabeçalhos.

  Returns:
    tuple: (method, path, headers) ou None se a requisição for inválida.
  """
  lines = request_str.split('\r\n')
  parts = lines[0].split()
  if len(parts) != 3:
    return None
  method, path, _ = parts

  headers = {}
  for line in lines[1:]:
    if not line:
      break
    if ':' not in line:
      continue
    key, value = line.split(':', 1)
    headers[key.strip().lower()] = value.strip()
  return method, path, headers

def resolve_path(root, url_path):
  """
  Converte o caminho da URL em um arquivo dentro de `root`.

  Returns:
    str: caminho absoluto, ou None se ele escapar do diretório raiz.
  """
  path = unquote(url_path.split('?', 1)[0])
  if path == '/':
    path = '/' + config.INDEX_HTML

  base_dir = os.path.abspath(root)
  filepath = os.path.abspath(os.path.join(base_dir, path.lstrip('/')))
  if os.path.commonpath([base_dir, filepath]) != base_dir:
    return None
  return filepath

def is_not_modified(headers, etag, mtime):
  # If-None-Match tem prioridade sobre If-Modified-Since
  if_none_match = headers.get('if-none-match')
  if if_none_match:
    return if_none_match == etag

  since = headers.get('if-modified-since')
  if since:
    since_ts = parse_http_date(since)
    return since_ts is not None and int(mtime) <= since_ts
  return False

def build_headers(status_code, extra_headers):
  """Linha de status + cabeçalhos HTTP."""
  status_text = STATUS_TEXT.get(status_code, "Unknown Status")
  headers = {
    "Date": datetime.now(timezone.utc).strftime('%a, %d %b %Y %H:%M:%S GMT'),
    "Server": "testfilegen/1.0",
  }
  headers.update(extra_headers)
  headers_str = "".join(f"{k}: {v}\r\n" for k, v in headers.items())
  return f"HTTP/1.1 {status_code} {status_text}\r\n{headers_str}\r\n".encode('utf-8')

class ClientThread(threading.Thread):
  """
  Thread para uma conexão de cliente, com suporte a keep-alive.
  """

  def __init__(self, client_socket, client_address, root):
    super().__init__(daemon=True)
    self.client_socket = client_socket
    self.client_address = client_address
    self.root = root

  def run(self):
    self.client_socket.settimeout(config.KEEP_ALIVE_TIMEOUT)
    try:
      while True:
        request_data = self.client_socket.recv(4096)
        if not request_data:
          break
        keep_alive = self.handle_request(request_data.decode('utf-8', errors='ignore'))
        if not keep_alive:
          break
    except socket.timeout:
      logging.info(f"Conexão com {self.client_address[0]} expirou (timeout).")
    except OSError as e:
      logging.error(f"Erro na conexão com {self.client_address[0]}: {e}")
    finally:
      self.client_socket.close()

  def handle_request(self, request_str):
    """
    Responde a uma requisição.

    Returns:
      bool: True se a conexão deve continuar aberta.
    """
    parsed = parse_request(request_str)
    if parsed is None:
      self.send_error(400)
      return False

    method, path, headers = parsed
    logging.info(f"{self.client_address[0]} {method} {path}")

    if method not in ('GET', 'HEAD'):
      self.send_error(405)
      return False

    filepath = resolve_path(self.root, path)
    if filepath is None:
      self.send_error(403)
      return False
    if not os.path.isfile(filepath):
      self.send_error(404)
      return False

    stat = os.stat(filepath)
    etag = generate_etag(stat)
    last_modified = formatdate(timeval=stat.st_mtime, localtime=False, usegmt=True)

    if is_not_modified(headers, etag, stat.st_mtime):
      self.client_socket.sendall(build_headers(304, {"ETag": etag, "Last-Modified": last_modified}))
      return True

    self.client_socket.sendall(build_headers(200, {
      "Content-Type": get_mime_type(filepath),
      "Content-Length": stat.st_size,
      "Connection": "keep-alive",
      "ETag": etag,
      "Last-Modified": last_modified,
    }))
    if method == 'GET':
      self.stream_file(filepath)
    return True

  def stream_file(self, filepath):
    with open(filepath, 'rb') as f:
      while True:
        chunk = f.read(config.STREAM_CHUNK_BYTES)
        if not chunk:
          break
        self.client_socket.sendall(chunk)

  def send_error(self, status_code):
    body = f"<h1>{status_code} {STATUS_TEXT.get(status_code, 'Error')}</h1>".encode('utf-8')
    headers = build_headers(status_code, {
      "Content-Type": "text/html; charset=utf-8",
      "Content-Length": len(body),
      "Connection": "close",
    })
    self.client_socket.sendall(headers + body)

def create_server_socket(host, port):
  server_socket = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
  server_socket.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
  server_socket.bind((host, port))
  server_socket.listen(config.MAX_CONNECTIONS)
  return server_socket

def serve_forever(server_socket, root):
  """Aceita conexões e cria uma thread por cliente."""
  while True:
    try:
      client_socket, client_address = server_socket.accept()
    except OSError:
      # Socket fechado por quem iniciou o servidor
      if server_socket.fileno() == -1:
        break
      raise
    ClientThread(client_socket, client_address, root).start()

def main(root, host, port):
  try:
    server_socket = create_server_socket(host, port)
  except OSError as e:
    logging.error(f"Erro ao iniciar o servidor: {e}. A porta {port} já está em uso?")
    return 1

  logging.info(f"Servindo {os.path.abspath(root)} em http://{host}:{port}")
  logging.info("Pressione Ctrl+C para encerrar.")
  try:
    serve_forever(server_socket, root)
  except KeyboardInterrupt:
    logging.info("Servidor encerrado pelo usuário.")
  finally:
    server_socket.close()
  return 0

def cli(argv=None):
  parser = argparse.ArgumentParser(description="Servidor HTTP para os arquivos de teste gerados")
  parser.add_argument('--root', default=config.OUTPUT_DIR,
                      help=f"Diretório servido (padrão: {config.OUTPUT_DIR})")
  parser.add_argument('--host', default=config.HOST)
  parser.add_argument('--port', type=int, default=config.PORT,
                      help=f"Porta para o servidor escutar (padrão: {config.PORT})")
  parser.add_argument('--log-file', default=config.LOG_FILE, help="Arquivo de log")
  args = parser.parse_args(argv)

  setup_logging(args.log_file)
  sys.exit(main(args.root, args.host, args.port))

if __name__ == "__main__":
  cli()
