# testfilegen/strategies.py

import logging
import os
import shutil
import subprocess
import time

from . import config
from .sizes import MIB

"""
Estratégias de escrita dos arquivos incompressíveis.

- openssl: pipeline `dd if=/dev/zero | openssl enc -aes-256-ctr` (rápido)
- random: os.urandom em chunks (mais lento, mas funciona em qualquer lugar)

As duas escrevem primeiro em `<arquivo>.tmp` e só renomeiam para o nome final
depois do fsync. Um `.tmp` que sobrou no disco indica uma execução interrompida.
"""

class StrategyError(Exception):
  """Falha ao gerar um arquivo com uma estratégia."""

class StrategyTimeout(StrategyError):
  """O pipeline excedeu o tempo máximo permitido."""

def detect_best_method():
  """
  Detecta o melhor método disponível no host.

  Returns:
    str: "openssl" se openssl, dd e /dev/zero existem (fora do Windows),
      senão "random".
  """
  if os.name != "nt":
    has_openssl = shutil.which("openssl") is not None
    has_dd = shutil.which("dd") is not None
    has_dev_zero = os.path.exists("/dev/zero")

    if has_openssl and has_dd and has_dev_zero:
      logging.info("Detectado: método OpenSSL + dd disponível (mais rápido)")
      return "openssl"

  logging.info("Usando: método os.urandom (mais lento, porém compatível)")
  return "random"

def _discard(*paths):
  """Remove arquivos parciais, ignorando os que não existem."""
  for path in paths:
    try:
      os.remove(path)
    except FileNotFoundError:
      pass

def _fsync_path(path):
  fd = os.open(path, os.O_RDONLY)
  try:
    os.fsync(fd)
  finally:
    os.close(fd)

class OpenSSLWriter:
  """
  Gera bytes pseudoaleatórios cifrando zeros com AES-256-CTR.

  Chave e IV são novos a cada arquivo, então o conteúdo é incompressível e
  diferente entre execuções.
  """
  name = "openssl"

  def __init__(self, timeout=config.OPENSSL_TIMEOUT_SECONDS):
    self.timeout = timeout

  def probe(self):
    """Confere se é possível ler de /dev/zero através do dd."""
    try:
      result = subprocess.run(
        ["dd", "if=/dev/zero", "bs=1024", "count=1"],
        stdout=subprocess.PIPE, stderr=subprocess.DEVNULL, timeout=10
      )
    except (OSError, subprocess.SubprocessError) as e:
      raise StrategyError(f"não foi possível executar o dd: {e}") from e

    got = len(result.stdout)
    logging.info(f"Testando acesso a /dev/zero: {got} bytes (esperado 1024)")
    if result.returncode != 0 or got != 1024:
      raise StrategyError("não foi possível ler corretamente de /dev/zero")

  def write(self, target):
    self.probe()

    key_hex = os.urandom(32).hex()  # chave de 256 bits
    iv_hex = os.urandom(16).hex()   # IV de 128 bits

    dd_cmd = ["dd", "if=/dev/zero", f"bs={MIB}", f"count={target.size_mb}"]
    openssl_cmd = [
      "openssl", "enc", "-aes-256-ctr", "-K", key_hex, "-iv", iv_hex,
      "-nosalt", "-out", target.tmp_path
    ]
    logging.info(f"Executando: dd if=/dev/zero bs={MIB} count={target.size_mb} | openssl enc -aes-256-ctr")

    try:
      dd = subprocess.Popen(dd_cmd, stdout=subprocess.PIPE, stderr=subprocess.DEVNULL)
    except OSError as e:
      raise StrategyError(f"falha ao iniciar o dd: {e}") from e

    try:
      ssl = subprocess.Popen(openssl_cmd, stdin=dd.stdout, stderr=subprocess.PIPE)
    except OSError as e:
      dd.kill()
      dd.wait()
      raise StrategyError(f"falha ao iniciar o openssl: {e}") from e
    finally:
      # O openssl é o único leitor do pipe
      dd.stdout.close()

    try:
      _, ssl_err = ssl.communicate(timeout=self.timeout)
    except subprocess.TimeoutExpired:
      ssl.kill()
      dd.kill()
      ssl.communicate()
      dd.wait()
      _discard(target.tmp_path, target.path)
      raise StrategyTimeout(f"openssl excedeu {self.timeout}s para {target.filename}")
    dd_ret = dd.wait()

    for line in ssl_err.decode("utf-8", errors="replace").splitlines():
      logging.info(f"OpenSSL: {line}")

    if dd_ret != 0 or ssl.returncode != 0:
      _discard(target.tmp_path)
      raise StrategyError(f"pipeline falhou (dd={dd_ret}, openssl={ssl.returncode})")

    try:
      _fsync_path(target.tmp_path)
      os.replace(target.tmp_path, target.path)
    except OSError as e:
      _discard(target.tmp_path)
      raise StrategyError(f"falha ao finalizar {target.filename}: {e}") from e

class RandomWriter:
  """Escreve os.urandom em chunks, com log de progresso periódico."""
  name = "random"

  def __init__(self, chunk_size=config.CHUNK_SIZE_BYTES, progress_step=config.PROGRESS_STEP_BYTES):
    self.chunk_size = chunk_size
    self.progress_step = progress_step

  def write(self, target):
    total = target.expected_bytes
    written = 0
    next_report = self.progress_step
    start = time.time()
    logging.info(f"Escrevendo {target.size_mb} MiB em {target.path} com os.urandom (pode ser lento)...")

    try:
      with open(target.tmp_path, "wb") as f:
        while written < total:
          to_write = min(self.chunk_size, total - written)
          f.write(os.urandom(to_write))
          written += to_write

          if written >= next_report:
            elapsed = max(time.time() - start, 1e-6)
            rate = written / MIB / elapsed
            logging.info(f"  -> {written // MIB} MiB escritos ({rate:.2f} MiB/s)")
            next_report += self.progress_step

        f.flush()
        os.fsync(f.fileno())
      os.replace(target.tmp_path, target.path)
    except OSError as e:
      _discard(target.tmp_path)
      raise StrategyError(f"falha de escrita em {target.path}: {e}") from e

WRITERS = {
  "openssl": OpenSSLWriter,
  "random": RandomWriter,
}

def get_writer(method):
  """Instancia o writer de um método ("openssl" ou "random")."""
  try:
    return WRITERS[method]()
  except KeyError:
    raise ValueError(f"Método desconhecido: {method}") from None
