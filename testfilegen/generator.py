# testfilegen/generator.py

import argparse
import logging
import os
import shutil
import sys
import time

from . import config
from .index import write_index_files
from .metrics import GenerationMetrics
from .progress import ProgressMarker
from .sizes import build_targets, human_readable_bytes, short_name
from .strategies import (
  StrategyError, StrategyTimeout, WRITERS, detect_best_method, get_writer
)

"""
Gerador de arquivos de teste incompressíveis (1 MiB .. 10 GiB).

Fluxo: detecta o método, confere o espaço em disco, decide o que reaproveitar,
gera os arquivos faltantes, verifica o tamanho, atualiza o marcador de
retomada e, por fim, escreve o index.html e o index.txt.
"""

# Códigos de saída
EXIT_OUTDIR = 2
EXIT_NO_SPACE = 3
EXIT_CANNOT_REMOVE = 4
EXIT_WRITER_FAILED = 8
EXIT_INTERRUPTED = 130

class GeneratorError(Exception):
  """Erro fatal da geração, com o código de saída do processo."""

  def __init__(self, message, exit_code):
    super().__init__(message)
    self.exit_code = exit_code

def setup_logging(log_file=config.LOG_FILE):
  """Loga em arquivo e no console."""
  log_dir = os.path.dirname(log_file)
  if log_dir:
    os.makedirs(log_dir, exist_ok=True)

  logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(message)s',
    handlers=[
      logging.FileHandler(log_file),
      logging.StreamHandler(sys.stdout)
    ]
  )

# --- Índices ---

def index_paths(outdir):
  return [os.path.join(outdir, config.INDEX_HTML), os.path.join(outdir, config.INDEX_TXT)]

def index_exists(outdir):
  return any(os.path.exists(path) for path in index_paths(outdir))

def remove_index_files(outdir):
  for path in index_paths(outdir):
    if os.path.exists(path):
      remove_output(path)

# --- Preparação ---

def ensure_outdir(outdir):
  try:
    os.makedirs(outdir, exist_ok=True)
  except OSError as e:
    raise GeneratorError(f"não foi possível criar o diretório de saída {outdir}: {e}", EXIT_OUTDIR) from e

def remove_output(path):
  """Remove uma saída existente; falhar aqui aborta a execução."""
  try:
    os.remove(path)
  except OSError as e:
    raise GeneratorError(f"não foi possível remover {path}: {e}", EXIT_CANNOT_REMOVE) from e

def needs_generation(target):
  """Um `.tmp` pendente ou um tamanho diferente do esperado exigem nova geração."""
  return os.path.exists(target.tmp_path) or not target.is_complete()

def required_bytes(targets):
  """Bytes que ainda precisam ser escritos."""
  return sum(t.expected_bytes for t in targets if needs_generation(t))

def check_disk_space(outdir, required):
  """
  Recusa a geração se ela ocuparia mais que FREE_SPACE_RATIO do espaço livre.
  Se o espaço livre não puder ser determinado, apenas avisa.
  """
  try:
    free = shutil.disk_usage(outdir).free
  except OSError as e:
    logging.warning(f"Não foi possível determinar o espaço livre em {outdir} ({e}). Prosseguindo com cuidado.")
    return

  if required > free * config.FREE_SPACE_RATIO:
    raise GeneratorError(
      f"espaço livre insuficiente em {outdir}. Necessário ~{human_readable_bytes(required)}, "
      f"disponível {human_readable_bytes(free)}. Libere espaço ou use --outdir em outro local.",
      EXIT_NO_SPACE
    )

def scan_existing(targets):
  """
  Confere os arquivos já existentes e limpa os incompletos.

  Returns:
    tuple: (reaproveitados, a_gerar), ambos listas de TargetFile.
  """
  existing = []
  to_generate = []

  for target in targets:
    if os.path.exists(target.tmp_path):
      logging.info(f"Arquivo temporário incompleto: {target.filename}.tmp - removendo")
      remove_output(target.tmp_path)
      if os.path.exists(target.path):
        logging.info(f"Arquivo correspondente {target.filename} - removendo (provavelmente incompleto)")
        remove_output(target.path)
      to_generate.append(target)
      continue

    actual = target.actual_bytes()
    if actual is None:
      to_generate.append(target)
    elif actual == target.expected_bytes:
      logging.info(f"Arquivo completo: {target.filename} [{human_readable_bytes(actual)}]")
      existing.append(target)
    else:
      logging.info(
        f"Arquivo incompleto: {target.filename} (tamanho: {human_readable_bytes(actual)}, "
        f"esperado: {human_readable_bytes(target.expected_bytes)}) - removendo"
      )
      remove_output(target.path)
      to_generate.append(target)

  return existing, to_generate

def resolve_method(method):
  if method == "auto":
    return detect_best_method()
  if method not in WRITERS:
    raise ValueError(f"Método desconhecido: {method}")
  return method

# --- Geração ---

def _write(target, method):
  """
  Escreve um arquivo com o método escolhido.

  Returns:
    tuple: (método efetivamente usado, status) com status "OK", "TIMEOUT" ou "FAILED".
  """
  if method != "openssl":
    try:
      get_writer(method).write(target)
    except StrategyError as e:
      raise GeneratorError(f"writer {method} falhou: {e}. Abortando.", EXIT_WRITER_FAILED) from e
    return method, "OK"

  try:
    get_writer("openssl").write(target)
    return "openssl", "OK"
  except StrategyTimeout as e:
    logging.warning(f"{e}. Pulando para o próximo arquivo.")
    logging.warning("Gere este arquivo separadamente ou use --method random.")
    return "openssl", "TIMEOUT"
  except StrategyError as e:
    logging.error(f"Pipeline OpenSSL/dd falhou ({e}). Usando os.urandom para este arquivo.")

  try:
    get_writer("random").write(target)
    return "random", "OK"
  except StrategyError as e:
    logging.error(f"Fallback os.urandom também falhou ({e}). Pulando este arquivo.")
    return "random", "FAILED"

def generate_file(target, method, metrics=None):
  """
  Gera e verifica um único arquivo.

  Returns:
    bool: True se o arquivo ficou completo.
  """
  logging.info(f"=== Criando: {target.path} (tamanho: {target.size_mb} MiB) ===")
  if os.path.exists(target.path):
    logging.info(f"Nota: {target.path} já existe e será sobrescrito.")
    remove_output(target.path)

  start = time.time()
  used, status = _write(target, method)
  duration = time.time() - start

  if status == "OK":
    actual = target.actual_bytes()
    if actual is None:
      logging.warning(f"Não foi possível acessar {target.path}")
      status = "FAILED"
    elif actual != target.expected_bytes:
      logging.warning(
        f"Tamanho incorreto em {target.path}: esperado {target.expected_bytes}, obtido {actual}. Removendo."
      )
      remove_output(target.path)
      status = "MISMATCH"
    else:
      logging.info(f"Concluído: {target.path} [{human_readable_bytes(actual)}] em {duration:.1f}s")

  if metrics is not None:
    metrics.log_generation(target.filename, target.expected_bytes, used, duration, status)

  return status == "OK"

def run(outdir=config.OUTPUT_DIR, sizes_mb=None, method=config.METHOD, force=False, metrics=None):
  """
  Executa o fluxo completo de geração.

  Returns:
    dict: resumo com "method", "reused", "generated", "skipped" (nomes de
      arquivo) e "index" (entradas do índice), ou None se os índices já
      existiam e nada foi feito.
  """
  sizes_mb = list(config.SIZES_MB if sizes_mb is None else sizes_mb)
  if not sizes_mb:
    raise ValueError("a lista de tamanhos está vazia")

  if index_exists(outdir):
    if not force:
      logging.info("Os arquivos de índice já existem (index.html ou index.txt).")
      logging.info("Os arquivos de teste parecem já ter sido gerados.")
      logging.info("Remova index.html e index.txt (ou use --force) para gerar novamente.")
      return None
    logging.info("--force: removendo índices existentes.")
    remove_index_files(outdir)

  logging.info(f"Gerando arquivos de teste de {short_name(min(sizes_mb))} a {short_name(max(sizes_mb))}...")

  method = resolve_method(method)
  ensure_outdir(outdir)

  targets = build_targets(outdir, sizes_mb)
  check_disk_space(outdir, required_bytes(targets))

  marker = ProgressMarker(os.path.join(outdir, config.PROGRESS_FILE))
  already_done = marker.load()
  if already_done:
    done = ", ".join(short_name(size) for size in sorted(already_done))
    logging.info(f"Retomando execução interrompida (concluídos antes: {done})")

  logging.info("Verificando arquivos existentes...")
  existing, to_generate = scan_existing(targets)

  summary = {
    "method": method,
    "reused": [t.filename for t in existing],
    "generated": [],
    "skipped": [],
    "index": [],
  }

  if not to_generate:
    logging.info("Todos os arquivos já existem e estão completos!")
  else:
    planned = ", ".join(short_name(t.size_mb) for t in to_generate)
    logging.info(f"Planejando gerar {len(to_generate)} arquivos: {planned}")
    logging.info(f"Pulando {len(existing)} arquivos completos existentes.")

    for i, target in enumerate(to_generate, start=1):
      logging.info(f"Progresso: {i}/{len(to_generate)}")
      if generate_file(target, method, metrics):
        marker.mark_completed(target.size_mb)
        summary["generated"].append(target.filename)
      else:
        summary["skipped"].append(target.filename)

    logging.info(f"Todos os arquivos processados em: {outdir}")

  marker.clear()
  summary["index"] = write_index_files(outdir, targets)
  return summary

def main(argv=None):
  parser = argparse.ArgumentParser(description="Gerador de arquivos de teste incompressíveis (1 MiB .. 10 GiB)")
  parser.add_argument("--outdir", default=config.OUTPUT_DIR,
                      help=f"Diretório de saída (padrão: {config.OUTPUT_DIR})")
  parser.add_argument("--sizes", type=int, nargs="+", default=config.SIZES_MB, metavar="MIB",
                      help="Tamanhos em MiB a gerar (padrão: 1 MiB .. 10 GiB)")
  parser.add_argument("--method", choices=["auto", *WRITERS], default=config.METHOD,
                      help="Método de geração (padrão: auto)")
  parser.add_argument("--force", action="store_true",
                      help="Remove index.html/index.txt existentes e roda mesmo assim")
  parser.add_argument("--log-file", default=config.LOG_FILE, help="Arquivo de log")
  parser.add_argument("--metrics-file", default=config.METRICS_CSV_FILE,
                      help="CSV de métricas de geração")
  args = parser.parse_args(argv)

  if any(size <= 0 for size in args.sizes):
    parser.error("os tamanhos devem ser inteiros positivos (MiB)")

  setup_logging(args.log_file)
  metrics = GenerationMetrics(args.metrics_file)

  try:
    run(args.outdir, args.sizes, args.method, args.force, metrics)
  except GeneratorError as e:
    logging.error(f"Erro: {e}")
    return e.exit_code
  except KeyboardInterrupt:
    logging.info("Interrompido pelo usuário. Execute novamente para continuar de onde parou.")
    return EXIT_INTERRUPTED
  return 0

def cli():
  sys.exit(main())

if __name__ == "__main__":
  cli()
