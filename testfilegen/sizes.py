# testfilegen/sizes.py

import os

"""
Nomes, tamanhos e formatação dos arquivos de teste.
"""

MIB = 1024 * 1024

def file_name(size_mb):
  """Nome do arquivo: MiB abaixo de 1 GiB, GiB a partir daí."""
  if size_mb < 1024:
    return f"testfile_{size_mb}MiB.bin"
  return f"testfile_{size_mb // 1024}GiB.bin"

def display_name(size_mb):
  if size_mb < 1024:
    return f"{size_mb} MiB"
  return f"{size_mb // 1024} GiB"

def short_name(size_mb):
  """Forma compacta usada nos logs (ex: 500MiB, 2GiB)."""
  return display_name(size_mb).replace(" ", "")

def _trim(value):
  # Até duas casas decimais, sem zeros à direita (1.50 -> 1.5, 2.00 -> 2)
  return f"{value:.2f}".rstrip("0").rstrip(".")

def human_readable_bytes(n):
  """
  Formata um número de bytes em B, KiB, MiB ou GiB.
  """
  if n >= 1 << 30:
    return f"{_trim(n / (1 << 30))} GiB"
  if n >= 1 << 20:
    return f"{_trim(n / (1 << 20))} MiB"
  if n >= 1 << 10:
    return f"{_trim(n / (1 << 10))} KiB"
  return f"{n} B"

class TargetFile:
  """
  Um arquivo de teste a ser gerado: caminho, tamanho esperado e tamanho real.

  O arquivo só é considerado completo quando o tamanho em disco é exatamente
  igual ao esperado.
  """

  def __init__(self, outdir, size_mb):
    self.outdir = outdir
    self.size_mb = size_mb
    self.filename = file_name(size_mb)
    self.display_name = display_name(size_mb)
    self.path = os.path.join(outdir, self.filename)
    self.tmp_path = self.path + ".tmp"
    self.expected_bytes = size_mb * MIB

  def actual_bytes(self):
    """Tamanho atual em disco, ou None se o arquivo não existe."""
    try:
      return os.path.getsize(self.path)
    except OSError:
      return None

  def is_complete(self):
    return self.actual_bytes() == self.expected_bytes

  def __repr__(self):
    return f"TargetFile({self.filename!r}, {self.expected_bytes})"

def build_targets(outdir, sizes_mb):
  """Cria os alvos na mesma ordem da lista de tamanhos."""
  return [TargetFile(outdir, size_mb) for size_mb in sizes_mb]
