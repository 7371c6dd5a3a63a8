# testfilegen/metrics.py

import csv
import logging
import os
from datetime import datetime, UTC

class GenerationMetrics:
  """
  Registra métricas de geração (uma linha por arquivo) em um arquivo CSV.
  """

  HEADER = [
    "timestamp", "filename", "size_bytes", "method",
    "duration_s", "throughput_mib_s", "status"
  ]

  def __init__(self, filepath):
    """
    Inicializa o logger de métricas.

    Args:
      filepath (str): Caminho do arquivo CSV onde as métricas serão armazenadas.
    """
    self.filepath = filepath
    self._initialize_file()

  def _initialize_file(self):
    """Cria o diretório e o arquivo CSV com o cabeçalho, se necessário."""
    directory = os.path.dirname(self.filepath)
    if directory:
      os.makedirs(directory, exist_ok=True)

    if not os.path.exists(self.filepath):
      with open(self.filepath, 'w', newline='') as f:
        csv.writer(f).writerow(self.HEADER)

  def log_generation(self, filename, size_bytes, method, duration_s, status):
    """
    Registra a geração de um arquivo.

    Args:
      filename (str): Nome do arquivo gerado.
      size_bytes (int): Tamanho esperado em bytes.
      method (str): Método usado ("openssl" ou "random").
      duration_s (float): Duração da escrita em segundos.
      status (str): "OK", "MISMATCH", "TIMEOUT" ou "FAILED".
    """
    timestamp = datetime.now(UTC).isoformat()
    throughput = size_bytes / (1024 * 1024) / duration_s if duration_s > 0 else 0.0

    row = [
      timestamp, filename, size_bytes, method,
      f"{duration_s:.3f}", f"{throughput:.2f}", status
    ]

    try:
      with open(self.filepath, 'a', newline='') as f:
        csv.writer(f).writerow(row)
    except OSError as e:
      # Métricas nunca interrompem a geração
      logging.error(f"Falha ao escrever no arquivo de métricas: {e}")
