# testfilegen/progress.py

import json
import logging
import os

class ProgressMarker:
  """
  Marcador de retomada: lista JSON dos tamanhos (em MiB) já concluídos
  numa execução que ainda não terminou.

  O arquivo é apagado ao fim de uma execução completa. Se ele existir no
  início, a execução anterior foi interrompida.
  """

  def __init__(self, path):
    self.path = path

  def exists(self):
    return os.path.exists(self.path)

  def load(self):
    """Retorna o conjunto de tamanhos concluídos (vazio se não há marcador)."""
    try:
      with open(self.path, "r", encoding="utf-8") as f:
        data = json.load(f)
    except FileNotFoundError:
      return set()
    except (OSError, ValueError) as e:
      logging.warning(f"Marcador de progresso ilegível ({self.path}): {e}. Ignorando.")
      return set()

    if not isinstance(data, list):
      return set()
    return {size for size in data if isinstance(size, int)}

  def mark_completed(self, size_mb):
    completed = self.load()
    completed.add(size_mb)
    with open(self.path, "w", encoding="utf-8") as f:
      json.dump(sorted(completed), f)

  def clear(self):
    if self.exists():
      os.remove(self.path)
