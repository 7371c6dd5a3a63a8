# scripts/plot_results.py

import argparse
import csv
import os

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
from matplotlib.patches import Patch

# --- Diretórios de Dados e Saída ---
RESULTS_DIR = "results"
METRICS_FILE = "metrics/generation.csv"

def load_ok_records(metrics_file):
  try:
    with open(metrics_file, 'r', newline='') as f:
      return [row for row in csv.DictReader(f) if row['status'] == 'OK']
  except FileNotFoundError:
    print(f"Erro: Arquivo de métricas '{metrics_file}' não encontrado.")
    return []

def plot_throughput(metrics_file=METRICS_FILE, results_dir=RESULTS_DIR):
  """Gráfico de barras da vazão (MiB/s) por arquivo gerado, colorido por método."""
  records = load_ok_records(metrics_file)
  if not records:
    print("Nenhum dado de geração disponível para plotar.")
    return None

  records.sort(key=lambda r: int(r['size_bytes']))
  labels = [r['filename'].replace("testfile_", "").replace(".bin", "") for r in records]
  values = [float(r['throughput_mib_s']) for r in records]
  colors = ['tab:blue' if r['method'] == 'openssl' else 'tab:orange' for r in records]

  plt.figure(figsize=(10, 6))
  plt.bar(labels, values, color=colors, edgecolor='black')
  plt.title("Vazão de Geração por Arquivo")
  plt.xlabel("Arquivo")
  plt.ylabel("Vazão (MiB/s)")

  # Legenda manual: uma entrada por método
  plt.legend(handles=[
    Patch(color="tab:blue", label="openssl"),
    Patch(color="tab:orange", label="random"),
  ])

  os.makedirs(results_dir, exist_ok=True)
  output_path = os.path.join(results_dir, "generation_throughput.png")
  plt.savefig(output_path)
  print(f"Gráfico de vazão salvo em: {output_path}")
  plt.close()
  return output_path

if __name__ == "__main__":
  parser = argparse.ArgumentParser(description="Gera gráficos a partir das métricas de geração.")
  parser.add_argument("--metrics-file", default=METRICS_FILE)
  parser.add_argument("--results-dir", default=RESULTS_DIR)
  args = parser.parse_args()
  plot_throughput(args.metrics_file, args.results_dir)
