# scripts/analyze_metrics.py

import argparse
import csv
from collections import Counter, defaultdict

METRICS_FILE = "metrics/generation.csv"

def analyze_metrics(metrics_file=METRICS_FILE):
  """
  Lê o CSV de métricas de geração e imprime um resumo.
  """
  try:
    with open(metrics_file, 'r', newline='') as f:
      records = list(csv.DictReader(f))
  except FileNotFoundError:
    print(f"Erro: Arquivo de métricas '{metrics_file}' não encontrado.")
    return None

  if not records:
    print("Nenhum registro de métricas encontrado.")
    return None

  # --- Cálculos ---
  status_counts = Counter(r['status'] for r in records)
  ok_records = [r for r in records if r['status'] == 'OK']

  total_bytes = sum(int(r['size_bytes']) for r in ok_records)
  total_seconds = sum(float(r['duration_s']) for r in ok_records)

  by_method = defaultdict(list)
  for r in ok_records:
    by_method[r['method']].append(float(r['throughput_mib_s']))

  summary = {
    "total_files": len(records),
    "status_counts": dict(status_counts),
    "total_bytes": total_bytes,
    "total_seconds": total_seconds,
    "avg_throughput_by_method": {
      method: sum(values) / len(values) for method, values in by_method.items()
    },
  }

  # --- Impressão do Resumo ---
  print("--- Análise de Métricas de Geração ---")
  print(f"\nTotal de Arquivos Processados: {summary['total_files']}")

  print("\nStatus:")
  for status, count in status_counts.items():
    print(f"  - {status}: {count} arquivos")

  print("\nVazão Média por Método:")
  for method, avg in summary["avg_throughput_by_method"].items():
    print(f"  - {method}: {avg:.2f} MiB/s")

  print("\nTotal Gerado:")
  print(f"  - {total_bytes / (1024 * 1024 * 1024):.2f} GiB em {total_seconds:.1f} s")
  print("\n------------------------------------")
  return summary

if __name__ == "__main__":
  parser = argparse.ArgumentParser(description="Resume o CSV de métricas de geração.")
  parser.add_argument("--metrics-file", default=METRICS_FILE)
  args = parser.parse_args()
  analyze_metrics(args.metrics_file)
