# testfilegen/config.py

"""
Arquivo de configuração central do gerador de arquivos de teste.
"""

# Configurações de Saída
OUTPUT_DIR = "www"                  # Diretório onde os arquivos de teste são gerados
SIZES_MB = [1, 10, 100, 500, 1024, 2048, 3072, 4096, 5120, 10240]  # 1 MiB .. 10 GiB
INDEX_HTML = "index.html"
INDEX_TXT = "index.txt"
PROGRESS_FILE = ".generation_progress"  # Marcador de retomada (JSON)

# Configurações de Geração
METHOD = "auto"                     # "auto", "openssl" ou "random"
CHUNK_SIZE_BYTES = 1024 * 1024      # Chunks de 1 MiB no método random
PROGRESS_STEP_BYTES = 10 * 1024 * 1024  # Loga progresso a cada 10 MiB
OPENSSL_TIMEOUT_SECONDS = 600       # Tempo máximo do pipeline dd | openssl por arquivo
FREE_SPACE_RATIO = 0.95             # Nunca ocupa mais que 95% do espaço livre

# Logs e Métricas
LOG_FILE = "logs/generator.log"
METRICS_CSV_FILE = "metrics/generation.csv"

# Configurações do Servidor (modo serve)
HOST = "0.0.0.0"
PORT = 8080
MAX_CONNECTIONS = 100
KEEP_ALIVE_TIMEOUT = 5              # Segundos que uma conexão keep-alive aguarda
STREAM_CHUNK_BYTES = 64 * 1024      # Tamanho de cada chunk enviado ao cliente
