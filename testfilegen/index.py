# testfilegen/index.py

import html
import logging
import os

from . import config
from .sizes import human_readable_bytes

"""
Geração do index.html e index.txt que listam os arquivos de teste.
"""

def collect_index_entries(targets):
  """
  Monta as entradas do índice apenas para os arquivos completos.

  Returns:
    list: dicionários com filename, display_name, size e size_formatted.
  """
  entries = []
  for target in targets:
    if not target.is_complete():
      continue
    size = target.actual_bytes()
    entries.append({
      "filename": target.filename,
      "display_name": target.display_name,
      "size": size,
      "size_formatted": human_readable_bytes(size),
    })
  return entries

def render_txt(entries):
  return "".join(f"{entry['filename']}\n" for entry in entries)

def render_html(entries):
  total_size = sum(entry["size"] for entry in entries)

  items = "".join(
    f'<li><a href="{html.escape(entry["filename"])}">{html.escape(entry["display_name"])}</a>'
    f' - {html.escape(entry["size_formatted"])}</li>'
    for entry in entries
  )

  return (
    "<html>\n"
    "<head>\n"
    "<title>Test Files</title>\n"
    "</head>\n"
    "<body>\n"
    "<h1>Test Files</h1>\n"
    f"<p>Total: {len(entries)} files ({human_readable_bytes(total_size)})</p>\n"
    f"<ul>{items}</ul>\n"
    f'<p><a href="{config.INDEX_TXT}">{config.INDEX_TXT}</a></p>\n'
    "</body>\n"
    "</html>"
  )

def write_index_files(outdir, targets):
  """Escreve index.html e index.txt no diretório de saída."""
  entries = collect_index_entries(targets)

  with open(os.path.join(outdir, config.INDEX_TXT), "w", encoding="utf-8") as f:
    f.write(render_txt(entries))

  with open(os.path.join(outdir, config.INDEX_HTML), "w", encoding="utf-8") as f:
    f.write(render_html(entries))

  logging.info(f"Criado {config.INDEX_HTML} com {len(entries)} links")
  logging.info(f"Criado {config.INDEX_TXT} com {len(entries)} nomes de arquivo")
  return entries
