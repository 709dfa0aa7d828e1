import csv
import logging
from pathlib import Path
from typing import Iterator

from csv_service.core.config import Settings
from csv_service.core.errors import CsvDecodeError

logger = logging.getLogger(__name__)

Record = dict[str, str]


class CsvDecoder:
    """Lee un CSV guardado y produce un registro por fila, usando la primera fila como encabezado.

    El modo estricto rechaza todo el archivo si alguna fila no tiene la misma
    cantidad de columnas que el encabezado. Al llegar a ``max_rows`` registros
    se deja de leer y el resto del archivo se ignora.
    """

    def __init__(self, settings: Settings):
        self.max_rows = settings.max_rows
        self.progress_interval = settings.progress_log_interval
        # un campo puede ocupar todo el archivo permitido
        if csv.field_size_limit() < settings.max_file_size_bytes:
            csv.field_size_limit(settings.max_file_size_bytes)

    def iter_records(self, path: Path) -> Iterator[Record]:
        try:
            with open(path, newline="", encoding="utf-8-sig") as handle:
                reader = csv.reader(handle, strict=True)
                header = _next_row(reader)
                if header is None:
                    return
                produced = 0
                for row in reader:
                    if not row:
                        continue
                    if produced >= self.max_rows:
                        logger.warning(
                            "%s supera el límite de %d filas; se ignora el resto", path.name, self.max_rows
                        )
                        return
                    if len(row) != len(header):
                        raise CsvDecodeError(
                            f"Row length does not match headers at line {reader.line_num}: "
                            f"expected {len(header)} columns, got {len(row)}"
                        )
                    produced += 1
                    if produced % self.progress_interval == 0:
                        logger.debug("%s: %d filas procesadas", path.name, produced)
                    yield dict(zip(header, row))
        except csv.Error as exc:
            raise CsvDecodeError(str(exc)) from exc
        except (OSError, UnicodeDecodeError) as exc:
            raise CsvDecodeError(f"Could not read {path.name}: {exc}") from exc

    def decode(self, path: Path) -> list[Record]:
        return list(self.iter_records(path))


def _next_row(reader) -> list[str] | None:
    for row in reader:
        if row:
            return row
    return None
