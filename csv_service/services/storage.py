import logging
import time
from pathlib import Path

logger = logging.getLogger(__name__)


class TempFileStore:
    """Directorio local donde viven los CSV mientras se procesa la petición."""

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def ensure_directory(self) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)

    def path_for(self, filename: str, *, timestamp_ms: int | None = None) -> Path:
        stamp = timestamp_ms if timestamp_ms is not None else time.time_ns() // 1_000_000
        return self.directory / f"{stamp}-{_basename(filename)}"

    def reserve(self, filename: str) -> Path:
        """Crea de forma exclusiva un archivo vacío con nombre ``<timestamp>-<nombre>``.

        Si dos subidas con el mismo nombre coinciden en el mismo milisegundo,
        se avanza el timestamp hasta encontrar un nombre libre.

        Args:
            filename (str): Nombre original enviado por el cliente.

        Returns:
            Path: Ruta del archivo reservado dentro del almacén.
        """
        self.ensure_directory()
        stamp = time.time_ns() // 1_000_000
        while True:
            path = self.path_for(filename, timestamp_ms=stamp)
            try:
                path.touch(exist_ok=False)
            except FileExistsError:
                stamp += 1
                continue
            return path

    def delete(self, path: Path) -> bool:
        try:
            Path(path).unlink(missing_ok=True)
        except OSError as exc:
            logger.error("Error deleting file %s: %s", path, exc)
            return False
        return True

    def entries(self) -> list[Path]:
        if not self.directory.exists():
            return []
        return sorted(self.directory.iterdir())

    def purge(self) -> list[str]:
        """Elimina todo lo que quedó en el almacén; los fallos se registran y no detienen la limpieza.

        Returns:
            list[str]: Nombres de las entradas eliminadas.
        """
        removed: list[str] = []
        try:
            entries = self.entries()
        except OSError as exc:
            logger.error("Cleanup error: %s", exc)
            return removed
        for entry in entries:
            try:
                entry.unlink()
            except OSError as exc:
                logger.error("Cleanup error for %s: %s", entry.name, exc)
                continue
            logger.info("Cleaned up leftover file: %s", entry.name)
            removed.append(entry.name)
        return removed


def _basename(filename: str) -> str:
    name = filename.replace("\\", "/").rsplit("/", 1)[-1]
    return name or "upload"
