"""Protocolos que definen los contratos de los servicios de conversión."""

from __future__ import annotations

from pathlib import Path
from typing import Iterator, Protocol


class TempStoreProtocol(Protocol):
    """Almacén de archivos temporales, uno por petición en curso."""

    def ensure_directory(self) -> None: ...

    def path_for(self, filename: str, *, timestamp_ms: int | None = None) -> Path: ...

    def reserve(self, filename: str) -> Path: ...

    def delete(self, path: Path) -> bool: ...

    def purge(self) -> list[str]: ...


class RecordDecoderProtocol(Protocol):
    """Convierte un archivo guardado en una secuencia de registros."""

    def iter_records(self, path: Path) -> Iterator[dict[str, str]]: ...

    def decode(self, path: Path) -> list[dict[str, str]]: ...
