from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class StoredUpload:
    """Archivo subido y guardado en el almacén temporal durante una petición."""

    path: Path
    original_name: str
    content_type: str | None
    size: int
