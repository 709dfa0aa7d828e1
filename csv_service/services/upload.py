import logging

import anyio
from fastapi import UploadFile

from csv_service.core.config import Settings
from csv_service.core.errors import FileTooLargeError, InvalidFileTypeError
from csv_service.models.upload import StoredUpload
from csv_service.services.interfaces import TempStoreProtocol

logger = logging.getLogger(__name__)


class UploadReceiver:
    def __init__(self, store: TempStoreProtocol, settings: Settings):
        self.store = store
        self.max_size = settings.max_file_size_bytes
        self.chunk_size = settings.upload_chunk_size
        self.allowed_content_types = {item.lower() for item in settings.allowed_content_types}
        self.allowed_extensions = tuple(item.lower() for item in settings.allowed_extensions)

    def is_allowed(self, *, filename: str | None, content_type: str | None) -> bool:
        media_type = (content_type or "").split(";", 1)[0].strip().lower()
        if media_type in self.allowed_content_types:
            return True
        return bool(filename) and filename.lower().endswith(self.allowed_extensions)

    async def receive(self, file: UploadFile) -> StoredUpload:
        """Valida el archivo recibido y lo copia por bloques al almacén temporal.

        Args:
            file (UploadFile): Archivo del campo multipart.

        Returns:
            StoredUpload: Ruta asignada y metadatos del archivo guardado.

        Raises:
            InvalidFileTypeError: Si no es CSV por tipo declarado ni por extensión.
            FileTooLargeError: Si el contenido supera el tamaño máximo.
        """
        filename = file.filename or ""
        if not self.is_allowed(filename=filename, content_type=file.content_type):
            raise InvalidFileTypeError()

        path = self.store.reserve(filename)
        size = 0
        try:
            async with await anyio.open_file(path, "wb") as target:
                while chunk := await file.read(self.chunk_size):
                    size += len(chunk)
                    if size > self.max_size:
                        raise FileTooLargeError(self.max_size)
                    await target.write(chunk)
        except BaseException:
            # cubre también desconexión del cliente y cancelación de la tarea
            self.store.delete(path)
            raise

        logger.debug("Archivo %s guardado en %s (%d bytes)", filename, path.name, size)
        return StoredUpload(path=path, original_name=filename, content_type=file.content_type, size=size)
