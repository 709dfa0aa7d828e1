import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile as StarletteUploadFile

from csv_service.api.deps import get_decoder, get_receiver, get_store
from csv_service.core.errors import CsvDecodeError, FileTooLargeError, InvalidFileTypeError
from csv_service.core.time_utils import elapsed_ms, format_duration, start_timer
from csv_service.schemas.convert import ConversionResponse, ErrorResponse
from csv_service.services.interfaces import RecordDecoderProtocol
from csv_service.services.storage import TempFileStore
from csv_service.services.upload import UploadReceiver

logger = logging.getLogger(__name__)

router = APIRouter(tags=["convert"])


@router.post(
    "/convert",
    response_model=ConversionResponse,
    responses={
        400: {"model": ErrorResponse},
        413: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def convert_csv(
    csv_file: UploadFile | str | None = File(default=None, alias="csvFile"),
    receiver: UploadReceiver = Depends(get_receiver),
    decoder: RecordDecoderProtocol = Depends(get_decoder),
    store: TempFileStore = Depends(get_store),
) -> JSONResponse:
    """Convierte el CSV subido en una lista de registros JSON.

    Args:
        csv_file (UploadFile | str | None): Campo multipart ``csvFile``; solo cuenta si es un archivo.
        receiver (UploadReceiver): Valida y guarda el archivo en el almacén temporal.
        decoder (RecordDecoderProtocol): Lee el archivo guardado y produce los registros.
        store (TempFileStore): Almacén del que se elimina el archivo al terminar.

    Returns:
        JSONResponse: Registros, cantidad de filas y tiempo de procesamiento.
    """
    if not isinstance(csv_file, StarletteUploadFile):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file uploaded")

    try:
        upload = await receiver.receive(csv_file)
    except InvalidFileTypeError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except FileTooLargeError as exc:
        raise HTTPException(status_code=413, detail=str(exc)) from exc

    try:
        started = start_timer()
        try:
            records = await run_in_threadpool(decoder.decode, upload.path)
        except CsvDecodeError as exc:
            logger.error("CSV parsing error in %s: %s", upload.original_name, exc)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to convert file",
            ) from exc
        processing_time = format_duration(elapsed_ms(started))
    finally:
        store.delete(upload.path)

    result = ConversionResponse(data=records, row_count=len(records), processing_time=processing_time)
    return JSONResponse(content=result.model_dump(by_alias=True))
