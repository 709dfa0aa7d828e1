from fastapi import Request

from csv_service.services.interfaces import RecordDecoderProtocol
from csv_service.services.storage import TempFileStore
from csv_service.services.upload import UploadReceiver


def get_store(request: Request) -> TempFileStore:
    return request.app.state.store


def get_receiver(request: Request) -> UploadReceiver:
    return request.app.state.receiver


def get_decoder(request: Request) -> RecordDecoderProtocol:
    return request.app.state.decoder


__all__ = ["get_store", "get_receiver", "get_decoder"]
