"""
Error taxonomy for the upload and retrieval endpoints

Each error is an HTTPException so services can raise it directly and
FastAPI renders it as {"detail": ...} with the matching status code.
"""

from fastapi import HTTPException, status


class InvalidContentType(HTTPException):
    """Request body is not multipart/form-data with a boundary"""

    def __init__(self):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid content-type",
        )


class NoFilesUploaded(HTTPException):
    """Multipart body parsed cleanly but had no upload parts"""

    def __init__(self):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No files uploaded",
        )


class MultipartReadError(HTTPException):
    """Multipart stream was corrupt, truncated or the client went away"""

    def __init__(self):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error reading multipart data",
        )


class StorageWriteError(HTTPException):
    """Destination file could not be opened or written"""

    def __init__(self):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error saving file",
        )


class SerializationError(HTTPException):
    def __init__(self):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error preparing response",
        )


class NotFound(HTTPException):
    def __init__(self):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Not Found",
        )
