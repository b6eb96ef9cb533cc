"""
Models for the Uploads API
"""

from pydantic import BaseModel, ConfigDict


class UploadRecord(BaseModel):
    """One stored file: its generated id and the name it was stored under"""

    id: str
    filename: str

    model_config = ConfigDict(frozen=True)


class UploadManifest(BaseModel):
    """Records produced by a single upload request, in part order"""

    uploads: list[UploadRecord] = []
