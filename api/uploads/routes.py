"""
Routes/endpoints for the Uploads API

HTTP   URI        Action
----   ---        ------
POST   /upload    Store every `file` part of a multipart/form-data body
"""

from fastapi import APIRouter, Request, Response, status

from api.uploads.models import UploadManifest
from api.uploads import services
from core.deps import SettingsDep

router = APIRouter(tags=["Upload Endpoints"])


@router.post(
    "/upload",
    name="upload_files",
    response_model=UploadManifest,
    status_code=status.HTTP_200_OK,
    tags=["Upload Endpoints"],
)
async def upload_files(request: Request, settings: SettingsDep) -> Response:
    """
    Upload one or more files.

    Each part posted under the form field `file` is stored as
    <id><ext>, where the extension comes from the part's filename or,
    when it has none, from the file's magic bytes.
    """
    manifest = await services.ingest(
        chunks=request.stream(),
        content_type=request.headers.get("content-type"),
        data_dir=settings.DATA_DIRECTORY,
    )
    return Response(
        content=services.render_manifest(manifest),
        media_type="application/json",
    )
