"""
Routes/endpoints for the Files API

HTTP   URI           Action
----   ---           ------
GET    /[filename]   Download a stored file (HEAD too)
"""

from fastapi import APIRouter
from fastapi.responses import FileResponse

from api.files import services
from core.deps import SettingsDep

router = APIRouter(tags=["File Endpoints"])


# Catch-all, so this router MUST be included last
@router.api_route(
    "/{file_path:path}",
    methods=["GET", "HEAD"],
    name="retrieve_file",
    tags=["File Endpoints"],
)
def retrieve_file(file_path: str, settings: SettingsDep) -> FileResponse:
    """
    Serve a previously uploaded file by name.
    """
    path = services.resolve_stored_file(settings.DATA_DIRECTORY, file_path)
    return FileResponse(path)
