"""
Services for the Files API
"""

from pathlib import Path

from core.errors import NotFound


def resolve_stored_file(data_dir: Path, file_path: str) -> Path:
    """
    Resolve a request path to a stored file under the storage root.

    Args:
        data_dir: The storage root. Nothing outside it is ever served.
        file_path: Path relative to the storage root, as requested

    Returns:
        Absolute path of a regular file inside data_dir

    Raises:
        NotFound: Path is missing, escapes the root, or is not a regular
                  file. Directories are never listed.
    """
    storage_root = Path(data_dir).resolve()

    # Security check: ensure the resolved path is within storage_root
    try:
        target = (storage_root / file_path.lstrip("/")).resolve()
        target.relative_to(storage_root)
    except (ValueError, OSError) as exc:
        raise NotFound() from exc

    if not target.is_file():
        raise NotFound()

    return target
