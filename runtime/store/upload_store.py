"""UploadStore: stages multipart uploads for a single request.

Each upload is written to `<upload_dir>/<random hex><ext>` and described by
an Attachment. The request builder consumes and deletes the file; this
module only removes it itself when the upload is rejected.
"""

import logging
import os
import uuid
from pathlib import Path

from fastapi import HTTPException, UploadFile

from core.content.models import Attachment


logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024


async def stage_upload(upload: UploadFile, upload_dir: Path, max_upload_mb: int) -> Attachment:
    """Write `upload` to the staging directory and return its Attachment.

    Raises HTTPException(413) when the file exceeds `max_upload_mb`.
    """
    upload_dir.mkdir(parents=True, exist_ok=True)

    original_name = upload.filename or "upload"
    ext = os.path.splitext(original_name)[1].lower()
    dest = upload_dir / f"{uuid.uuid4().hex}{ext}"
    limit = max_upload_mb * 1024 * 1024

    size = 0
    try:
        with dest.open("wb") as f:
            while True:
                chunk = await upload.read(CHUNK_SIZE)
                if not chunk:
                    break
                size += len(chunk)
                if size > limit:
                    raise HTTPException(
                        status_code=413,
                        detail=f"File too large; max {max_upload_mb} MB.",
                    )
                f.write(chunk)
    except BaseException:
        dest.unlink(missing_ok=True)
        raise
    finally:
        await upload.close()

    logger.debug("Staged upload %s -> %s (%d bytes)", original_name, dest, size)
    return Attachment(
        staging_path=str(dest),
        media_type=upload.content_type or "application/octet-stream",
        original_name=original_name,
    )
