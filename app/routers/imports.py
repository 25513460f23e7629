"""Router for brokerage CSV imports."""

import logging

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_owner_id
from app.exceptions import ImportParseError
from app.schemas import ImportResponse
from app.services import import_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/csv", response_model=ImportResponse)
def import_csv(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    owner_id: int = Depends(get_owner_id),
) -> ImportResponse:
    """Import a brokerage activity CSV."""
    raw = file.file.read()
    try:
        content = raw.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise ImportParseError("CSV must be UTF-8 text") from e

    logger.info("Importing %s (%d bytes) for owner %s", file.filename, len(raw), owner_id)
    result = import_service.import_csv(db, owner_id, content)
    return ImportResponse.model_validate(result)
