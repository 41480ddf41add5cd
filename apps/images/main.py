"""
Images API

Binary image uploads stored in the database and served by numeric id.
"""
import logging
from typing import Optional, Union

from fastapi import FastAPI, APIRouter, Depends, UploadFile, File, Form
from fastapi.responses import Response
from sqlalchemy.orm import Session
from starlette.datastructures import UploadFile as StarletteUploadFile

from apps.shared.database import get_db, init_db, check_db_connection
from apps.shared.auth import get_api_key
from apps.shared.cors import setup_cors
from apps.shared.errors import NotFound, ValidationError, setup_error_handlers
from apps.shared.headers import IMMUTABLE_CACHE_CONTROL, setup_response_headers
from apps.shared.ids import parse_positive_id
from apps.images.schemas import ImageUploadResponse
from apps.images.store import fetch_image, image_url, store_image

logger = logging.getLogger(__name__)

# Create tables
init_db()

app = FastAPI(
    title="Images API",
    version="1.0.0",
    description="Binary image uploads served with immutable caching",
    docs_url="/images/docs",
    openapi_url="/images/openapi.json",
)

setup_cors(app)
setup_response_headers(app)
setup_error_handlers(app)

router = APIRouter(prefix="/images", tags=["images"])


@router.get("/health")
def health():
    """Health check endpoint."""
    db_connected = check_db_connection()
    return {
        "status": "ok" if db_connected else "degraded",
        "service": "images",
        "database": "connected" if db_connected else "disconnected",
    }


@router.get(
    "/{image_id}",
    response_class=Response,
    responses={200: {"content": {"image/*": {}}}},
)
def get_image(image_id: str, db: Session = Depends(get_db)):
    """
    Serve the raw bytes of a stored image.

    Failures are bare status codes with no body: 400 for a malformed id,
    404 for an unknown one.
    """
    parsed_id = parse_positive_id(image_id)
    if parsed_id is None:
        return Response(status_code=400)

    try:
        image = fetch_image(db, parsed_id)
    except NotFound:
        return Response(status_code=404)

    return Response(
        content=bytes(image.data),
        status_code=200,
        headers={
            "Content-Type": image.mime_type,
            "Cache-Control": IMMUTABLE_CACHE_CONTROL,
        },
    )


@router.post("", response_model=ImageUploadResponse)
def upload_image(
    file: Union[UploadFile, str, None] = File(None),
    filename: Optional[str] = Form(None),
    api_key: str = Depends(get_api_key),
    db: Session = Depends(get_db),
):
    """
    Upload an image as multipart form data (field `file`, optional `filename`).
    Returns the new image id and its retrieval path.
    """
    # A plain text field named "file" is not an upload
    if not isinstance(file, StarletteUploadFile):
        raise ValidationError("No file provided")

    contents = file.file.read()
    image = store_image(
        db,
        data=contents,
        mime_type=file.content_type,
        filename=filename or file.filename,
    )

    return ImageUploadResponse(id=image.id, url=image_url(image.id))


app.include_router(router)
