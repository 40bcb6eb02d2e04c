from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, File, Form, Request, UploadFile, status
from pydantic import ValidationError as PydanticValidationError

from core.exceptions import ConfigurationError, ValidationError
from core.objects.service import ObjectService
from services.api.schemas import CreateObjectForm, DeleteObjectResponse, ErrorResponse, StoredObjectOut


router = APIRouter(prefix="/objects", tags=["objects"])


def _service(request: Request) -> ObjectService:
    service = getattr(request.app.state, "object_service", None)
    if service is None:
        raise ConfigurationError("Object service is not initialised")
    return service


def parse_create_form(title: str | None, description: str | None) -> CreateObjectForm:
    """Validate the text fields of a create request before the service sees them."""
    if title is None or not title.strip():
        raise ValidationError("title required", {"field": "title"})
    try:
        return CreateObjectForm(title=title, description=description)
    except PydanticValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ())) or "form"
        raise ValidationError(f"{field}: {first.get('msg', 'invalid value')}", {"field": field}) from exc


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=StoredObjectOut,
    summary="Create new object with required image",
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def create_object(
    request: Request,
    title: Annotated[str | None, Form(description="Title of the object (required)")] = None,
    description: Annotated[str | None, Form(description="Optional detailed description")] = None,
    file: Annotated[UploadFile | None, File(description="Image file (jpg, png, etc.), required")] = None,
) -> StoredObjectOut:
    form = parse_create_form(title, description)
    if file is None:
        raise ValidationError("image required", {"field": "file"})

    created = _service(request).create_object(
        title=form.title,
        description=form.description,
        image_bytes=file.file.read(),
        image_content_type=file.content_type or "",
        image_filename=file.filename or "",
    )
    return StoredObjectOut.from_record(created)


@router.get("", response_model=list[StoredObjectOut], summary="Get all objects (newest first)")
def list_objects(request: Request) -> list[StoredObjectOut]:
    return [StoredObjectOut.from_record(record) for record in _service(request).list_objects()]


@router.get(
    "/{object_id}",
    response_model=StoredObjectOut,
    summary="Get one object by ID",
    responses={404: {"model": ErrorResponse}},
)
def get_object(request: Request, object_id: str) -> StoredObjectOut:
    return StoredObjectOut.from_record(_service(request).get_object(object_id))


@router.delete(
    "/{object_id}",
    response_model=DeleteObjectResponse,
    summary="Delete object by ID (also removes its image)",
    responses={404: {"model": ErrorResponse}},
)
def delete_object(request: Request, object_id: str) -> DeleteObjectResponse:
    return DeleteObjectResponse(**_service(request).delete_object(object_id))
