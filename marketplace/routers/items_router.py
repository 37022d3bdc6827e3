from dataclasses import asdict
from typing import Optional
import logging
import os

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile
from fastapi.responses import FileResponse
from sqlmodel import Session

from ..application.ports.image_store import ImageStore
from ..application.services.listing_service import ListingService
from ..config import Settings
from ..database import get_session
from ..exceptions import InvalidRequest
from ..infrastructure.persistence.sqlalchemy.repositories.catalog_repository_sql import SqlCatalogRepository
from ..media_utils import validate_jpeg
from ..schemas.items.item import ItemResponse, ItemsResponse, MessageResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Items"])


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_image_store(request: Request) -> ImageStore:
    return request.app.state.image_store


def get_listing_service(session: Session = Depends(get_session), images: ImageStore = Depends(get_image_store)) -> ListingService:
    return ListingService(catalog=SqlCatalogRepository(session), images=images)


def read_upload(image: UploadFile, settings: Settings) -> bytes:
    filename = (image.filename or "").lower()
    if os.path.splitext(filename)[1] not in [s.lower() for s in settings.ALLOWED_IMAGE_SUFFIXES]:
        raise InvalidRequest("only .jpg or .jpeg files are allowed")
    data = image.file.read()
    if len(data) == 0:
        raise InvalidRequest("image data is empty")
    if len(data) > settings.MAX_FILE_SIZE:
        raise InvalidRequest(f"image too large. Max size: {settings.MAX_FILE_SIZE} bytes")
    validate_jpeg(data)
    return data


@router.get("/", response_model=MessageResponse)
def hello():
    return MessageResponse(message="Hello, world!")


@router.post("/items", response_model=MessageResponse)
def add_item(
    name: str = Form(""),
    category: str = Form(""),
    image: Optional[UploadFile] = File(None),
    service: ListingService = Depends(get_listing_service),
    app_settings: Settings = Depends(get_app_settings),
):
    image_bytes = read_upload(image, app_settings) if image is not None and image.filename else None
    item = service.add_item(name, category, image_bytes)
    return MessageResponse(message=f"item received: {item.name}")


@router.get("/items", response_model=ItemsResponse)
def get_items(service: ListingService = Depends(get_listing_service)):
    items = service.list_items()
    return ItemsResponse(items=[ItemResponse(**asdict(i)) for i in items])


@router.get("/items/{item_id}", response_model=ItemResponse)
def get_item(item_id: str, service: ListingService = Depends(get_listing_service)):
    return ItemResponse(**asdict(service.get_item(item_id)))


@router.get("/search", response_model=ItemsResponse)
def search_items(keyword: str = Query(""), service: ListingService = Depends(get_listing_service)):
    items = service.search(keyword)
    return ItemsResponse(items=[ItemResponse(**asdict(i)) for i in items])


@router.get("/images/{filename}")
def get_image(filename: str, service: ListingService = Depends(get_listing_service)):
    path = service.image_path(filename)
    logger.info(f"returned image {path}")
    return FileResponse(path, media_type="image/jpeg")
