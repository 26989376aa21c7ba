# app/routers/products.py
import logging
from pathlib import Path

from fastapi import (
    APIRouter,
    Depends,
    File,
    Form,
    Query,
    Request,
    UploadFile,
    status,
)
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from pydantic import ValidationError
from sqlmodel import Session

from app.core.config import Settings, get_settings
from app.core.storage_utils import ImageStore
from app.database import get_session
from app.models.product import Product
from app.repositories.product_repo import ProductRepository
from app.schemas.product import ImageUpload, ProductForm, field_errors
from app.services.product_service import ProductService

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

IMAGE_REQUIRED = "The image file is required!"

router = APIRouter(prefix="/products", tags=["Products"])

repo = ProductRepository()


def get_image_store(settings: Settings = Depends(get_settings)) -> ImageStore:
    return ImageStore(settings.IMAGE_DIR)


def get_product_service(store: ImageStore = Depends(get_image_store)) -> ProductService:
    return ProductService(repo, store)


# -------- Helpers --------


def _redirect_to_list() -> RedirectResponse:
    # 303 so browsers follow a POST with a GET
    return RedirectResponse(url="/products", status_code=status.HTTP_303_SEE_OTHER)


def _read_upload(upload: UploadFile | None) -> ImageUpload:
    if upload is None:
        return ImageUpload(filename=None, content=b"")
    return ImageUpload(filename=upload.filename, content=upload.file.read())


def _bind_form(values: dict[str, str]) -> tuple[ProductForm | None, dict[str, str]]:
    """Validate submitted fields; return the form or per-field errors."""
    try:
        return ProductForm(**values), {}
    except ValidationError as e:
        return None, field_errors(e)


def _render_form(
    request: Request,
    template: str,
    settings: Settings,
    values: dict,
    errors: dict[str, str] | None = None,
    product: Product | None = None,
) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        template,
        {
            "values": values,
            "errors": errors or {},
            "product": product,
            "image_url_prefix": settings.IMAGE_URL_PREFIX,
        },
    )


# -------- Pages --------


@router.get("", response_class=HTMLResponse)
def show_product_list(
    request: Request,
    session: Session = Depends(get_session),
    service: ProductService = Depends(get_product_service),
    settings: Settings = Depends(get_settings),
):
    """
    Render all products, newest id first.
    """
    products = service.list_products(session)
    return templates.TemplateResponse(
        request,
        "products/list.html",
        {"products": products, "image_url_prefix": settings.IMAGE_URL_PREFIX},
    )


@router.get("/create", response_class=HTMLResponse)
def show_create_page(
    request: Request,
    settings: Settings = Depends(get_settings),
):
    return _render_form(request, "products/create_product.html", settings, values={})


@router.post("/create", response_class=HTMLResponse)
def create_product(
    request: Request,
    name: str = Form(""),
    brand: str = Form(""),
    category: str = Form(""),
    price: str = Form(""),
    description: str = Form(""),
    imageFile: UploadFile | None = File(None),
    session: Session = Depends(get_session),
    service: ProductService = Depends(get_product_service),
    settings: Settings = Depends(get_settings),
):
    """
    Create a product from the multipart form.

    - Field errors or a missing image re-render the form, nothing saved.
    - Otherwise redirect to the list, also when storing/saving failed
      (failures are logged by the service).
    """
    values = {
        "name": name,
        "brand": brand,
        "category": category,
        "price": price,
        "description": description,
    }
    form, errors = _bind_form(values)
    image = _read_upload(imageFile)
    if image.is_empty:
        errors["imageFile"] = IMAGE_REQUIRED

    if errors:
        return _render_form(
            request, "products/create_product.html", settings, values, errors
        )

    result = service.create_product(session, form, image)
    if not result.ok:
        logger.warning("Create product failed: %s", result.status.value)
    return _redirect_to_list()


@router.get("/edit", response_class=HTMLResponse)
def show_edit_page(
    request: Request,
    product_id: int = Query(alias="id"),
    session: Session = Depends(get_session),
    service: ProductService = Depends(get_product_service),
    settings: Settings = Depends(get_settings),
):
    """
    Render the edit form pre-filled from the stored product.

    Unknown id or a failed lookup => back to the list without an error page.
    """
    found = service.find_product(session, product_id)
    if not found.ok:
        logger.info("Edit page: product id=%s %s", product_id, found.status.value)
        return _redirect_to_list()
    product = found.product

    return _render_form(
        request,
        "products/edit_product.html",
        settings,
        values=service.form_from_product(product),
        product=product,
    )


@router.post("/edit", response_class=HTMLResponse)
def update_product(
    request: Request,
    product_id: int = Query(alias="id"),
    name: str = Form(""),
    brand: str = Form(""),
    category: str = Form(""),
    price: str = Form(""),
    description: str = Form(""),
    imageFile: UploadFile | None = File(None),
    session: Session = Depends(get_session),
    service: ProductService = Depends(get_product_service),
    settings: Settings = Depends(get_settings),
):
    """
    Apply an edit. The image is optional: when omitted, the current image
    is kept.
    """
    found = service.find_product(session, product_id)
    if not found.ok:
        logger.info("Edit submit: product id=%s %s", product_id, found.status.value)
        return _redirect_to_list()
    product = found.product

    values = {
        "name": name,
        "brand": brand,
        "category": category,
        "price": price,
        "description": description,
    }
    form, errors = _bind_form(values)
    if errors:
        # header shows the stored product, inputs keep what was submitted
        return _render_form(
            request,
            "products/edit_product.html",
            settings,
            values,
            errors,
            product=product,
        )

    result = service.update_product(session, product, form, _read_upload(imageFile))
    if not result.ok:
        logger.warning(
            "Update of product id=%s failed: %s", product_id, result.status.value
        )
    return _redirect_to_list()


@router.get("/delete")
def delete_product(
    product_id: int = Query(alias="id"),
    session: Session = Depends(get_session),
    service: ProductService = Depends(get_product_service),
):
    """
    Delete a product and its image, then go back to the list.
    """
    result = service.delete_product(session, product_id)
    if not result.ok:
        logger.warning(
            "Delete of product id=%s failed: %s", product_id, result.status.value
        )
    return _redirect_to_list()
