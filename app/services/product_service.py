# app/services/product_service.py
import enum
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from app.core.storage_utils import ImageStore, generate_filename
from app.models.product import Product
from app.repositories.product_repo import ProductRepository
from app.schemas.product import ImageUpload, ProductForm

logger = logging.getLogger(__name__)

FORM_FIELDS = ("name", "brand", "category", "price", "description")


class LifecycleStatus(str, enum.Enum):
    OK = "ok"
    NOT_FOUND = "not_found"
    STORAGE_FAILED = "storage_failed"
    PERSISTENCE_FAILED = "persistence_failed"


@dataclass
class LifecycleResult:
    status: LifecycleStatus
    product: Product | None = None

    @property
    def ok(self) -> bool:
        return self.status is LifecycleStatus.OK


def _now_millis() -> datetime:
    """Current UTC time truncated to whole milliseconds."""
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond - now.microsecond % 1000)


class ProductService:
    """
    Business logic for Product and its image file.

    Responsibilities:
      - keep the image file and the product row in step
      - write new files before touching rows, and remove files only
        after the row change is committed
      - undo a freshly written file when the row change fails
      - report outcomes as LifecycleResult instead of raising
    """

    def __init__(self, repo: ProductRepository, store: ImageStore):
        self.repo = repo
        self.store = store

    # ----- Queries -----

    def list_products(self, session: Session) -> list[Product]:
        return self.repo.list(session)

    def find_product(self, session: Session, product_id: int) -> LifecycleResult:
        """
        Look up one product without raising.

        Missing row => NOT_FOUND, DB error => PERSISTENCE_FAILED (logged).
        """
        try:
            product = self.repo.get_by_id(session, product_id)
        except SQLAlchemyError:
            logger.exception("Failed to load product id=%s", product_id)
            session.rollback()
            return LifecycleResult(LifecycleStatus.PERSISTENCE_FAILED)

        if product is None:
            return LifecycleResult(LifecycleStatus.NOT_FOUND)
        return LifecycleResult(LifecycleStatus.OK, product)

    @staticmethod
    def form_from_product(product: Product) -> dict[str, Any]:
        """Pre-fill values for the edit form. The image is never pre-filled."""
        return {field: getattr(product, field) for field in FORM_FIELDS}

    # ----- Commands -----

    def create_product(
        self,
        session: Session,
        form: ProductForm,
        image: ImageUpload,
    ) -> LifecycleResult:
        """
        Store the image, then insert the product row.

        The caller has already rejected empty images. `created_at` and the
        storage name prefix come from the same instant.
        """
        created_at = _now_millis()

        stored = self.store.store(image.content, image.filename, moment=created_at)
        if not stored.ok:
            logger.error("Create aborted, image not stored: %s", stored.error)
            return LifecycleResult(LifecycleStatus.STORAGE_FAILED)

        product = Product(
            **form.model_dump(),
            created_at=created_at,
            image_file_name=stored.file_name,
        )

        try:
            product = self.repo.save(session, product)
        except SQLAlchemyError:
            logger.exception("Failed to save new product %r", form.name)
            session.rollback()
            self.store.delete(stored.file_name)
            return LifecycleResult(LifecycleStatus.PERSISTENCE_FAILED)

        logger.info("Created product id=%s image=%s", product.id, product.image_file_name)
        return LifecycleResult(LifecycleStatus.OK, product)

    def update_product(
        self,
        session: Session,
        product: Product,
        form: ProductForm,
        image: ImageUpload | None = None,
    ) -> LifecycleResult:
        """
        Apply an edit to an existing product.

        Flow:
          1. If a non-empty image was uploaded, store it (abort on failure).
          2. Copy the form fields; created_at is never changed.
          3. Save. On failure drop the new file and keep the old one.
          4. On success drop the old file if it was replaced.

        The new file never reuses the current name: an upload with the same
        original name in the same millisecond is shifted by 1 ms.
        """
        old_file = product.image_file_name
        new_file = None

        if image is not None and not image.is_empty:
            moment = _now_millis()
            if generate_filename(image.filename, moment) == old_file:
                moment += timedelta(milliseconds=1)
            stored = self.store.store(image.content, image.filename, moment=moment)
            if not stored.ok:
                logger.error(
                    "Update of product id=%s aborted, image not stored: %s",
                    product.id,
                    stored.error,
                )
                return LifecycleResult(LifecycleStatus.STORAGE_FAILED, product)
            new_file = stored.file_name

        product_id = product.id
        for field, value in form.model_dump().items():
            setattr(product, field, value)
        if new_file:
            product.image_file_name = new_file

        try:
            product = self.repo.save(session, product)
        except SQLAlchemyError:
            logger.exception("Failed to save product id=%s", product_id)
            session.rollback()
            if new_file and new_file != old_file:
                self.store.delete(new_file)
            return LifecycleResult(LifecycleStatus.PERSISTENCE_FAILED, product)

        if new_file and old_file and old_file != new_file:
            self.store.delete(old_file)

        logger.info("Updated product id=%s", product_id)
        return LifecycleResult(LifecycleStatus.OK, product)

    def delete_product(self, session: Session, product_id: int) -> LifecycleResult:
        """
        Delete the product row, then its image file (best-effort).

        A missing product is not an error; it is reported as NOT_FOUND
        and nothing changes. A failed lookup is PERSISTENCE_FAILED.
        """
        found = self.find_product(session, product_id)
        if not found.ok:
            logger.info("Delete skipped, product id=%s: %s", product_id, found.status.value)
            return found

        product = found.product
        image_file = product.image_file_name

        try:
            self.repo.delete(session, product)
        except SQLAlchemyError:
            logger.exception("Failed to delete product id=%s", product_id)
            session.rollback()
            return LifecycleResult(LifecycleStatus.PERSISTENCE_FAILED, product)

        if image_file:
            self.store.delete(image_file)

        logger.info("Deleted product id=%s", product_id)
        return LifecycleResult(LifecycleStatus.OK)
