# app/repositories/product_repo.py
from sqlmodel import Session, select

from app.models.product import Product


class ProductRepository:
    """
    Data access layer for Product.

    - Pure DB operations (CRUD + queries).
    - No FastAPI, no file handling, no business logic.
    """

    def get_by_id(self, session: Session, product_id: int) -> Product | None:
        return session.get(Product, product_id)

    def list(self, session: Session) -> list[Product]:
        """All products, newest id first."""
        stmt = select(Product).order_by(Product.id.desc())
        return list(session.exec(stmt).all())

    def save(self, session: Session, product: Product) -> Product:
        """Insert a new product or persist changes to an existing one."""
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    def delete(self, session: Session, product: Product) -> None:
        session.delete(product)
        session.commit()
