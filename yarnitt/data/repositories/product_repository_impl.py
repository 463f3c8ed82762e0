"""SQLAlchemy implementation of ProductRepository."""

from typing import List, Optional, Sequence

from sqlalchemy import case, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from yarnitt.domain.entities.product import Product
from yarnitt.domain.exceptions import NotFoundError
from yarnitt.domain.repositories.product_repository import ProductRepository

from ..mappers import ProductMapper
from ..models import ProductModel


class SqlAlchemyProductRepository(ProductRepository):
    """
    Catalog store backed by the products table.

    Stock changes are single UPDATE statements guarded in the WHERE
    clause, so two transactions can never both take the last unit.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, product: Product) -> Product:
        self._session.add(ProductMapper.to_persistence(product))
        await self._session.flush()
        return product

    async def find_by_id(self, product_id: str) -> Optional[Product]:
        result = await self._session.execute(
            select(ProductModel)
            .where(ProductModel.id == product_id)
            .execution_options(populate_existing=True)
        )
        model = result.scalar_one_or_none()
        return ProductMapper.to_domain(model) if model else None

    async def find_many_by_ids(self, product_ids: Sequence[str]) -> List[Product]:
        if not product_ids:
            return []
        result = await self._session.execute(
            select(ProductModel)
            .where(ProductModel.id.in_(list(product_ids)))
            .execution_options(populate_existing=True)
        )
        return [ProductMapper.to_domain(model) for model in result.scalars().all()]

    async def conditional_decrement_stock(self, product_id: str, quantity: int) -> Optional[Product]:
        if quantity < 1:
            raise ValueError(f"Quantity must be positive, got: {quantity}")

        result = await self._session.execute(
            update(ProductModel)
            .where(ProductModel.id == product_id, ProductModel.stock >= quantity)
            .values(
                stock=ProductModel.stock - quantity,
                sold=ProductModel.sold + quantity,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            return None
        return await self.find_by_id(product_id)

    async def increment_stock(self, product_id: str, quantity: int) -> Product:
        if quantity < 1:
            raise ValueError(f"Quantity must be positive, got: {quantity}")

        result = await self._session.execute(
            update(ProductModel)
            .where(ProductModel.id == product_id)
            .values(
                stock=ProductModel.stock + quantity,
                sold=case(
                    (ProductModel.sold >= quantity, ProductModel.sold - quantity),
                    else_=0,
                ),
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise NotFoundError("Product", product_id)
        return await self.find_by_id(product_id)
