# restaurant_pos/api/routers/catalog.py
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from restaurant_pos.api.errors import http_error
from restaurant_pos.data.database import get_db
from restaurant_pos.domain.errors import PosError
from restaurant_pos.domain.schemas import (
    CategoryCreate,
    CategoryRead,
    ProductCreate,
    ProductOut,
    ProductRead,
    StockUpdate,
)
from restaurant_pos.services.catalog_service import CatalogService

router = APIRouter(tags=["catalog"])


def get_service(db: Session):
    return CatalogService(db)


@router.get("/categories", response_model=List[CategoryRead])
def list_categories(db: Session = Depends(get_db)):
    return get_service(db).list_categories()


@router.post("/categories", response_model=CategoryRead, status_code=201)
def create_category(payload: CategoryCreate, db: Session = Depends(get_db)):
    return get_service(db).create_category(payload)


@router.get("/products", response_model=List[ProductOut])
def list_products(
    category_id: int | None = Query(None),
    include_unavailable: bool = Query(False),
    db: Session = Depends(get_db),
):
    """
    Terminal menu; admin stock views pass include_unavailable=true.
    """
    return get_service(db).list_products(category_id, include_unavailable)


@router.get("/products/low-stock", response_model=List[ProductOut])
def low_stock_products(db: Session = Depends(get_db)):
    return get_service(db).low_stock_products()


@router.get("/products/{product_id}", response_model=ProductRead)
def get_product(product_id: int, db: Session = Depends(get_db)):
    try:
        return get_service(db).get_product(product_id)
    except PosError as e:
        raise http_error(e)


@router.post("/products", response_model=ProductOut, status_code=201)
def create_product(payload: ProductCreate, db: Session = Depends(get_db)):
    try:
        return get_service(db).create_product(payload)
    except PosError as e:
        raise http_error(e)


@router.patch("/products/{product_id}/stock", response_model=ProductOut)
def update_stock(product_id: int, payload: StockUpdate, db: Session = Depends(get_db)):
    try:
        return get_service(db).update_stock(product_id, payload.stock_quantity)
    except (PosError, ValueError) as e:
        raise http_error(e)
