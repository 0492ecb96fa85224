# shopapi/routes/products.py
from typing import List

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.orm import Session

from shopapi.database import get_db
from shopapi.models.product import Product
from shopapi.models.users import User
from shopapi.repositories.catalog import CatalogStore
from shopapi.schemas.product import ProductCreate, ProductOut
from shopapi.utils.audit import write_log, client_ip
from shopapi.utils.tokenJWT import get_current_user, role_required

router = APIRouter(prefix="/products", tags=["Products"])

admin_required = role_required("admin")


@router.get("", response_model=List[ProductOut])
def list_products(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return CatalogStore(db).list()


@router.get("/{product_id}", response_model=ProductOut)
def get_product(product_id: str, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return CatalogStore(db).get_by_id(product_id)


@router.post("", response_model=ProductOut, status_code=status.HTTP_201_CREATED)
def create_product(
    payload: ProductCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    product = CatalogStore(db).create(Product(**payload.model_dump()))
    db.commit()
    db.refresh(product)

    write_log(db, user_id=current_user.id, action="PRODUCT_CREATE", resource="products", status="SUCCESS",
              ip=client_ip(request), meta={"product_id": product.id, "stock": product.stock_quantity})
    return product


# Full-row update, stock included
@router.put("/{product_id}", response_model=ProductOut)
def update_product(
    product_id: str,
    payload: ProductCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    product = CatalogStore(db).update(product_id, **payload.model_dump())
    db.commit()
    db.refresh(product)

    write_log(db, user_id=current_user.id, action="PRODUCT_UPDATE", resource="products", status="SUCCESS",
              ip=client_ip(request), meta={"product_id": product.id, "stock": product.stock_quantity})
    return product


# Products referenced by any order line cannot be deleted
@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_product(
    product_id: str,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    CatalogStore(db).delete(product_id)
    db.commit()

    write_log(db, user_id=current_user.id, action="PRODUCT_DELETE", resource="products", status="SUCCESS",
              ip=client_ip(request), meta={"product_id": product_id})
    return Response(status_code=status.HTTP_204_NO_CONTENT)
