from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ..db import get_db
from ..deps import get_current_owner, require_writable_owner
from ..models import BusinessOwner
from ..schemas import (
    CustomerCreate,
    CustomerFinancials,
    CustomerList,
    CustomerRead,
    CustomerUpdate,
)
from ..services import customers as customers_service

router = APIRouter()


@router.post("/", response_model=CustomerRead, status_code=status.HTTP_201_CREATED)
def create_customer(
    payload: CustomerCreate,
    owner: BusinessOwner = Depends(require_writable_owner),
    db: Session = Depends(get_db),
) -> CustomerRead:
    return customers_service.create_customer(db, owner, payload)


@router.get("/", response_model=CustomerList)
def list_customers(
    search: str | None = None,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    owner: BusinessOwner = Depends(get_current_owner),
    db: Session = Depends(get_db),
) -> CustomerList:
    rows, total = customers_service.list_customers(db, owner.id, search, page, limit)
    return CustomerList(
        customers=[CustomerRead.model_validate(row) for row in rows],
        total=total,
        page=page,
        limit=limit,
    )


@router.get("/financial-summary", response_model=list[CustomerFinancials])
def financial_summary(
    owner: BusinessOwner = Depends(get_current_owner),
    db: Session = Depends(get_db),
) -> list[CustomerFinancials]:
    return customers_service.financial_summary(db, owner.id)


@router.get("/lookup-by-vendor-code/{code}", response_model=CustomerRead)
def lookup_by_vendor_code(
    code: str,
    owner: BusinessOwner = Depends(get_current_owner),
    db: Session = Depends(get_db),
) -> CustomerRead:
    return customers_service.lookup_by_vendor_code(db, owner.id, code)


@router.get("/{customer_id}", response_model=CustomerRead)
def get_customer(
    customer_id: int,
    owner: BusinessOwner = Depends(get_current_owner),
    db: Session = Depends(get_db),
) -> CustomerRead:
    return customers_service.get_customer(db, owner.id, customer_id)


@router.put("/{customer_id}", response_model=CustomerRead)
def update_customer(
    customer_id: int,
    payload: CustomerUpdate,
    owner: BusinessOwner = Depends(require_writable_owner),
    db: Session = Depends(get_db),
) -> CustomerRead:
    return customers_service.update_customer(db, owner, customer_id, payload)


@router.delete("/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_customer(
    customer_id: int,
    owner: BusinessOwner = Depends(require_writable_owner),
    db: Session = Depends(get_db),
) -> None:
    customers_service.delete_customer(db, owner, customer_id)
