from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ..db import get_db
from ..deps import get_current_owner, require_writable_owner
from ..models import BusinessOwner, Invoice
from ..schemas import (
    InvoiceCreate,
    InvoiceList,
    InvoiceRead,
    InvoiceUpdate,
    PaymentCreate,
    PaymentRead,
    StatusUpdate,
)
from ..services import invoices as invoices_service

router = APIRouter()


def _read(invoice: Invoice, legacy: bool = False) -> InvoiceRead:
    data = InvoiceRead.model_validate(invoice)
    if legacy:
        data.customer_info = invoices_service.customer_info_v1(invoice)
    return data


@router.post("/", response_model=InvoiceRead, status_code=status.HTTP_201_CREATED)
def create_invoice(
    payload: InvoiceCreate,
    owner: BusinessOwner = Depends(require_writable_owner),
    db: Session = Depends(get_db),
) -> InvoiceRead:
    return _read(invoices_service.create_invoice(db, owner, payload))


@router.get("/", response_model=InvoiceList)
def list_invoices(
    invoice_type: str | None = Query(None, alias="type"),
    tag: str | None = None,
    status_filter: str | None = Query(None, alias="status"),
    payment_status: str | None = None,
    customer_id: int | None = None,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    owner: BusinessOwner = Depends(get_current_owner),
    db: Session = Depends(get_db),
) -> InvoiceList:
    rows, total = invoices_service.list_invoices(
        db,
        owner.id,
        invoice_type=invoice_type,
        tag=tag,
        status=status_filter,
        payment_status=payment_status,
        customer_id=customer_id,
        page=page,
        limit=limit,
    )
    return InvoiceList(
        invoices=[_read(row) for row in rows], total=total, page=page, limit=limit
    )


@router.get("/{invoice_id}", response_model=InvoiceRead)
def get_invoice(
    invoice_id: int,
    legacy: bool = False,
    owner: BusinessOwner = Depends(get_current_owner),
    db: Session = Depends(get_db),
) -> InvoiceRead:
    return _read(invoices_service.get_invoice(db, owner.id, invoice_id), legacy)


@router.put("/{invoice_id}", response_model=InvoiceRead)
def update_invoice(
    invoice_id: int,
    payload: InvoiceUpdate,
    owner: BusinessOwner = Depends(require_writable_owner),
    db: Session = Depends(get_db),
) -> InvoiceRead:
    return _read(invoices_service.update_invoice(db, owner, invoice_id, payload))


@router.put("/{invoice_id}/status", response_model=InvoiceRead)
def change_status(
    invoice_id: int,
    payload: StatusUpdate,
    owner: BusinessOwner = Depends(require_writable_owner),
    db: Session = Depends(get_db),
) -> InvoiceRead:
    return _read(
        invoices_service.change_status(db, owner, invoice_id, payload.status)
    )


@router.post(
    "/{invoice_id}/payments",
    response_model=InvoiceRead,
    status_code=status.HTTP_201_CREATED,
)
def record_payment(
    invoice_id: int,
    payload: PaymentCreate,
    owner: BusinessOwner = Depends(require_writable_owner),
    db: Session = Depends(get_db),
) -> InvoiceRead:
    return _read(invoices_service.add_payment(db, owner, invoice_id, payload))


@router.get("/{invoice_id}/payments", response_model=list[PaymentRead])
def list_payments(
    invoice_id: int,
    owner: BusinessOwner = Depends(get_current_owner),
    db: Session = Depends(get_db),
) -> list[PaymentRead]:
    return invoices_service.list_payments(db, owner.id, invoice_id)


@router.delete("/{invoice_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_invoice(
    invoice_id: int,
    owner: BusinessOwner = Depends(require_writable_owner),
    db: Session = Depends(get_db),
) -> None:
    invoices_service.delete_invoice(db, owner, invoice_id)
