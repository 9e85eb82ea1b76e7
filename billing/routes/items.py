from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ..db import get_db
from ..deps import get_current_owner, require_writable_owner
from ..models import BusinessOwner
from ..schemas import ItemCreate, ItemPricing, ItemRead, ItemUpdate
from ..services import items as items_service

router = APIRouter()


@router.post("/", response_model=ItemRead, status_code=status.HTTP_201_CREATED)
def create_item(
    payload: ItemCreate,
    owner: BusinessOwner = Depends(require_writable_owner),
    db: Session = Depends(get_db),
) -> ItemRead:
    return items_service.create_item(db, owner, payload)


@router.get("/", response_model=list[ItemRead])
def list_items(
    search: str | None = None,
    status_filter: str | None = Query(None, alias="status"),
    category: str | None = None,
    owner: BusinessOwner = Depends(get_current_owner),
    db: Session = Depends(get_db),
) -> list[ItemRead]:
    return items_service.list_items(db, owner.id, search, status_filter, category)


@router.get("/lookup/{code}", response_model=ItemRead)
def lookup_item(
    code: str,
    owner: BusinessOwner = Depends(get_current_owner),
    db: Session = Depends(get_db),
) -> ItemRead:
    return items_service.lookup_item(db, owner.id, code)


@router.get("/{item_id}", response_model=ItemRead)
def get_item(
    item_id: int,
    owner: BusinessOwner = Depends(get_current_owner),
    db: Session = Depends(get_db),
) -> ItemRead:
    return items_service.get_item(db, owner.id, item_id)


@router.get("/{item_id}/pricing", response_model=ItemPricing)
def item_pricing(
    item_id: int,
    quantity: str = "1",
    owner: BusinessOwner = Depends(get_current_owner),
    db: Session = Depends(get_db),
) -> ItemPricing:
    item = items_service.get_item(db, owner.id, item_id)
    return items_service.price_for_quantity(item, quantity)


@router.put("/{item_id}", response_model=ItemRead)
def update_item(
    item_id: int,
    payload: ItemUpdate,
    owner: BusinessOwner = Depends(require_writable_owner),
    db: Session = Depends(get_db),
) -> ItemRead:
    return items_service.update_item(db, owner, item_id, payload)


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_item(
    item_id: int,
    owner: BusinessOwner = Depends(require_writable_owner),
    db: Session = Depends(get_db),
) -> None:
    items_service.delete_item(db, owner, item_id)
