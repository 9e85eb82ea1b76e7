from fastapi import APIRouter

from .admin import router as admin_router
from .auth import router as auth_router
from .bank_accounts import router as bank_accounts_router
from .customers import router as customers_router
from .invoices import router as invoices_router
from .items import router as items_router
from .reports import router as reports_router
from .settings import router as settings_router

api_router = APIRouter()
api_router.include_router(auth_router, prefix="/auth", tags=["auth"])
api_router.include_router(customers_router, prefix="/customers", tags=["customers"])
api_router.include_router(items_router, prefix="/items", tags=["items"])
api_router.include_router(settings_router, prefix="/settings", tags=["settings"])
api_router.include_router(
    bank_accounts_router, prefix="/bank-accounts", tags=["bank-accounts"]
)
api_router.include_router(invoices_router, prefix="/invoices", tags=["invoices"])
api_router.include_router(reports_router, tags=["reports"])
api_router.include_router(admin_router, prefix="/admin", tags=["admin"])
