from fastapi import APIRouter
from app.api.v1.routes.public import router as public_router
from app.api.v1.routes.bookings import router as bookings_router
from app.api.v1.routes.payments import router as payments_router
from app.api.v1.routes.owner import router as owner_router
from app.api.v1.routes.admin import router as admin_router

api_router = APIRouter(prefix="/api/v1")
# public first: /bookings/price-preview must win over /bookings/{booking_id}
api_router.include_router(public_router)
api_router.include_router(bookings_router)
api_router.include_router(payments_router)
api_router.include_router(owner_router)
api_router.include_router(admin_router)
