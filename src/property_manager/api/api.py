from fastapi import APIRouter

from property_manager.api.endpoints.photo import property_photos_router, work_order_photos_router

api_router = APIRouter()
api_router.include_router(property_photos_router, prefix="/properties", tags=["Property Photos"])
api_router.include_router(work_order_photos_router, prefix="/work-orders", tags=["Work Order Photos"])
