from fastapi import APIRouter
from kpi_dashboard.routers import admin, auth, kpi, mindy, reports

# Central API router hub: feature routers are aggregated here
# and main.py only imports this single hub.
api_router = APIRouter()

api_router.include_router(auth.router, tags=["Authentication"])
api_router.include_router(kpi.router, tags=["KPI"])
api_router.include_router(admin.router, tags=["Administration"])
api_router.include_router(mindy.router, tags=["Mindy"])
api_router.include_router(reports.router, tags=["Reports"])
