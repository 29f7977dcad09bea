"""
API v1 Router Module

All v1 endpoints are prefixed with /api/v1/

Primary endpoint: POST /api/v1/generate
- Ideogram generation, Freepik background removal, S3 storage
"""

from fastapi import APIRouter

from cutout.api.v1.generate import router as generate_router
from cutout.api.v1.metrics import router as metrics_router

# Main v1 router
api_v1_router = APIRouter(prefix="/api/v1")

api_v1_router.include_router(generate_router, prefix="/generate", tags=["generation"])
api_v1_router.include_router(metrics_router, tags=["metrics"])
