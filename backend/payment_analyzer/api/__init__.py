# backend/payment_analyzer/api/__init__.py
from __future__ import annotations

from fastapi import APIRouter

from .analysis import router as analysis_router

api_router = APIRouter()
api_router.include_router(analysis_router)
