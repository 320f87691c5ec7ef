"""
HTTP routes for the KSSV API, one module per area.
"""

from __future__ import annotations

from fastapi import APIRouter

from kssv.routes import admins, cases, content, intake, programs, workplans
from kssv.schemas import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
def health():
    return HealthResponse(status="ok")


router.include_router(content.router)
router.include_router(intake.router)
router.include_router(admins.router)
router.include_router(programs.router)
router.include_router(workplans.router)
router.include_router(cases.router)
