"""
System endpoints - validation report, statistics, hierarchy dump and repairs.
"""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from starnav.api.models import ObjectSummary, RepairResponse, ValidationResponse

router = APIRouter(prefix="/api/system", tags=["system"])


def _get_validator():
    from starnav.api.main import app_state
    return app_state["validator"]


def _get_system():
    from starnav.api.main import app_state
    return app_state["system"]


@router.get("/validation", response_model=ValidationResponse)
async def validation():
    """Re-run validation over the loaded snapshot."""
    report = _get_validator().validate()
    return ValidationResponse(**report.to_dict())


@router.get("/statistics")
async def statistics():
    """Object counts, depth histogram and children per parent."""
    return _get_validator().generate_statistics()


@router.get("/hierarchy", response_class=PlainTextResponse)
async def hierarchy():
    """Indented text dump of the hierarchy."""
    return _get_validator().generate_hierarchy_text()


@router.get("/disconnected", response_model=list[ObjectSummary])
async def disconnected():
    """Objects whose parent chain does not reach a star."""
    return [ObjectSummary.from_object(obj) for obj in _get_validator().find_disconnected()]


@router.get("/repairs", response_model=list[RepairResponse])
async def repairs():
    """Parent repairs applied while building the snapshot."""
    return [RepairResponse(**decision.to_dict()) for decision in _get_system().repairs]
