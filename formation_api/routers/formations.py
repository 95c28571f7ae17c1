"""
Formations API - public catalog browsing.

Paging is zero-based (``page=0`` is the first page). Every paged endpoint
answers ``{content, totalElements, totalPages, number, size}`` inside the
standard envelope.
"""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Query

from formation_api.api.deps import get_formation_service
from formation_api.config import settings
from formation_api.core.exceptions import FormationNotFoundError
from formation_api.schemas.common import ApiResponse
from formation_api.services.formation_query import SortDirection
from formation_api.services.formation_service import FormationService

logger = structlog.get_logger(__name__)
router = APIRouter(prefix="/api/formations", tags=["Formations"])


def page_param():
    return Query(0, ge=0, description="Page index (starts at 0)")


def size_param():
    return Query(
        settings.DEFAULT_PAGE_SIZE,
        ge=1,
        le=settings.MAX_PAGE_SIZE,
        description="Items per page",
    )


@router.get("/all")
async def get_all_paged(
    page: int = page_param(),
    size: int = size_param(),
    service: FormationService = Depends(get_formation_service),
):
    """
    Paged list of all formations.

    Example: ``GET /api/formations/all?page=0&size=10``
    """
    result = await service.find_all_paged(page, size)
    return ApiResponse.success("Formations retrieved successfully", result.to_response())


@router.get("/search")
async def search_formations(
    query: str = Query(..., description="Part of the establishment name"),
    service: FormationService = Depends(get_formation_service),
):
    """First few establishments whose name contains ``query`` (case-insensitive)."""
    formations = await service.search_formations(query)
    return ApiResponse.success(
        "Formations retrieved successfully", [f.to_response() for f in formations]
    )


@router.get("/search/region")
async def search_by_region(
    value: str = Query(..., description="Region, e.g. Île-de-France"),
    page: int = page_param(),
    size: int = size_param(),
    service: FormationService = Depends(get_formation_service),
):
    result = await service.search_by_region(value, page, size)
    return ApiResponse.success("Formations retrieved successfully", result.to_response())


@router.get("/search/status")
async def search_by_establishment_status(
    value: str = Query(..., description="Establishment status, e.g. public"),
    page: int = page_param(),
    size: int = size_param(),
    service: FormationService = Depends(get_formation_service),
):
    result = await service.search_by_establishment_status(value, page, size)
    return ApiResponse.success("Formations retrieved successfully", result.to_response())


@router.get("/search/program")
async def search_by_program(
    value: str = Query(..., description="Program, e.g. CPGE"),
    page: int = page_param(),
    size: int = size_param(),
    service: FormationService = Depends(get_formation_service),
):
    result = await service.search_by_program(value, page, size)
    return ApiResponse.success("Formations retrieved successfully", result.to_response())


@router.get("/search/department")
async def search_by_department(
    value: str = Query(..., description="Department name"),
    page: int = page_param(),
    size: int = size_param(),
    service: FormationService = Depends(get_formation_service),
):
    result = await service.search_by_department(value, page, size)
    return ApiResponse.success("Formations retrieved successfully", result.to_response())


@router.get("/advancedSearch")
async def advanced_search(
    region: Optional[str] = Query(None),
    department: Optional[str] = Query(None),
    establishment_status: Optional[str] = Query(None, alias="establishmentStatus"),
    program: Optional[str] = Query(None),
    bac_type: Optional[str] = Query(None, alias="bacType", description="general, techno or pro"),
    has_detailed_info: Optional[bool] = Query(None, alias="hasDetailedInfo"),
    alternance_available: Optional[str] = Query(None, alias="alternanceAvailable"),
    page: int = page_param(),
    size: int = size_param(),
    sort_by: str = Query("id", alias="sortBy"),
    direction: str = Query("ASC", description="ASC or DESC"),
    service: FormationService = Depends(get_formation_service),
):
    """
    Search with any combination of filters, all of which must match.

    Example:
    ```
    GET /api/formations/advancedSearch?region=Île-de-France&program=CPGE&bacType=general&sortBy=candidateCount&direction=DESC
    ```
    """
    result = await service.advanced_search(
        region=region,
        department=department,
        establishment_status=establishment_status,
        program=program,
        bac_type=bac_type,
        has_detailed_info=has_detailed_info,
        alternance_available=alternance_available,
        page=page,
        size=size,
        sort_by=sort_by,
        direction=SortDirection.parse(direction),
    )
    return ApiResponse.success("Formations retrieved successfully", result.to_response())


@router.get("/rank")
async def rank_formations(
    sort_by: str = Query("capacity", alias="sortBy"),
    direction: str = Query("DESC"),
    page: int = page_param(),
    size: int = size_param(),
    service: FormationService = Depends(get_formation_service),
):
    """Whole catalog ordered by one field, e.g. ``candidateCount``."""
    result = await service.rank_formations(sort_by, SortDirection.parse(direction), page, size)
    return ApiResponse.success("Formations ranked successfully", result.to_response())


@router.get("/suggestions")
async def get_field_suggestions(
    field: str = Query(..., description="Stored field name, e.g. establishmentStatus"),
    query: Optional[str] = Query(None, description="Prefix, matched ignoring case and accents"),
    service: FormationService = Depends(get_formation_service),
):
    """
    Autocomplete values for one field.

    Without ``query`` a handful of values is returned; with it, every value
    starting with the prefix.
    """
    suggestions = await service.get_field_suggestions(field, query)
    return ApiResponse.success("Suggestions retrieved successfully", suggestions)


@router.get("/{formation_id}")
async def get_formation_by_id(
    formation_id: str,
    service: FormationService = Depends(get_formation_service),
):
    formation = await service.find_by_id(formation_id)
    if formation is None:
        logger.info("formation_not_found", formation_id=formation_id)
        raise FormationNotFoundError(f"Formation not found: {formation_id}")
    return ApiResponse.success("Formation retrieved successfully", formation.to_response())
