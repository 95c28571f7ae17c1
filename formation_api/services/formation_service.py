"""Formation catalog: paging, search, ranking and field suggestions."""

import logging
import re
from typing import List, Optional

from formation_api.db.mongo import as_object_id
from formation_api.models.formation import Formation
from formation_api.schemas.formation import FormationPage
from formation_api.services.formation_query import (
    FormationQuery,
    SortDirection,
    build_advanced_query,
    filter_suggestions,
)

logger = logging.getLogger(__name__)


class FormationService:
    """Runs catalog queries against the ``formations`` collection."""

    def __init__(self, collection, suggestion_limit: int = 5, search_limit: int = 5):
        self.collection = collection
        self.suggestion_limit = suggestion_limit
        self.search_limit = search_limit

    async def execute(self, query: FormationQuery) -> FormationPage:
        """
        Fetch one page for ``query``.

        The total is a separate count over the same filter, without the
        page window.
        """
        mongo_filter = query.to_filter()
        total = await self.collection.count_documents(mongo_filter)

        cursor = (
            self.collection.find(mongo_filter)
            .sort(query.to_sort())
            .skip(query.skip)
            .limit(query.size)
        )
        docs = await cursor.to_list(length=query.size)

        logger.debug(f"Formation query {mongo_filter} matched {total} documents")
        return FormationPage.of(
            [Formation.from_document(doc) for doc in docs],
            total=total,
            page=query.page,
            size=query.size,
        )

    async def find_all_paged(self, page: int, size: int) -> FormationPage:
        return await self.execute(FormationQuery(page=page, size=size))

    async def find_by_id(self, formation_id: str) -> Optional[Formation]:
        doc = await self.collection.find_one({"_id": as_object_id(formation_id)})
        return Formation.from_document(doc) if doc else None

    async def search_by_field(self, field: str, value: str, page: int, size: int) -> FormationPage:
        """Exact match on a single field, paged."""
        return await self.execute(FormationQuery(page=page, size=size).where(field, value))

    async def search_by_region(self, region: str, page: int, size: int) -> FormationPage:
        return await self.search_by_field("region", region, page, size)

    async def search_by_establishment_status(self, status: str, page: int, size: int) -> FormationPage:
        return await self.search_by_field("establishmentStatus", status, page, size)

    async def search_by_program(self, program: str, page: int, size: int) -> FormationPage:
        return await self.search_by_field("program", program, page, size)

    async def search_by_department(self, department: str, page: int, size: int) -> FormationPage:
        return await self.search_by_field("department", department, page, size)

    async def advanced_search(
        self,
        region: Optional[str] = None,
        department: Optional[str] = None,
        establishment_status: Optional[str] = None,
        program: Optional[str] = None,
        bac_type: Optional[str] = None,
        has_detailed_info: Optional[bool] = None,
        alternance_available: Optional[str] = None,
        page: int = 0,
        size: int = 10,
        sort_by: Optional[str] = None,
        direction: SortDirection = SortDirection.ASC,
    ) -> FormationPage:
        query = build_advanced_query(
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
            direction=direction,
        )
        return await self.execute(query)

    async def rank_formations(
        self,
        sort_by: Optional[str],
        direction: SortDirection,
        page: int,
        size: int,
    ) -> FormationPage:
        """Whole catalog ordered by one field."""
        return await self.execute(
            FormationQuery(sort_by=sort_by or "id", direction=direction, page=page, size=size)
        )

    async def search_formations(self, query: str) -> List[Formation]:
        """First matches whose establishment name contains ``query``, ignoring case."""
        pattern = re.escape(query)
        cursor = self.collection.find(
            {"establishmentName": {"$regex": pattern, "$options": "i"}}
        ).limit(self.search_limit)
        docs = await cursor.to_list(length=self.search_limit)
        return [Formation.from_document(doc) for doc in docs]

    async def get_field_suggestions(self, field: str, query: Optional[str]) -> List[str]:
        """
        Distinct values of ``field`` for autocomplete.

        ``field`` is passed to the store as is; an unknown field simply has
        no distinct values.
        """
        values = await self.collection.distinct(field)
        return filter_suggestions(values, query, limit=self.suggestion_limit)

    async def save_formation(self, formation: Formation) -> Formation:
        doc = formation.to_document()
        if "_id" not in doc:
            result = await self.collection.insert_one(doc)
            return formation.model_copy(update={"id": str(result.inserted_id)})
        await self.collection.replace_one({"_id": doc["_id"]}, doc, upsert=True)
        return formation

    async def save_all(self, formations: List[Formation]) -> List[Formation]:
        return [await self.save_formation(f) for f in formations]

    @staticmethod
    def compute_numeric_acceptance_rate(formation: Formation) -> Optional[float]:
        """Admitted (all bac types) over candidates; ``None`` without candidates."""
        if not formation.candidate_count:
            return None
        total_admitted = sum(
            count or 0
            for count in (
                formation.admitted_bac_general,
                formation.admitted_bac_techno,
                formation.admitted_bac_pro,
            )
        )
        return total_admitted / formation.candidate_count
