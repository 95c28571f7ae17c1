"""Formation document model (``formations`` collection)."""

from typing import Any, Dict, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from formation_api.db.mongo import as_object_id, stringify_id


class Formation(BaseModel):
    """
    One academic program offered by an establishment.

    Stored with camelCase keys, as written by the catalog import scripts.
    Only ``id`` is guaranteed; ``has_detailed_info`` tells whether the
    enrichment fields (duration, cost, website, ...) were filled in.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("_id", "id"),
        serialization_alias="id",
    )

    # Establishment
    establishment_status: Optional[str] = None
    establishment_name: Optional[str] = None
    department: Optional[str] = None
    region: Optional[str] = None
    academy: Optional[str] = None
    commune: Optional[str] = None

    # Program
    program: Optional[str] = None
    selectivity: Optional[str] = None

    # Admissions
    candidate_count: Optional[int] = None
    admitted_bac_general: Optional[int] = None
    admitted_bac_techno: Optional[int] = None
    admitted_bac_pro: Optional[int] = None

    # Share of final-year students who could receive an offer, per track
    general_terminal_offer_percentage: Optional[str] = None
    techno_terminal_offer_percentage: Optional[str] = None
    professional_terminal_offer_percentage: Optional[str] = None

    # Enrichment
    duration: Optional[str] = None
    cost: Optional[str] = None
    private_public_status: Optional[str] = None
    domains_offered: Optional[str] = None
    website: Optional[str] = None
    student_life: Optional[str] = None
    associations: Optional[str] = None
    residence_options: Optional[str] = None
    admission_process: Optional[str] = None
    atmosphere: Optional[str] = None
    career_prospects: Optional[str] = None
    housing_info: Optional[str] = None
    alternance_available: Optional[str] = None
    orientation_advice: Optional[str] = None

    has_detailed_info: Optional[bool] = None

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "Formation":
        return cls.model_validate(stringify_id(doc))

    def to_document(self) -> Dict[str, Any]:
        """Serialize for storage, dropping unset fields."""
        doc = self.model_dump(by_alias=True, exclude_none=True)
        formation_id = doc.pop("id", None)
        if formation_id is not None:
            doc["_id"] = as_object_id(formation_id)
        return doc

    def to_response(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")
