"""Formation catalog schemas."""

import math
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from formation_api.models.formation import Formation


class FormationPage(BaseModel):
    """One page of formations plus the total number of matches."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    content: List[Formation] = Field(default_factory=list)
    total_elements: int = 0
    total_pages: int = 0
    number: int = 0
    size: int = 0

    @classmethod
    def of(cls, content: List[Formation], total: int, page: int, size: int) -> "FormationPage":
        total_pages = math.ceil(total / size) if size > 0 else 0
        return cls(
            content=content,
            total_elements=total,
            total_pages=total_pages,
            number=page,
            size=size,
        )

    def to_response(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")
