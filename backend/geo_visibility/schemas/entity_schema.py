from typing import List, Optional

from pydantic import BaseModel, Field


class EntitySnapshot(BaseModel):
    """Profile of the business whose AI visibility is being measured.

    Immutable input to both the evaluation and the competitor pipelines.
    """

    business_name: str = Field(
        ...,
        min_length=1,
        alias="businessName",
        description="Display name of the target business",
    )
    industry: str = Field(
        ...,
        description="Industry or market niche, e.g. 'Used Car Dealership'",
    )
    region: str = Field(
        ...,
        description="Where the business operates, e.g. 'Malmö, Sweden'",
    )
    website: Optional[str] = Field(
        default=None,
        description="Public website URL",
    )
    description_specs: List[str] = Field(
        default_factory=list,
        alias="descriptionSpecs",
        description="Ordered factual statements about the business",
    )
    strategic_focus: List[str] = Field(
        default_factory=list,
        alias="strategicFocus",
        description="Core areas the business emphasises",
    )

    class Config:
        populate_by_name = True
        frozen = True
        json_schema_extra = {
            "example": {
                "businessName": "Malmö Car Center",
                "industry": "Used Car Dealership",
                "region": "Malmö, Sweden",
                "website": "https://example.com",
                "descriptionSpecs": [
                    "Sells used cars",
                    "Offers financing",
                    "Family owned since 1990",
                ],
            }
        }
