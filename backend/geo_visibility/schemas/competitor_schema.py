from typing import Any, Dict, List, Literal, Optional, Set

from pydantic import BaseModel, Field

from .entity_schema import EntitySnapshot

CompetitorType = Literal["direct", "indirect", "market_leader", "emerging"]
GeographicMatch = Literal["local", "regional", "national", "global"]
ServiceMatch = Literal["high", "medium", "low"]


class RawCandidate(BaseModel):
    """One competitor name as reported by a single, untrusted source."""

    name: str
    source: str = Field(..., description="website | market_intelligence | competitive_landscape")
    type: Optional[CompetitorType] = None
    reason: str = ""
    confidence_tier: Optional[str] = Field(
        default=None,
        description="high/medium/low for market intelligence, market_leader/emerging for the landscape",
    )
    geographic_match: Optional[GeographicMatch] = None
    service_match: Optional[ServiceMatch] = None
    country_match: Optional[bool] = None


class CompetitorCandidate(BaseModel):
    """A merged competitor. At most one live candidate per ``normalized_key``."""

    name: str = Field(..., description="Original casing kept for display")
    normalized_key: str
    type: CompetitorType = "direct"
    reason: str = ""
    confidence: float = Field(..., ge=0.0, le=1.0)
    sources: Set[str] = Field(default_factory=set)
    geographic_match: Optional[GeographicMatch] = None
    service_match: Optional[ServiceMatch] = None
    country_match: bool = False
    relevance_score: float = Field(default=0.0, ge=0.0, le=1.0)

    def to_output(self) -> Dict[str, Any]:
        """JSON shape handed to the persistence layer."""
        return {
            "name": self.name,
            "type": self.type,
            "reason": self.reason,
            "confidence": round(self.confidence, 2),
            "geographicMatch": self.geographic_match,
            "serviceMatch": self.service_match,
            "sources": sorted(self.sources),
        }


class ValidationVerdict(BaseModel):
    """Validator decision for one candidate name."""

    original_name: str = Field(..., alias="name")
    status: Literal["valid", "invalid"]
    reason: str = ""

    class Config:
        populate_by_name = True


class GeoContext(BaseModel):
    """Geographic profile of the target business used for relevance weighting."""

    country: Optional[str] = None
    is_country_specific: bool = Field(default=False, alias="isCountrySpecific")
    local_weight: float = Field(default=0.0, ge=0.0, le=1.0, alias="localWeight")
    regional_weight: float = Field(default=0.0, ge=0.0, le=1.0, alias="regionalWeight")
    national_weight: float = Field(default=0.0, ge=0.0, le=1.0, alias="nationalWeight")

    class Config:
        populate_by_name = True


class CompetitorResolveRequest(BaseModel):
    """Request body for POST /competitors/resolve."""

    snapshot: EntitySnapshot
    website_mentions: List[str] = Field(default_factory=list, alias="websiteMentions")
    include_llm_sources: bool = Field(default=True, alias="includeLlmSources")

    class Config:
        populate_by_name = True


class CompetitorResolveResponse(BaseModel):
    competitors: List[Dict[str, Any]]
    count: int
