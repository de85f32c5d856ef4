"""
Pydantic models for strict JSON schema enforcement.
Wire names are the camelCase keys of the drug repurposing document;
Python attributes are snake_case aliases of them.
"""
from typing import Annotated, Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, Strict
from pydantic.alias_generators import to_camel

NDC_PATTERN = r"^[0-9]{4}-[0-9]{4}-[0-9]{2}$"
ONTOLOGY_TERM_PATTERN = r"^[A-Za-z0-9]+:[0-9]+$"

# Ordered as they appear in the dashboard columns
COMPONENT_FIELDS = (
    "biological_suitability",
    "unmet_medical_need",
    "economic_suitability",
    "market_size",
    "competitive_advantage",
    "regulatory_feasibility",
    "clinical_risk",
)

# Lower raw value is better for these
INVERTED_COMPONENTS = frozenset({"clinical_risk"})

ComponentScore = Annotated[float, Strict(), Field(ge=0, le=10)]
Weight = Annotated[float, Strict(), Field(ge=0, le=1)]
DisplayName = Annotated[str, Field(min_length=1)]


class DrugDiseasePair(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, extra="forbid", frozen=True)

    id: str
    drug_name: DisplayName
    drug_ndc_code: str = Field(pattern=NDC_PATTERN)
    # may be omitted, but a present value must be a string
    pubchem_cid: str = None
    disease_name: DisplayName
    disease_ontology_term: str = Field(pattern=ONTOLOGY_TERM_PATTERN)

    # Component scores, 0-10; absent and null both mean "not scored"
    biological_suitability: Optional[ComponentScore] = None
    unmet_medical_need: Optional[ComponentScore] = None
    economic_suitability: Optional[ComponentScore] = None
    market_size: Optional[ComponentScore] = None
    competitive_advantage: Optional[ComponentScore] = None
    regulatory_feasibility: Optional[ComponentScore] = None
    clinical_risk: Optional[ComponentScore] = None  # inverted: lower is better

    # Always recomputed by the scorer; the input value is never used for ranking
    composite_prioritization_score: Optional[Annotated[float, Strict()]] = None
    narrative: str

    def component_scores(self) -> dict:
        """Present component scores keyed by attribute name."""
        return {
            name: getattr(self, name)
            for name in COMPONENT_FIELDS
            if getattr(self, name) is not None
        }

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_unset=True)


class DrugRepurposingData(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, frozen=True)

    drug_disease_pairs: List[DrugDiseasePair]

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_unset=True)


class ComponentWeights(BaseModel):
    """One coefficient in [0, 1] per component score."""
    model_config = ConfigDict(alias_generator=to_camel, extra="forbid", frozen=True)

    biological_suitability: Weight = 1.0
    unmet_medical_need: Weight = 1.0
    economic_suitability: Weight = 1.0
    market_size: Weight = 1.0
    competitive_advantage: Weight = 1.0
    regulatory_feasibility: Weight = 1.0
    clinical_risk: Weight = 1.0

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)


DEFAULT_WEIGHTS = ComponentWeights()


class ValidationIssue(BaseModel):
    path: str
    message: str
    kind: str  # missing-required | wrong-type | below-minimum | above-maximum | pattern-mismatch | unexpected-property | other
    params: dict = Field(default_factory=dict)


class ValidationResult(BaseModel):
    valid: bool
    errors: List[ValidationIssue] = Field(default_factory=list)
    data: Optional[DrugRepurposingData] = None


class WeightsValidationResult(BaseModel):
    valid: bool
    errors: List[ValidationIssue] = Field(default_factory=list)
    weights: Optional[ComponentWeights] = None


class ScoreColumn(BaseModel):
    key: str
    display_name: str
    description: str
    is_inverted: bool = False


class ScoreRequest(BaseModel):
    """Body of POST /score; both parts are validated separately."""
    data: Any = None
    weights: Any = None
