from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Dict, Any

SEGMENT_NAMES = ("Budget", "General", "Enthusiast", "Professional", "Active Lifestyle")

# Recurring ESG programs a factory can run: name -> (cost per round, ESG points)
ESG_PROGRAMS = {
    "workplace_health_safety": (2_000_000, 200),
    "code_of_ethics": (0, 200),
    "fair_wage_program": (1_000_000, 220),
    "supplier_ethics_program": (1_500_000, 150),
    "water_conservation": (1_500_000, 80),
    "zero_waste_commitment": (2_000_000, 100),
    "circular_economy": (3_000_000, 120),
    "diversity_inclusion": (1_000_000, 90),
    "employee_wellness": (500_000, 60),
    "human_rights_audit": (800_000, 70),
    "transparency_report": (300_000, 50),
    "whistleblower_protection": (200_000, 40),
}

TRAINING_PROGRAMS = ("basic", "advanced", "leadership")


class FactoryDecision(BaseModel):
    efficiency_investment: float = Field(0, ge=0)
    green_investment: float = Field(0, ge=0)
    capacity_expansion: int = Field(0, ge=0)  # additional units per round
    charitable_donation: float = Field(0, ge=0)
    community_investment: float = Field(0, ge=0)
    esg_programs: List[str] = []        # programs to adopt
    drop_esg_programs: List[str] = []

    @field_validator("esg_programs", "drop_esg_programs")
    @classmethod
    def known_programs(cls, v: List[str]) -> List[str]:
        unknown = [p for p in v if p not in ESG_PROGRAMS]
        if unknown:
            raise ValueError(f"unknown ESG programs: {unknown}")
        return sorted(set(v))


class HRDecision(BaseModel):
    hires: int = Field(0, ge=0)
    fires: int = Field(0, ge=0)
    training_program: Optional[str] = None
    salary_multiplier: float = Field(1.0, ge=0.5, le=2.0)
    benefits_budget: float = Field(0, ge=0)

    @field_validator("training_program")
    @classmethod
    def known_training(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in TRAINING_PROGRAMS:
            raise ValueError(f"unknown training program '{v}'")
        return v


class MarketingDecision(BaseModel):
    advertising: Dict[str, float] = {}  # segment -> spend
    branding_investment: float = Field(0, ge=0)
    prices: Dict[str, float] = {}       # product id -> new price

    @field_validator("advertising")
    @classmethod
    def known_segments(cls, v: Dict[str, float]) -> Dict[str, float]:
        for segment, spend in v.items():
            if segment not in SEGMENT_NAMES:
                raise ValueError(f"unknown segment '{segment}'")
            if spend < 0:
                raise ValueError(f"negative advertising spend for '{segment}'")
        return v

    @field_validator("prices")
    @classmethod
    def positive_prices(cls, v: Dict[str, float]) -> Dict[str, float]:
        for product_id, price in v.items():
            if price <= 0:
                raise ValueError(f"price for '{product_id}' must be positive")
        return v


class FinanceDecision(BaseModel):
    loan_request: float = Field(0, ge=0)
    debt_repayment: float = Field(0, ge=0)
    stock_issuance: int = Field(0, ge=0)    # new shares
    share_buyback: int = Field(0, ge=0)
    dividend_per_share: float = Field(0, ge=0)


class NewProductSpec(BaseModel):
    name: str = Field(min_length=1)
    segment: str
    target_quality: float = Field(ge=50, le=100)
    target_features: Dict[str, float] = {}

    @field_validator("segment")
    @classmethod
    def known_segment(cls, v: str) -> str:
        if v not in SEGMENT_NAMES:
            raise ValueError(f"unknown segment '{v}'")
        return v


class ProductImprovement(BaseModel):
    product_id: str
    quality_increase: float = Field(0, ge=0, le=20)
    feature_increase: float = Field(0, ge=0, le=20)


class RDDecision(BaseModel):
    rd_budget: float = Field(0, ge=0)
    new_products: List[NewProductSpec] = []
    improvements: List[ProductImprovement] = []
    discontinue: List[str] = []


class SourcingDecision(BaseModel):
    add_suppliers: List[str] = []
    drop_suppliers: List[str] = []
    contract_volumes: Dict[str, int] = {}
    safety_stock_buffer: Optional[int] = Field(None, ge=0, le=10)

    @field_validator("contract_volumes")
    @classmethod
    def non_negative_volumes(cls, v: Dict[str, int]) -> Dict[str, int]:
        for supplier_id, volume in v.items():
            if volume < 0:
                raise ValueError(f"negative contract volume for '{supplier_id}'")
        return v


class DecisionBundle(BaseModel):
    """Validated decisions for one team and one round."""
    factory: FactoryDecision = FactoryDecision()
    hr: HRDecision = HRDecision()
    marketing: MarketingDecision = MarketingDecision()
    finance: FinanceDecision = FinanceDecision()
    rd: RDDecision = RDDecision()
    sourcing: SourcingDecision = SourcingDecision()


class DecisionSubmission(BaseModel):
    """Raw per-department payload as submitted over the API."""
    factory: Optional[Dict[str, Any]] = None
    hr: Optional[Dict[str, Any]] = None
    marketing: Optional[Dict[str, Any]] = None
    finance: Optional[Dict[str, Any]] = None
    rd: Optional[Dict[str, Any]] = None
    sourcing: Optional[Dict[str, Any]] = None
