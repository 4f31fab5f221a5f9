"""Per-team decision sanitizing.

A malformed or missing department never aborts the round: that department
falls back to its no-action default and the team gets a warning.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ValidationError

from ..schemas.decisions import (
    DecisionBundle,
    FactoryDecision,
    FinanceDecision,
    HRDecision,
    MarketingDecision,
    RDDecision,
    SourcingDecision,
)
from .supply_chain_engine import SourcingPlan

logger = logging.getLogger(__name__)

DEPARTMENT_MODELS = {
    "factory": FactoryDecision,
    "hr": HRDecision,
    "marketing": MarketingDecision,
    "finance": FinanceDecision,
    "rd": RDDecision,
    "sourcing": SourcingDecision,
}


@dataclass
class SanitizedDecisions:
    team_id: str
    bundle: DecisionBundle
    substituted: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


class DecisionSanitizer:

    @classmethod
    def sanitize(cls, team_id: str, raw: Optional[Any]) -> SanitizedDecisions:
        """Validate each department independently.

        Args:
            team_id: Team the decisions belong to
            raw: DecisionBundle, dict of department payloads, or None

        Returns:
            SanitizedDecisions with a usable bundle and substitution warnings
        """
        if isinstance(raw, DecisionBundle):
            return SanitizedDecisions(team_id=team_id, bundle=raw)

        if raw is None or not isinstance(raw, dict):
            reason = "No decisions submitted" if raw is None else "Decision payload is not an object"
            logger.warning(f"Team {team_id}: {reason.lower()}, using defaults")
            return SanitizedDecisions(
                team_id=team_id,
                bundle=DecisionBundle(),
                substituted=list(DEPARTMENT_MODELS),
                warnings=[f"{reason}; defaults used for every department"],
            )

        result = SanitizedDecisions(team_id=team_id, bundle=DecisionBundle())
        for key in sorted(set(raw) - set(DEPARTMENT_MODELS)):
            result.warnings.append(f"Ignored unknown department '{key}'")

        departments: Dict[str, BaseModel] = {}
        for department, model in DEPARTMENT_MODELS.items():
            payload = raw.get(department)
            if payload is None:
                departments[department] = model()
                result.substituted.append(department)
                result.warnings.append(f"No {department} decisions submitted; default used")
                continue
            try:
                departments[department] = model.model_validate(payload)
            except ValidationError as e:
                departments[department] = model()
                result.substituted.append(department)
                first = e.errors()[0].get("msg", "invalid") if e.errors() else "invalid"
                result.warnings.append(f"Invalid {department} decisions ({first}); default used")
                logger.warning(f"Team {team_id}: {department} decisions rejected: {e.error_count()} error(s)")

        result.bundle = DecisionBundle(**departments)
        return result

    @staticmethod
    def sourcing_plan(decision: SourcingDecision) -> SourcingPlan:
        return SourcingPlan(
            add_suppliers=list(decision.add_suppliers),
            drop_suppliers=list(decision.drop_suppliers),
            contract_volumes=dict(decision.contract_volumes),
            safety_stock_buffer=decision.safety_stock_buffer,
        )
