"""Insurance plan catalog."""

from . import conf
from .value_objects import InsurancePlan


def get_insurance_plans() -> list[InsurancePlan]:
    """Plans from RENTAL_PRICING_INSURANCE_PLANS, in configured order."""
    return [InsurancePlan.from_dict(plan) for plan in conf.get_insurance_plans()]


def get_insurance_plan(plan_id: str) -> InsurancePlan | None:
    for plan in get_insurance_plans():
        if plan.id == plan_id:
            return plan
    return None
