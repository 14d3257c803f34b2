"""
Wizard Step Utilities
Input handling and validation for the priority, income and profile steps of the
budget wizard. Pure functions, no Streamlit imports, so every rule is testable.
"""

from typing import Dict, Any, List, Optional, Tuple

from taxonomy import PRIORITY_IDS, INCOME_FREQUENCIES, get_priority
from wizard_models import (
    Priority, IncomeSource, Profile, parse_amount, coerce_dependents,
)


# ---------------------------------------------------------------------------
# Step 1: priority selection
# ---------------------------------------------------------------------------

def resolve_priority(selected_id: Optional[str], custom_text: str = '') -> Optional[Priority]:
    """
    Resolve the priority chosen on the first step.

    Non-blank custom text wins over a preset, mirroring how typing in the
    custom field switches the selection to "custom".
    """
    if custom_text and custom_text.strip():
        return Priority.custom(custom_text)
    if selected_id in PRIORITY_IDS:
        return Priority.preset(selected_id)
    return None


def validate_priority(priority: Optional[Priority]) -> Tuple[bool, str]:
    if priority is None or not priority.as_string().strip():
        return False, "Please choose a priority or describe your own"
    return True, ""


def priority_display_text(priority: Any) -> str:
    """Human phrase for a priority ("increase your savings"); custom text as typed"""
    if priority is None:
        return ''
    value = priority.as_string() if isinstance(priority, Priority) else str(priority)
    preset = get_priority(value)
    return preset['phrase'] if preset else value


# ---------------------------------------------------------------------------
# Step 2: income collection
# ---------------------------------------------------------------------------

def new_income_source() -> IncomeSource:
    return IncomeSource(name='', amount=0.0, frequency='monthly', type='salary')


def total_annual_income(sources: List[IncomeSource]) -> float:
    """Annualized sum of all income sources (monthly amounts x 12)"""
    return sum(source.annual_amount for source in sources)


def valid_income_sources(sources: List[IncomeSource]) -> List[IncomeSource]:
    """Sources with a non-blank name and a positive amount"""
    return [source for source in sources if source.is_valid()]


def validate_income_sources(sources: List[IncomeSource]) -> Tuple[bool, str]:
    if not valid_income_sources(sources):
        return False, "Add at least one income source with a name and an amount above zero"
    return True, ""


def remove_income_source(sources: List[IncomeSource], source_id: str) -> List[IncomeSource]:
    """Remove a source by id; the last remaining source is never removed"""
    if len(sources) <= 1:
        return list(sources)
    return [source for source in sources if source.id != source_id]


def update_income_source(sources: List[IncomeSource], source_id: str,
                         field_name: str, value: Any) -> List[IncomeSource]:
    """Return a copy of the list with one field of one source changed"""
    if field_name not in ('name', 'amount', 'frequency', 'type'):
        raise KeyError(f"Unknown income field: {field_name}")
    if field_name == 'frequency' and value not in INCOME_FREQUENCIES:
        raise ValueError(f"Unknown income frequency: {value}")

    updated = []
    for source in sources:
        if source.id == source_id:
            data = source.to_dict()
            data[field_name] = parse_amount(value) if field_name == 'amount' else value
            source = IncomeSource.from_dict(data)
        updated.append(source)
    return updated


# ---------------------------------------------------------------------------
# Step 3: personal profile
# ---------------------------------------------------------------------------

def build_profile(raw: Optional[Dict[str, Any]]) -> Profile:
    """Build a profile from form values; every field is optional"""
    raw = dict(raw or {})
    raw['dependents'] = coerce_dependents(raw.get('dependents', 0))
    return Profile.from_dict(raw)
