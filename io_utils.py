"""
IO utilities for the budget wizard.
JSON serialization of saved progress, the budget creation payload, CSV export
and currency formatting.
"""
import json
import pandas as pd
from typing import Dict, Any, Optional
from datetime import datetime, date, timezone

from taxonomy import GROUP_LABELS
from wizard_models import WizardState, Budget, Profile, MONTHS_PER_YEAR, clamp_step

CURRENCY_SYMBOLS = {
    'KES': 'KSh',
    'USD': '$',
    'EUR': '€',
    'GBP': '£',
}


def create_progress_record(state: WizardState, user_id: Optional[str],
                           now: Optional[datetime] = None) -> str:
    """
    Serialize wizard progress to the stored JSON record.

    Args:
        state: Current wizard state
        user_id: Id of the signed-in user (None when anonymous)
        now: Timestamp to record, defaults to the current UTC time

    Returns:
        JSON string {userId, currentStep, data, timestamp}
    """
    now = now or datetime.now(timezone.utc)
    record = {
        'userId': user_id,
        'currentStep': state.current_step,
        'data': state.to_dict(),
        'timestamp': now.isoformat(),
    }
    return json.dumps(record)


def parse_progress_record(payload: str) -> Dict[str, Any]:
    """
    Parse a stored progress record.

    Returns:
        Dict with userId, currentStep, data (WizardState) and timestamp (datetime)

    Raises:
        ValueError, KeyError or TypeError when the record is corrupt
    """
    record = json.loads(payload)
    if not isinstance(record, dict):
        raise TypeError("Progress record must be a JSON object")

    timestamp = datetime.fromisoformat(record['timestamp'])
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)

    state = WizardState.from_dict(record['data'])
    state.current_step = clamp_step(record['currentStep'])

    return {
        'userId': record.get('userId'),
        'currentStep': state.current_step,
        'data': state,
        'timestamp': timestamp,
    }


def profile_to_payload(profile: Profile) -> Dict[str, Any]:
    """camelCase profile dict as the budget API expects it"""
    return {
        'ageRange': profile.age_range,
        'livingSituation': profile.living_situation,
        'lifeStage': profile.life_stage,
        'dependents': profile.dependents,
        'location': profile.location,
    }


def build_budget_payload(state: WizardState, period: str = 'monthly',
                         today: Optional[date] = None) -> Dict[str, Any]:
    """
    Build the request body for the budget creation service.

    Args:
        state: Completed wizard state
        period: "monthly" adds month "YYYY-MM", "annual" adds year
        today: Date used to pick the month/year

    Returns:
        Payload dict with camelCase keys
    """
    today = today or date.today()
    budget = state.budget

    payload: Dict[str, Any] = {}
    if period == 'annual':
        payload['year'] = today.year
    else:
        payload['month'] = f"{today.year:04d}-{today.month:02d}"

    payload.update({
        'income': {
            'monthly': budget.total_income / MONTHS_PER_YEAR,
            'annual': budget.total_income,
            'sources': [
                {
                    'id': source.id,
                    'name': source.name,
                    'amount': source.amount,
                    'frequency': source.frequency,
                    'type': source.type,
                }
                for source in state.income_sources
            ],
        },
        'categories': [
            {
                'category': entry.category,
                'subcategory': entry.subcategory,
                'monthlyBudget': entry.monthly_budget,
                'annualBudget': entry.annual_budget,
                'isEssential': entry.is_essential,
                'isCustom': entry.is_custom,
                'isRecurring': entry.is_recurring,
                'group': entry.group,
            }
            for entry in budget.categories
        ],
        'creationMethod': 'guided',
        'userProfile': profile_to_payload(state.profile),
        'priority': state.priority.as_string() if state.priority else None,
    })
    return payload


def budget_to_dataframe(budget: Budget) -> pd.DataFrame:
    """Tabular view of the budget entries, one row per entry"""
    rows = [
        {
            'id': entry.id,
            'group': GROUP_LABELS.get(entry.group, entry.group),
            'category': entry.category,
            'subcategory': entry.subcategory,
            'monthly_budget': entry.monthly_budget,
            'annual_budget': entry.annual_budget,
            'essential': entry.is_essential,
            'custom': entry.is_custom,
        }
        for entry in budget.categories
    ]
    columns = ['id', 'group', 'category', 'subcategory', 'monthly_budget',
               'annual_budget', 'essential', 'custom']
    return pd.DataFrame(rows, columns=columns)


def export_budget_csv(budget: Budget) -> str:
    """
    Export budget entries to CSV string.

    Args:
        budget: Budget to export

    Returns:
        CSV string without the internal id column
    """
    df = budget_to_dataframe(budget).drop(columns=['id'])
    return df.to_csv(index=False)


def format_currency(value: float, currency: str = 'KES', precision: int = 0) -> str:
    """
    Format currency values for display.

    Args:
        value: Numeric value to format
        currency: ISO currency code
        precision: Number of decimal places

    Returns:
        Formatted string, e.g. "KSh 1,200,000"
    """
    symbol = CURRENCY_SYMBOLS.get(currency, currency)
    sign = '-' if value < 0 else ''
    return f"{sign}{symbol} {abs(value):,.{precision}f}"
