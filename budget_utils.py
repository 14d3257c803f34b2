"""
Budget review and confirmation calculations.
Seeding, monthly/annual editing, custom entries, allocation totals and the
final essential/lifestyle/savings summary.
"""
from typing import Dict, Any, List, Optional, Tuple

from taxonomy import (
    GROUPS, GROUP_ESSENTIAL, GROUP_LIFESTYLE, GROUP_SAVINGS,
    subcategory_group, is_essential_subcategory,
)
from category_utils import selected_entries
from wizard_models import Budget, BudgetEntry, MONTHS_PER_YEAR, parse_amount

# Allocation thresholds, in percent of income for the current view
MAX_ALLOCATION_PERCENT = 105.0
OVER_BUDGET_PERCENT = 100.0
SUCCESS_BAND_LOW = 95.0

STATUS_OVER = 'over'
STATUS_SUCCESS = 'success'
STATUS_NEUTRAL = 'neutral'

VIEW_MONTHLY = 'monthly'
VIEW_ANNUAL = 'annual'


def seed_budget_entries(selection: Dict[str, Dict[str, Any]]) -> List[BudgetEntry]:
    """One zero entry per selected subcategory, tagged from the taxonomy"""
    return [
        BudgetEntry(
            category=category_name,
            subcategory=subcategory_name,
            is_essential=is_essential_subcategory(category_name, subcategory_name),
            group=subcategory_group(category_name, subcategory_name),
        )
        for category_name, subcategory_name in selected_entries(selection)
    ]


def entries_from_recommendation(categories: List[Dict[str, Any]]) -> List[BudgetEntry]:
    """Convert recommendation service categories (camelCase) into budget entries"""
    entries = []
    for item in categories:
        category_name = item.get('category', '') or ''
        subcategory_name = item.get('subcategory', '') or ''
        group = item.get('group')
        if group not in GROUPS:
            group = subcategory_group(category_name, subcategory_name)
        entry = BudgetEntry(
            category=category_name,
            subcategory=subcategory_name,
            is_essential=bool(item.get('isEssential', False)),
            is_recurring=bool(item.get('isRecurring', True)),
            group=group,
        )
        # The monthly figure is authoritative; annual is derived from it
        if item.get('monthlyBudget') is not None:
            entry.set_monthly(item.get('monthlyBudget'))
        else:
            entry.set_annual(item.get('annualBudget', 0))
        entries.append(entry)
    return entries


def ensure_seeded(budget: Budget, selection: Dict[str, Dict[str, Any]]) -> Budget:
    """Seed an empty budget from the selection; leave a populated one alone"""
    if budget.categories:
        return budget
    return Budget(
        categories=seed_budget_entries(selection),
        total_income=budget.total_income,
        total_allocated=0.0,
    )


def _find(budget: Budget, entry_id: str) -> BudgetEntry:
    for entry in budget.categories:
        if entry.id == entry_id:
            return entry
    raise KeyError(f"No budget entry with id {entry_id}")


def update_entry_amount(budget: Budget, entry_id: str, field_name: str, value: Any) -> Budget:
    """Edit monthly_budget or annual_budget; the other field follows at 12x"""
    entry = _find(budget, entry_id)
    if field_name == 'monthly_budget':
        entry.set_monthly(value)
    elif field_name == 'annual_budget':
        entry.set_annual(value)
    else:
        raise KeyError(f"Unknown amount field: {field_name}")
    budget.total_allocated = total_allocated(budget, VIEW_ANNUAL)
    return budget


def rename_entry(budget: Budget, entry_id: str, category: Optional[str] = None,
                 subcategory: Optional[str] = None, group: Optional[str] = None) -> Budget:
    """Rename or regroup a custom entry; taxonomy entries keep their names and groups"""
    entry = _find(budget, entry_id)
    if not entry.is_custom:
        raise ValueError("Only custom entries can be renamed")
    if group is not None and group not in GROUPS:
        raise ValueError(f"Unknown budget group: {group}")
    if category is not None:
        entry.category = category
    if subcategory is not None:
        entry.subcategory = subcategory
    if group is not None:
        entry.group = group
    return budget


def add_custom_entry(budget: Budget, group: str = GROUP_LIFESTYLE) -> BudgetEntry:
    """Append a blank, zero-amount custom entry in the given group and return it for editing"""
    entry = BudgetEntry(category='', subcategory='', is_custom=True, group=group)
    budget.categories.append(entry)
    return entry


def remove_entry(budget: Budget, entry_id: str) -> bool:
    """Remove a custom entry. Returns False for taxonomy entries, which are only zeroable."""
    entry = _find(budget, entry_id)
    if not entry.is_custom:
        return False
    budget.categories = [e for e in budget.categories if e.id != entry_id]
    budget.total_allocated = total_allocated(budget, VIEW_ANNUAL)
    return True


def total_allocated(budget: Budget, view: str = VIEW_MONTHLY) -> float:
    if view == VIEW_MONTHLY:
        return sum(entry.monthly_budget for entry in budget.categories)
    return sum(entry.annual_budget for entry in budget.categories)


def income_for_view(budget: Budget, view: str = VIEW_MONTHLY) -> float:
    """total_income is annual; the monthly view uses a twelfth of it"""
    if view == VIEW_MONTHLY:
        return budget.total_income / MONTHS_PER_YEAR
    return budget.total_income


def allocation_percentage(budget: Budget, view: str = VIEW_MONTHLY) -> float:
    income = income_for_view(budget, view)
    if income <= 0:
        return 0.0
    return total_allocated(budget, view) / income * 100


def remaining_income(budget: Budget, view: str = VIEW_MONTHLY) -> float:
    return income_for_view(budget, view) - total_allocated(budget, view)


def allocation_status(percentage: float) -> str:
    """over above 100%, success in the 95-100% band, neutral otherwise"""
    if percentage > OVER_BUDGET_PERCENT:
        return STATUS_OVER
    if percentage >= SUCCESS_BAND_LOW:
        return STATUS_SUCCESS
    return STATUS_NEUTRAL


def validate_budget(budget: Budget, view: str = VIEW_MONTHLY) -> Tuple[bool, str]:
    percentage = allocation_percentage(budget, view)
    if percentage > MAX_ALLOCATION_PERCENT:
        return False, (f"Your budget allocates {percentage:.1f}% of income. "
                       f"Reduce it to {MAX_ALLOCATION_PERCENT:.0f}% or less to continue")
    return True, ""


def summarize_budget(budget: Budget) -> Dict[str, float]:
    """
    Annual subtotals per group and the savings rate for the confirmation step.

    Returns:
        Dict with essential, lifestyle, savings, total_allocated, savings_rate
        (fraction of income), monthly_savings and entry_count
    """
    totals = {group: 0.0 for group in GROUPS}
    for entry in budget.categories:
        totals[entry.group] += parse_amount(entry.annual_budget)

    savings = totals[GROUP_SAVINGS]
    savings_rate = savings / budget.total_income if budget.total_income > 0 else 0.0

    return {
        'essential': totals[GROUP_ESSENTIAL],
        'lifestyle': totals[GROUP_LIFESTYLE],
        'savings': savings,
        'total_allocated': sum(totals.values()),
        'savings_rate': savings_rate,
        'monthly_savings': savings / MONTHS_PER_YEAR,
        'entry_count': len(budget.categories),
    }
