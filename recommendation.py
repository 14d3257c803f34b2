"""
50/30/20 budget recommendation engine.
Splits annual income into essential, lifestyle and savings buckets and spreads
each bucket over the selected categories by category share, then over each
category's selected subcategories by subcategory weight.
"""
import numpy as np
from typing import Dict, List, Any, Optional, Tuple

from taxonomy import (
    GROUPS, GROUP_SAVINGS, TARGET_SPLIT, get_subcategory, subcategory_group, category_share,
    is_essential_subcategory,
)
from category_utils import selected_entries
from wizard_models import MONTHS_PER_YEAR

NEXT_STEPS = [
    'Review and adjust category amounts based on your actual expenses',
    'Track your spending for the first month to see how accurate the budget is',
    'Set up automatic transfers for savings categories',
    'Review and update monthly as needed',
]


def bucket_totals(annual_income: float) -> Dict[str, float]:
    """Annual amount targeted at each allocation group"""
    return {group: annual_income * TARGET_SPLIT[group] for group in GROUPS}


def distribute(total: float, weights: List[float]) -> np.ndarray:
    """
    Split total proportionally to weights.

    Falls back to an equal split when every weight is zero.
    """
    if not weights:
        return np.array([])
    w = np.asarray(weights, dtype=float)
    if w.sum() <= 0:
        w = np.ones_like(w)
    return total * w / w.sum()


def effective_weights(members: List[Tuple[str, str]], group: str) -> List[float]:
    """
    Two-level weights for the selected subcategories of one group.

    Each category takes its share of the group's bucket, and that share is
    split over the category's selected subcategories by subcategory weight.
    distribute() renormalizes, so the bucket total is unchanged.
    """
    raw = {}
    for category_name, subcategory_name in members:
        sub = get_subcategory(category_name, subcategory_name)
        raw[(category_name, subcategory_name)] = sub['weight'] if sub else 0.0

    category_totals: Dict[str, float] = {}
    category_counts: Dict[str, int] = {}
    for (category_name, _), weight in raw.items():
        category_totals[category_name] = category_totals.get(category_name, 0.0) + weight
        category_counts[category_name] = category_counts.get(category_name, 0) + 1

    weights = []
    for category_name, subcategory_name in members:
        share = category_share(category_name, group)
        total = category_totals[category_name]
        if total > 0:
            weights.append(share * raw[(category_name, subcategory_name)] / total)
        else:
            weights.append(share / category_counts[category_name])
    return weights


def generate_recommendation(income: float,
                            selected_categories: Dict[str, Dict[str, Any]],
                            priority: Optional[str] = None,
                            profile: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Build a recommended budget for the selected subcategories.

    Args:
        income: Total annual income
        selected_categories: Category selection from the category step
        priority: Priority string (recorded, does not tilt the split)
        profile: Profile dict (recorded, does not tilt the split)

    Returns:
        Dict shaped like the recommendation service response, with
        camelCase keys: categories, totalAllocated, totals, recommendations
    """
    if income is None or income <= 0:
        raise ValueError("Valid income is required")

    entries = selected_entries(selected_categories or {})
    targets = bucket_totals(income)

    categories = []
    for group in GROUPS:
        members = [(c, s) for c, s in entries if subcategory_group(c, s) == group]
        if not members:
            continue
        annual_shares = distribute(targets[group], effective_weights(members, group))
        for (category_name, subcategory_name), annual in zip(members, annual_shares):
            monthly = round(float(annual) / MONTHS_PER_YEAR, 2)
            categories.append({
                'category': category_name,
                'subcategory': subcategory_name,
                'monthlyBudget': monthly,
                'annualBudget': round(monthly * MONTHS_PER_YEAR, 2),
                'isEssential': is_essential_subcategory(category_name, subcategory_name),
                'isRecurring': True,
                'group': group,
            })

    total_allocated = round(sum(c['annualBudget'] for c in categories), 2)
    monthly_allocated = round(sum(c['monthlyBudget'] for c in categories), 2)
    total_savings = sum(c['annualBudget'] for c in categories if c['group'] == GROUP_SAVINGS)

    return {
        'monthlyIncome': income / MONTHS_PER_YEAR,
        'annualIncome': income,
        'categories': categories,
        'totalAllocated': total_allocated,
        'totals': {
            'monthlyAllocated': monthly_allocated,
            'annualAllocated': total_allocated,
            'monthlyRemaining': income / MONTHS_PER_YEAR - monthly_allocated,
            'annualRemaining': income - total_allocated,
        },
        'recommendations': {
            'savingsRate': round(total_savings / income * 100),
            'budgetingMethod': '50/30/20 (Balanced)',
            'priority': priority,
            'profileConsidered': bool(profile),
            'nextSteps': list(NEXT_STEPS),
        },
    }


def group_totals(categories: List[Dict[str, Any]]) -> Dict[str, float]:
    """Annual totals per group for a recommendation's category list"""
    totals = {group: 0.0 for group in GROUPS}
    for entry in categories:
        group = entry.get('group') or subcategory_group(entry.get('category', ''), entry.get('subcategory', ''))
        totals[group] += float(entry.get('annualBudget', 0) or 0)
    return totals
