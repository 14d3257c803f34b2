"""
Budget Taxonomy
Fixed option lists and the default category taxonomy used by the budget wizard.
Every subcategory carries its essential flag, its allocation group and its
weight within that group.
"""

from typing import Dict, Any, List, Optional

# Allocation groups
GROUP_ESSENTIAL = 'essential'
GROUP_LIFESTYLE = 'lifestyle'
GROUP_SAVINGS = 'savings'
GROUPS = [GROUP_ESSENTIAL, GROUP_LIFESTYLE, GROUP_SAVINGS]

GROUP_LABELS = {
    GROUP_ESSENTIAL: 'Essential',
    GROUP_LIFESTYLE: 'Lifestyle',
    GROUP_SAVINGS: 'Savings & Goals',
}

# 50/30/20 target split of annual income
TARGET_SPLIT = {
    GROUP_ESSENTIAL: 0.50,
    GROUP_LIFESTYLE: 0.30,
    GROUP_SAVINGS: 0.20,
}

PRIORITIES = [
    {
        'id': 'live-within-means',
        'title': 'Live within your means',
        'description': 'Build a sustainable budget that matches your lifestyle',
        'phrase': 'live within your means',
        'icon': '🎯',
    },
    {
        'id': 'increase-savings',
        'title': 'Increase your savings',
        'description': 'Maximize your savings rate for future financial security',
        'phrase': 'increase your savings',
        'icon': '🐷',
    },
    {
        'id': 'detailed-tracking',
        'title': 'Keep detailed records accurately',
        'description': 'Track every expense to understand your spending patterns',
        'phrase': 'keep detailed records accurately',
        'icon': '📄',
    },
    {
        'id': 'healthy-lifestyle',
        'title': 'Restructure into a healthier lifestyle',
        'description': 'Prioritize health, wellness, and life balance in your budget',
        'phrase': 'restructure into a healthier lifestyle',
        'icon': '❤️',
    },
    {
        'id': 'responsible-spending',
        'title': 'Create more responsible spending',
        'description': 'Develop better spending habits and eliminate waste',
        'phrase': 'create more responsible spending',
        'icon': '📊',
    },
    {
        'id': 'specific-goal',
        'title': 'Work towards a specific goal',
        'description': 'Focus your budget on achieving a particular objective',
        'phrase': 'work towards a specific goal',
        'icon': '⚡',
    },
]

PRIORITY_IDS = [p['id'] for p in PRIORITIES]

INCOME_TYPES = [
    {'value': 'salary', 'label': 'Salary/Wages'},
    {'value': 'allowance', 'label': 'Allowance'},
    {'value': 'investment', 'label': 'Investment Returns'},
    {'value': 'inheritance', 'label': 'Inheritance'},
    {'value': 'side-hustle', 'label': 'Side Hustle'},
    {'value': 'other', 'label': 'Other'},
]

INCOME_FREQUENCIES = ['monthly', 'annual']

AGE_RANGES = [
    {'value': '18-25', 'label': '18-25 years'},
    {'value': '26-35', 'label': '26-35 years'},
    {'value': '36-45', 'label': '36-45 years'},
    {'value': '46-55', 'label': '46-55 years'},
    {'value': '56-65', 'label': '56-65 years'},
    {'value': '65+', 'label': '65+ years'},
]

LIVING_SITUATIONS = [
    {'value': 'with-parents', 'label': 'Living with parents/family'},
    {'value': 'renting-alone', 'label': 'Renting alone'},
    {'value': 'renting-shared', 'label': 'Renting with roommates'},
    {'value': 'own-home', 'label': 'Own home'},
    {'value': 'other', 'label': 'Other arrangement'},
]

LIFE_STAGES = [
    {'value': 'student', 'label': 'Student'},
    {'value': 'young-professional', 'label': 'Young professional'},
    {'value': 'family-with-kids', 'label': 'Family with kids'},
    {'value': 'established-career', 'label': 'Established career'},
    {'value': 'approaching-retirement', 'label': 'Approaching retirement'},
]


def _sub(name: str, essential: bool, group: str, weight: float) -> Dict[str, Any]:
    return {'name': name, 'essential': essential, 'group': group, 'weight': weight}


DEFAULT_CATEGORIES: List[Dict[str, Any]] = [
    {
        'name': 'Housing',
        'description': 'Rent, utilities, and home maintenance',
        'isEssential': True,
        'shares': {GROUP_ESSENTIAL: 0.75},
        'subcategories': [
            _sub('Rent/Mortgage', True, GROUP_ESSENTIAL, 0.70),
            _sub('Utilities', True, GROUP_ESSENTIAL, 0.15),
            _sub('Phone', True, GROUP_ESSENTIAL, 0.05),
            _sub('Internet', True, GROUP_ESSENTIAL, 0.05),
            _sub('Supplies Shopping', False, GROUP_ESSENTIAL, 0.03),
            _sub('Rental Management', False, GROUP_ESSENTIAL, 0.02),
        ],
    },
    {
        'name': 'Transportation',
        'description': 'Vehicle costs, fuel, and public transport',
        'isEssential': True,
        'shares': {GROUP_ESSENTIAL: 0.15},
        'subcategories': [
            _sub('Fuel', True, GROUP_ESSENTIAL, 0.50),
            _sub('Bus/taxi fare', True, GROUP_ESSENTIAL, 0.30),
            _sub('Insurance', True, GROUP_ESSENTIAL, 0.15),
            _sub('Licensing', False, GROUP_ESSENTIAL, 0.05),
        ],
    },
    {
        'name': 'Food',
        'description': 'Groceries and dining expenses',
        'isEssential': True,
        'shares': {GROUP_ESSENTIAL: 0.10, GROUP_LIFESTYLE: 0.30},
        'subcategories': [
            _sub('Groceries Shopping', True, GROUP_ESSENTIAL, 0.80),
            _sub('Water', True, GROUP_ESSENTIAL, 0.20),
            _sub('Dining out', False, GROUP_LIFESTYLE, 0.50),
            _sub('Office lunch', False, GROUP_LIFESTYLE, 0.30),
            _sub('Energy drinks', False, GROUP_LIFESTYLE, 0.20),
        ],
    },
    {
        'name': 'Personal Care',
        'description': 'Health, grooming, and clothing',
        'isEssential': True,
        'shares': {GROUP_ESSENTIAL: 0.05, GROUP_LIFESTYLE: 0.20},
        'subcategories': [
            _sub('Medical', True, GROUP_ESSENTIAL, 0.60),
            _sub('Grooming Shopping', True, GROUP_ESSENTIAL, 0.40),
            _sub('Hair/nails', False, GROUP_LIFESTYLE, 0.30),
            _sub('Clothing', False, GROUP_LIFESTYLE, 0.40),
            _sub('Haircare Products', False, GROUP_LIFESTYLE, 0.15),
            _sub('Skincare Products', False, GROUP_LIFESTYLE, 0.15),
        ],
    },
    {
        'name': 'Insurance',
        'description': 'Health and other insurance coverage',
        'isEssential': True,
        'shares': {GROUP_ESSENTIAL: 0.05},
        'subcategories': [
            _sub('Health', True, GROUP_ESSENTIAL, 1.0),
        ],
    },
    {
        'name': 'Loans',
        'description': 'Loan payments and debt service',
        'isEssential': True,
        'shares': {GROUP_ESSENTIAL: 0.0},
        'subcategories': [
            _sub('Mortgage', False, GROUP_ESSENTIAL, 0.70),
            _sub('Personal Loans', False, GROUP_ESSENTIAL, 0.20),
            _sub('Student Loans', False, GROUP_ESSENTIAL, 0.10),
        ],
    },
    {
        'name': 'Entertainment',
        'description': 'Leisure activities and subscriptions',
        'isEssential': False,
        'shares': {GROUP_LIFESTYLE: 0.40},
        'subcategories': [
            _sub('Streaming Services', False, GROUP_LIFESTYLE, 0.20),
            _sub('Dates', False, GROUP_LIFESTYLE, 0.30),
            _sub('Cinema', False, GROUP_LIFESTYLE, 0.20),
            _sub('Hobbies', False, GROUP_LIFESTYLE, 0.20),
            _sub('Music Subscriptions', False, GROUP_LIFESTYLE, 0.10),
        ],
    },
    {
        'name': 'Pets',
        'description': 'Pet care and maintenance',
        'isEssential': False,
        'shares': {GROUP_LIFESTYLE: 0.10},
        'subcategories': [
            _sub('Food', False, GROUP_LIFESTYLE, 0.50),
            _sub('Medical', False, GROUP_LIFESTYLE, 0.30),
            _sub('Grooming', False, GROUP_LIFESTYLE, 0.15),
            _sub('Toys', False, GROUP_LIFESTYLE, 0.05),
        ],
    },
    {
        'name': 'Savings/Investments',
        'description': 'Emergency fund and investment accounts',
        'isEssential': True,
        'shares': {GROUP_SAVINGS: 1.0},
        'subcategories': [
            _sub('Emergency Fund', True, GROUP_SAVINGS, 0.50),
            _sub('Retirement account', True, GROUP_SAVINGS, 0.30),
            _sub('Investment account', False, GROUP_SAVINGS, 0.15),
            _sub('Annual Payments Fund', False, GROUP_SAVINGS, 0.05),
        ],
    },
]

CATEGORY_NAMES = [c['name'] for c in DEFAULT_CATEGORIES]


def get_category(name: str) -> Optional[Dict[str, Any]]:
    """Look up a taxonomy category by name"""
    for category in DEFAULT_CATEGORIES:
        if category['name'] == name:
            return category
    return None


def get_subcategory(category_name: str, subcategory_name: str) -> Optional[Dict[str, Any]]:
    """Look up a taxonomy subcategory, or None for names outside the taxonomy"""
    category = get_category(category_name)
    if category is None:
        return None
    for subcategory in category['subcategories']:
        if subcategory['name'] == subcategory_name:
            return subcategory
    return None


def category_share(category_name: str, group: str) -> float:
    """Share of a group's bucket that goes to a category (0 outside the taxonomy)"""
    category = get_category(category_name)
    if category is None:
        return 0.0
    return category['shares'].get(group, 0.0)


def subcategory_group(category_name: str, subcategory_name: str) -> str:
    """Allocation group for a subcategory; unknown entries count as lifestyle"""
    subcategory = get_subcategory(category_name, subcategory_name)
    return subcategory['group'] if subcategory else GROUP_LIFESTYLE


def is_essential_subcategory(category_name: str, subcategory_name: str) -> bool:
    subcategory = get_subcategory(category_name, subcategory_name)
    return bool(subcategory and subcategory['essential'])


def get_priority(priority_id: str) -> Optional[Dict[str, Any]]:
    for priority in PRIORITIES:
        if priority['id'] == priority_id:
            return priority
    return None
