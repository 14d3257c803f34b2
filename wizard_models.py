"""
Budget wizard data model.
Plain, serializable records shared by the wizard steps, decoupled from UI.
"""
from typing import Dict, List, Optional, Any
from dataclasses import dataclass, field, asdict
import uuid

from taxonomy import PRIORITY_IDS, GROUP_LIFESTYLE, GROUPS

TOTAL_STEPS = 7
MONTHS_PER_YEAR = 12


def _new_id(prefix: str = '') -> str:
    return f"{prefix}{uuid.uuid4().hex[:12]}"


def parse_amount(value: Any) -> float:
    """Parse a user-entered amount, returning 0.0 for blank or invalid input"""
    try:
        amount = float(value) if value not in (None, '') else 0.0
    except (ValueError, TypeError):
        return 0.0
    if amount != amount:  # NaN
        return 0.0
    return amount


def coerce_dependents(value: Any) -> int:
    """Coerce a dependents count to a non-negative integer (invalid -> 0)"""
    try:
        dependents = int(float(value))
    except (ValueError, TypeError, OverflowError):
        return 0
    return dependents if dependents > 0 else 0


def clamp_step(step: Any) -> int:
    """Clamp a step number into [1, TOTAL_STEPS]"""
    try:
        step = int(step)
    except (ValueError, TypeError):
        return 1
    return max(1, min(TOTAL_STEPS, step))


@dataclass(frozen=True)
class Priority:
    """Financial priority: a preset id or the user's own words"""
    kind: str  # "preset" or "custom"
    value: str

    @classmethod
    def preset(cls, priority_id: str) -> 'Priority':
        if priority_id not in PRIORITY_IDS:
            raise ValueError(f"Unknown priority id: {priority_id}")
        return cls('preset', priority_id)

    @classmethod
    def custom(cls, text: str) -> 'Priority':
        return cls('custom', text)

    @classmethod
    def from_string(cls, value: Optional[str]) -> Optional['Priority']:
        """Map the single-string form back to the tagged variant"""
        if value is None or not str(value).strip():
            return None
        if value in PRIORITY_IDS:
            return cls('preset', value)
        return cls('custom', str(value))

    @property
    def is_custom(self) -> bool:
        return self.kind == 'custom'

    def as_string(self) -> str:
        return self.value


@dataclass
class IncomeSource:
    """A single income stream entered in the income step"""
    id: str = field(default_factory=lambda: _new_id('income-'))
    name: str = ''
    amount: float = 0.0
    frequency: str = 'monthly'  # "monthly" or "annual"
    type: str = 'salary'

    @property
    def annual_amount(self) -> float:
        amount = parse_amount(self.amount)
        return amount * MONTHS_PER_YEAR if self.frequency == 'monthly' else amount

    def is_valid(self) -> bool:
        return bool(str(self.name).strip()) and parse_amount(self.amount) > 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'IncomeSource':
        return cls(
            id=str(data.get('id') or _new_id('income-')),
            name=data.get('name', '') or '',
            amount=parse_amount(data.get('amount', 0)),
            frequency=data.get('frequency', 'monthly'),
            type=data.get('type', 'salary'),
        )


@dataclass
class Profile:
    """Optional demographic details"""
    age_range: str = ''
    living_situation: str = ''
    life_stage: str = ''
    dependents: int = 0
    location: str = ''

    def is_empty(self) -> bool:
        return self == Profile()

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'Profile':
        data = data or {}
        return cls(
            age_range=data.get('age_range', '') or '',
            living_situation=data.get('living_situation', '') or '',
            life_stage=data.get('life_stage', '') or '',
            dependents=coerce_dependents(data.get('dependents', 0)),
            location=data.get('location', '') or '',
        )


@dataclass
class BudgetEntry:
    """One category/subcategory line of a budget"""
    category: str
    subcategory: str
    monthly_budget: float = 0.0
    annual_budget: float = 0.0
    is_essential: bool = False
    is_custom: bool = False
    is_recurring: bool = True
    group: str = GROUP_LIFESTYLE
    id: str = field(default_factory=lambda: _new_id('entry-'))

    def __post_init__(self):
        if self.group not in GROUPS:
            raise ValueError(f"Unknown budget group: {self.group}")

    def set_monthly(self, value: Any) -> None:
        """Edit the monthly figure; annual follows at 12x"""
        self.monthly_budget = parse_amount(value)
        self.annual_budget = self.monthly_budget * MONTHS_PER_YEAR

    def set_annual(self, value: Any) -> None:
        """Edit the annual figure; monthly follows at 1/12"""
        self.annual_budget = parse_amount(value)
        self.monthly_budget = self.annual_budget / MONTHS_PER_YEAR

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BudgetEntry':
        return cls(
            id=str(data.get('id') or _new_id('entry-')),
            category=data.get('category', '') or '',
            subcategory=data.get('subcategory', '') or '',
            monthly_budget=parse_amount(data.get('monthly_budget', 0)),
            annual_budget=parse_amount(data.get('annual_budget', 0)),
            is_essential=bool(data.get('is_essential', False)),
            is_custom=bool(data.get('is_custom', False)),
            is_recurring=bool(data.get('is_recurring', True)),
            group=data.get('group', GROUP_LIFESTYLE),
        )


@dataclass
class Budget:
    """Budget under construction; total_income is annualized"""
    categories: List[BudgetEntry] = field(default_factory=list)
    total_income: float = 0.0
    total_allocated: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'categories': [entry.to_dict() for entry in self.categories],
            'total_income': self.total_income,
            'total_allocated': self.total_allocated,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'Budget':
        data = data or {}
        return cls(
            categories=[BudgetEntry.from_dict(c) for c in data.get('categories', [])],
            total_income=parse_amount(data.get('total_income', 0)),
            total_allocated=parse_amount(data.get('total_allocated', 0)),
        )


@dataclass
class WizardState:
    """The single accumulator for one wizard session"""
    current_step: int = 1
    priority: Optional[Priority] = None
    income_sources: List[IncomeSource] = field(default_factory=list)
    profile: Profile = field(default_factory=Profile)
    selected_categories: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    use_recommendations: Optional[bool] = None
    budget: Budget = field(default_factory=Budget)
    version: int = 0

    # Fields that update_field() may merge into
    FIELDS = ('priority', 'income_sources', 'profile', 'selected_categories',
              'use_recommendations', 'budget')

    def to_dict(self) -> Dict[str, Any]:
        return {
            'current_step': self.current_step,
            'priority': self.priority.as_string() if self.priority else None,
            'priority_kind': self.priority.kind if self.priority else None,
            'income_sources': [source.to_dict() for source in self.income_sources],
            'profile': self.profile.to_dict(),
            'selected_categories': {
                name: {
                    'selected': bool(data.get('selected', False)),
                    'subcategories': dict(data.get('subcategories', {})),
                }
                for name, data in self.selected_categories.items()
            },
            'use_recommendations': self.use_recommendations,
            'budget': self.budget.to_dict(),
            'version': self.version,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'WizardState':
        priority = None
        if data.get('priority'):
            if data.get('priority_kind') == 'custom':
                priority = Priority.custom(data['priority'])
            else:
                priority = Priority.from_string(data['priority'])

        selected = {}
        for name, entry in (data.get('selected_categories') or {}).items():
            selected[name] = {
                'selected': bool(entry.get('selected', False)),
                'subcategories': {k: bool(v) for k, v in (entry.get('subcategories') or {}).items()},
            }

        return cls(
            current_step=clamp_step(data.get('current_step', 1)),
            priority=priority,
            income_sources=[IncomeSource.from_dict(s) for s in data.get('income_sources', [])],
            profile=Profile.from_dict(data.get('profile')),
            selected_categories=selected,
            use_recommendations=data.get('use_recommendations'),
            budget=Budget.from_dict(data.get('budget')),
            version=int(data.get('version', 0)),
        )
