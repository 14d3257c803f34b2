"""
Budget creation wizard orchestrator.
Owns the wizard state, step navigation, saved progress and the calls to the
recommendation and budget creation services. UI-free; pages/wizard.py renders it.
"""
from typing import Dict, Any, List, Optional, Tuple, Callable, Union, MutableMapping
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone, date

from api_client import BudgetServiceError, LocalRecommendationService
from budget_utils import (
    ensure_seeded, entries_from_recommendation, total_allocated, validate_budget,
    summarize_budget, VIEW_ANNUAL, VIEW_MONTHLY,
)
from category_utils import validate_selection
from io_utils import (
    create_progress_record, parse_progress_record, build_budget_payload, profile_to_payload,
)
from persistence import ProgressStore, InMemoryProgressStore
from wizard_models import (
    WizardState, Priority, Profile, Budget, IncomeSource, TOTAL_STEPS, clamp_step,
)
from wizard_utils import (
    validate_priority, valid_income_sources, validate_income_sources,
    total_annual_income, build_profile,
)

RESUME_WINDOW = timedelta(hours=24)

# Session keys owned by the wizard page besides the "wiz*" widget keys
SESSION_KEYS = ('budget_wizard', 'created_budget', 'confirm_abandon')


@dataclass(frozen=True)
class RequestTicket:
    """Identifies the state a service request was issued from"""
    step: int
    version: int


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(moment: datetime) -> datetime:
    """Treat a naive datetime as UTC so it compares with stored timestamps"""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def clear_wizard_session(session: MutableMapping) -> None:
    """Drop the wizard and its widget state from a session so a new budget can start"""
    for key in list(session.keys()):
        if key.startswith('wiz') or key in SESSION_KEYS:
            del session[key]


class BudgetWizard:
    """
    Seven-step guided budget creation.

    Steps: 1 priority, 2 income, 3 profile, 4 categories, 5 recommendation
    offer, 6 review, 7 confirmation. Submit methods return (ok, error_message);
    a failed submit leaves the wizard on the same step.
    """

    def __init__(self,
                 store: Optional[ProgressStore] = None,
                 user_id: Optional[str] = None,
                 recommendation_service: Any = None,
                 budget_service: Any = None,
                 on_complete: Optional[Callable[[Dict[str, Any]], None]] = None,
                 on_cancel: Optional[Callable[[], None]] = None,
                 budget_period: str = 'monthly',
                 clock: Callable[[], datetime] = _utc_now):
        self.store = store if store is not None else InMemoryProgressStore()
        self.user_id = user_id
        self.recommendation_service = recommendation_service or LocalRecommendationService()
        self.budget_service = budget_service
        self.on_complete = on_complete
        self.on_cancel = on_cancel
        self.budget_period = budget_period
        self.clock = clock

        self.state = WizardState()
        self.loading = False
        self.resumed = False
        self.completed_budget: Optional[Dict[str, Any]] = None

        self.restore()

    # ------------------------------------------------------------------
    # State and navigation
    # ------------------------------------------------------------------

    @property
    def current_step(self) -> int:
        return self.state.current_step

    @property
    def total_steps(self) -> int:
        return TOTAL_STEPS

    @property
    def total_annual_income(self) -> float:
        return total_annual_income(self.state.income_sources)

    def _changed(self) -> None:
        """Record a state change and save progress past the first step"""
        self.state.version += 1
        if self.state.current_step > 1:
            self.save_progress()

    def update_field(self, key: str, value: Any) -> None:
        """Merge a value into the wizard state. No validation happens here."""
        if key not in WizardState.FIELDS:
            raise KeyError(f"Unknown wizard field: {key}")
        if key == 'priority' and not isinstance(value, Priority):
            value = Priority.from_string(value)
        setattr(self.state, key, value)
        self._changed()

    def advance(self) -> bool:
        """Move to the next step; no-op on the last step or while a request is running"""
        if self.loading:
            print(f"DEBUG [advance]: blocked, request in flight on step {self.state.current_step}")
            return False
        if self.state.current_step >= TOTAL_STEPS:
            return False
        self.state.current_step += 1
        self._changed()
        return True

    def retreat(self) -> bool:
        if self.state.current_step <= 1:
            return False
        self.state.current_step -= 1
        self._changed()
        return True

    def jump_to(self, step: int) -> bool:
        """Go back to an earlier (or the current) step; skipping ahead is refused"""
        if step > self.state.current_step:
            return False
        target = clamp_step(step)
        if target == self.state.current_step:
            return False
        self.state.current_step = target
        self._changed()
        return True

    # ------------------------------------------------------------------
    # Saved progress
    # ------------------------------------------------------------------

    def save_progress(self) -> None:
        try:
            self.store.save(create_progress_record(self.state, self.user_id, self.clock()))
        except (OSError, TypeError, ValueError) as e:
            print(f"ERROR [save_progress]: Failed to save wizard progress: {e}")

    def clear_progress(self) -> None:
        try:
            self.store.clear()
        except OSError as e:
            print(f"ERROR [clear_progress]: Failed to clear wizard progress: {e}")

    def restore(self) -> bool:
        """
        Resume a saved session.

        Only a record younger than 24 hours that belongs to the same user is
        restored; anything else, including a corrupt record, is discarded.
        """
        try:
            payload = self.store.load()
        except OSError as e:
            print(f"ERROR [restore]: Could not read saved progress: {e}")
            return False
        if not payload:
            return False

        try:
            record = parse_progress_record(payload)
        except (ValueError, KeyError, TypeError) as e:
            print(f"ERROR [restore]: Discarding unreadable saved progress: {e}")
            self.clear_progress()
            return False

        age = _as_utc(self.clock()) - record['timestamp']
        if age >= RESUME_WINDOW or age < timedelta(0) or record['userId'] != self.user_id:
            print(f"DEBUG [restore]: Discarding saved progress (age={age}, same_user={record['userId'] == self.user_id})")
            self.clear_progress()
            return False

        self.state = record['data']
        self.state.current_step = record['currentStep']
        self.resumed = True
        print(f"DEBUG [restore]: Resumed wizard at step {self.state.current_step}")
        return True

    def cancel(self) -> None:
        """Abandon the wizard: drop saved progress and hand control back to the host"""
        self.clear_progress()
        self.state = WizardState()
        self.loading = False
        if self.on_cancel:
            self.on_cancel()

    # ------------------------------------------------------------------
    # Request tagging
    # ------------------------------------------------------------------

    def issue_ticket(self) -> RequestTicket:
        return RequestTicket(step=self.state.current_step, version=self.state.version)

    def is_current(self, ticket: RequestTicket) -> bool:
        return ticket.step == self.state.current_step and ticket.version == self.state.version

    # ------------------------------------------------------------------
    # Step submissions
    # ------------------------------------------------------------------

    def submit_priority(self, priority: Union[Priority, str, None]) -> Tuple[bool, str]:
        if not isinstance(priority, Priority):
            priority = Priority.from_string(priority)
        is_valid, error = validate_priority(priority)
        if not is_valid:
            return False, error
        self.update_field('priority', priority)
        self.advance()
        return True, ""

    def submit_income(self, sources: List[IncomeSource]) -> Tuple[bool, str]:
        """Keep only valid sources; at least one is required"""
        is_valid, error = validate_income_sources(sources)
        if not is_valid:
            return False, error
        self.update_field('income_sources', valid_income_sources(sources))
        self.advance()
        return True, ""

    def submit_profile(self, profile: Union[Profile, Dict[str, Any], None] = None) -> Tuple[bool, str]:
        if profile is None:
            profile = self.state.profile
        elif not isinstance(profile, Profile):
            profile = build_profile(profile)
        self.update_field('profile', profile)
        self.advance()
        return True, ""

    def skip_profile(self, profile: Union[Profile, Dict[str, Any], None] = None) -> Tuple[bool, str]:
        """Skipping writes whatever was entered, exactly like continuing"""
        return self.submit_profile(profile)

    def submit_categories(self, selection: Dict[str, Dict[str, Any]]) -> Tuple[bool, str]:
        is_valid, error = validate_selection(selection)
        if not is_valid:
            return False, error
        self.update_field('selected_categories', selection)
        self.advance()
        return True, ""

    def recommendation_request(self) -> Dict[str, Any]:
        return {
            'income': self.total_annual_income,
            'priority': self.state.priority.as_string() if self.state.priority else None,
            'profile': profile_to_payload(self.state.profile),
            'selectedCategories': self.state.selected_categories,
        }

    def accept_recommendation(self) -> Tuple[bool, str]:
        """Ask the recommendation service for a budget; stay on this step on failure"""
        if self.loading:
            return False, "A request is already in progress"

        ticket = self.issue_ticket()
        request = self.recommendation_request()
        self.loading = True
        try:
            response = self.recommendation_service.recommend(request)
        except BudgetServiceError as e:
            print(f"ERROR [accept_recommendation]: {e.error_type}: {e}")
            return False, e.user_message
        finally:
            self.loading = False

        return self.apply_recommendation(ticket, response)

    def apply_recommendation(self, ticket: RequestTicket, response: Dict[str, Any]) -> Tuple[bool, str]:
        """Apply a recommendation response if the wizard has not moved on since the request"""
        if not self.is_current(ticket):
            print(f"DEBUG [apply_recommendation]: Discarding stale response for {ticket}, "
                  f"now at step {self.state.current_step} v{self.state.version}")
            return False, "The wizard changed while the recommendation was loading. Please try again."

        entries = entries_from_recommendation(response.get('categories', []))
        budget = Budget(categories=entries, total_income=self.total_annual_income)
        budget.total_allocated = total_allocated(budget, VIEW_ANNUAL)
        self.state.use_recommendations = True
        self.update_field('budget', budget)
        self.advance()
        return True, ""

    def decline_recommendation(self) -> Tuple[bool, str]:
        """Build from zero; the review step seeds the entries"""
        self.state.use_recommendations = False
        self.update_field('budget', Budget(categories=[], total_income=self.total_annual_income,
                                           total_allocated=0.0))
        self.advance()
        return True, ""

    def prepare_review(self) -> Budget:
        """Seed an empty budget from the category selection when the review step opens"""
        budget = ensure_seeded(self.state.budget, self.state.selected_categories)
        changed = budget is not self.state.budget
        if budget.total_income <= 0 < self.total_annual_income:
            budget.total_income = self.total_annual_income
            changed = True
        if changed:
            self.update_field('budget', budget)
        return self.state.budget

    def submit_budget(self, budget: Optional[Budget] = None, view: str = VIEW_MONTHLY) -> Tuple[bool, str]:
        """Leave the review step; refused above 105% allocation"""
        budget = budget if budget is not None else self.state.budget
        is_valid, error = validate_budget(budget, view)
        if not is_valid:
            return False, error
        budget.total_allocated = total_allocated(budget, VIEW_ANNUAL)
        self.update_field('budget', budget)
        self.advance()
        return True, ""

    def summary(self) -> Dict[str, float]:
        return summarize_budget(self.state.budget)

    def complete(self, today: Optional[date] = None) -> Tuple[bool, str]:
        """
        Submit the budget to the creation service.

        On success the saved progress is cleared and on_complete receives the
        created budget; on failure the wizard stays on the confirmation step.
        """
        if self.loading:
            return False, "A request is already in progress"
        if self.budget_service is None:
            return False, "Budget service is not configured"

        ticket = self.issue_ticket()
        payload = build_budget_payload(self.state, self.budget_period, today)
        self.loading = True
        try:
            created = self.budget_service.create_budget(payload)
        except BudgetServiceError as e:
            print(f"ERROR [complete]: {e.error_type}: {e}")
            return False, e.user_message
        finally:
            self.loading = False

        if not self.is_current(ticket):
            print(f"DEBUG [complete]: Ignoring creation response for {ticket}, wizard moved on")
            return False, "The wizard changed while your budget was being saved. Please confirm again."

        self.clear_progress()
        self.completed_budget = created
        print(f"DEBUG [complete]: Budget created with {len(payload['categories'])} entries")
        if self.on_complete:
            self.on_complete(created)
        return True, ""
