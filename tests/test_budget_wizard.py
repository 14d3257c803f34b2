"""
Tests for the wizard orchestrator: navigation, step gating, saved progress,
service calls and a full budget creation run.
"""
import json
import pytest
from unittest.mock import Mock
from datetime import datetime, timedelta, timezone, date

from api_client import APIError, BudgetServiceError
from budget_utils import (
    allocation_percentage, allocation_status, update_entry_amount, STATUS_NEUTRAL, VIEW_MONTHLY,
)
from budget_wizard import BudgetWizard, RESUME_WINDOW, clear_wizard_session
from category_utils import default_selection, deselect_all, toggle_subcategory
from io_utils import create_progress_record
from persistence import InMemoryProgressStore
from wizard_models import WizardState, Priority, IncomeSource, Profile


NOW = datetime(2025, 5, 10, 9, 0, tzinfo=timezone.utc)


class FixedClock:
    """Controllable clock for restore-window tests"""

    def __init__(self, now=NOW):
        self.now = now

    def __call__(self):
        return self.now


def make_wizard(store=None, **kwargs):
    kwargs.setdefault('clock', FixedClock())
    return BudgetWizard(store=store or InMemoryProgressStore(), **kwargs)


def run_to_step(wizard, step):
    """Drive a wizard through valid submissions until it reaches step"""
    if wizard.current_step == 1 and step > 1:
        assert wizard.submit_priority(Priority.preset('increase-savings'))[0]
    if wizard.current_step == 2 and step > 2:
        assert wizard.submit_income([IncomeSource(name='Salary', amount=100_000, frequency='monthly')])[0]
    if wizard.current_step == 3 and step > 3:
        assert wizard.submit_profile()[0]
    if wizard.current_step == 4 and step > 4:
        assert wizard.submit_categories(default_selection())[0]
    if wizard.current_step == 5 and step > 5:
        assert wizard.decline_recommendation()[0]
    if wizard.current_step == 6 and step > 6:
        wizard.prepare_review()
        assert wizard.submit_budget()[0]
    assert wizard.current_step == step


def saved_record(store, step=3, user_id=None, saved_at=NOW):
    state = WizardState(current_step=step, priority=Priority.custom('Save for a plot'))
    store.save(create_progress_record(state, user_id, saved_at))


class TestNavigation:
    """Test step movement rules"""

    def test_starts_at_step_one(self):
        wizard = make_wizard()
        assert wizard.current_step == 1
        assert wizard.total_steps == 7
        assert not wizard.resumed

    def test_advance_and_retreat_bounds(self):
        wizard = make_wizard()
        assert wizard.retreat() is False
        for _ in range(10):
            wizard.advance()
        assert wizard.current_step == 7
        assert wizard.advance() is False
        assert wizard.retreat() is True
        assert wizard.current_step == 6

    def test_jump_back_only(self):
        wizard = make_wizard()
        run_to_step(wizard, 4)
        assert wizard.jump_to(6) is False
        assert wizard.jump_to(2) is True
        assert wizard.current_step == 2

    def test_jump_keeps_data(self):
        wizard = make_wizard()
        run_to_step(wizard, 4)
        wizard.jump_to(1)
        assert wizard.state.priority == Priority.preset('increase-savings')
        assert wizard.total_annual_income == 1_200_000

    def test_loading_blocks_advance(self):
        wizard = make_wizard()
        wizard.loading = True
        assert wizard.advance() is False
        assert wizard.current_step == 1

    def test_update_field_rejects_unknown_key(self):
        with pytest.raises(KeyError):
            make_wizard().update_field('current_step', 5)

    def test_update_field_converts_priority_string(self):
        wizard = make_wizard()
        wizard.update_field('priority', 'Clear my debts')
        assert wizard.state.priority == Priority.custom('Clear my debts')


class TestStepGating:
    """Test that invalid submissions keep the wizard on the same step"""

    def test_priority_required(self):
        wizard = make_wizard()
        ok, error = wizard.submit_priority(None)
        assert not ok and error
        assert wizard.current_step == 1

    def test_income_required(self):
        wizard = make_wizard()
        run_to_step(wizard, 2)
        ok, _ = wizard.submit_income([IncomeSource(name='', amount=5000)])
        assert not ok
        assert wizard.current_step == 2

    def test_only_valid_income_stored(self):
        wizard = make_wizard()
        run_to_step(wizard, 2)
        wizard.submit_income([IncomeSource(name='Salary', amount=1000), IncomeSource(name='Blank')])
        assert [s.name for s in wizard.state.income_sources] == ['Salary']

    def test_profile_skip_writes_entered_values(self):
        wizard = make_wizard()
        run_to_step(wizard, 3)
        wizard.skip_profile({'age_range': '36-45', 'dependents': 'x'})
        assert wizard.state.profile == Profile(age_range='36-45')
        assert wizard.current_step == 4

    def test_categories_required(self):
        wizard = make_wizard()
        run_to_step(wizard, 4)
        assert not wizard.submit_categories(deselect_all())[0]
        assert wizard.current_step == 4

    def test_over_allocated_budget_refused(self):
        wizard = make_wizard()
        run_to_step(wizard, 6)
        budget = wizard.prepare_review()
        budget.categories[0].set_monthly(106_000)
        ok, error = wizard.submit_budget(budget, VIEW_MONTHLY)
        assert not ok
        assert '105' in error
        assert wizard.current_step == 6


class TestSavedProgress:
    """Test saving, restoring and discarding progress"""

    def test_nothing_saved_on_step_one(self):
        store = InMemoryProgressStore()
        make_wizard(store).update_field('priority', 'Buy land')
        assert store.load() is None

    def test_saved_after_step_one(self):
        store = InMemoryProgressStore()
        run_to_step(make_wizard(store, user_id='u1'), 2)
        record = json.loads(store.load())
        assert record['currentStep'] == 2
        assert record['userId'] == 'u1'

    def test_restore_within_window(self):
        store = InMemoryProgressStore()
        saved_record(store, step=3, saved_at=NOW - timedelta(hours=23, minutes=59))
        wizard = make_wizard(store)
        assert wizard.resumed
        assert wizard.current_step == 3
        assert wizard.state.priority == Priority.custom('Save for a plot')

    def test_expired_record_discarded(self):
        store = InMemoryProgressStore()
        saved_record(store, step=5, saved_at=NOW - RESUME_WINDOW)
        wizard = make_wizard(store)
        assert not wizard.resumed
        assert wizard.current_step == 1
        assert store.load() is None

    def test_future_record_discarded(self):
        store = InMemoryProgressStore()
        saved_record(store, saved_at=NOW + timedelta(minutes=5))
        assert not make_wizard(store).resumed
        assert store.load() is None

    def test_other_user_record_discarded(self):
        store = InMemoryProgressStore()
        saved_record(store, user_id='alice')
        wizard = make_wizard(store, user_id='bob')
        assert not wizard.resumed
        assert store.load() is None

    def test_corrupt_record_discarded(self):
        store = InMemoryProgressStore()
        store.save('{not json')
        wizard = make_wizard(store)
        assert wizard.current_step == 1
        assert store.load() is None

    def test_failing_store_does_not_break_navigation(self):
        store = Mock()
        store.load.return_value = None
        store.save.side_effect = OSError("disk full")
        wizard = make_wizard(store)
        assert wizard.submit_priority(Priority.preset('detailed-tracking'))[0]
        assert wizard.current_step == 2

    def test_cancel_clears_and_notifies(self):
        store = InMemoryProgressStore()
        on_cancel = Mock()
        wizard = make_wizard(store, on_cancel=on_cancel)
        run_to_step(wizard, 3)
        wizard.cancel()
        assert store.load() is None
        assert wizard.current_step == 1
        on_cancel.assert_called_once()


class TestRecommendationStep:
    """Test accepting and declining a recommendation"""

    def test_accept_uses_local_engine(self):
        wizard = make_wizard()
        run_to_step(wizard, 5)
        ok, _ = wizard.accept_recommendation()
        assert ok
        assert wizard.current_step == 6
        assert wizard.state.use_recommendations is True
        assert wizard.state.budget.total_income == 1_200_000
        assert wizard.state.budget.categories
        assert not wizard.loading

    def test_service_failure_stays_on_step(self):
        service = Mock()
        service.recommend.side_effect = BudgetServiceError(APIError.TIMEOUT)
        wizard = make_wizard(recommendation_service=service)
        run_to_step(wizard, 5)
        ok, error = wizard.accept_recommendation()
        assert not ok
        assert error == APIError.get_user_message(APIError.TIMEOUT)
        assert wizard.current_step == 5
        assert not wizard.loading

    def test_request_carries_wizard_data(self):
        wizard = make_wizard()
        run_to_step(wizard, 5)
        request = wizard.recommendation_request()
        assert request['income'] == 1_200_000
        assert request['priority'] == 'increase-savings'
        assert request['selectedCategories'] == default_selection()

    def test_stale_response_discarded(self):
        wizard = make_wizard()
        run_to_step(wizard, 5)
        ticket = wizard.issue_ticket()
        wizard.jump_to(2)
        ok, _ = wizard.apply_recommendation(ticket, {'categories': []})
        assert not ok
        assert wizard.current_step == 2
        assert wizard.state.use_recommendations is None

    def test_decline_seeds_zero_budget_on_review(self):
        wizard = make_wizard()
        run_to_step(wizard, 6)
        budget = wizard.prepare_review()
        assert wizard.state.use_recommendations is False
        assert budget.categories
        assert all(e.monthly_budget == 0 for e in budget.categories)
        assert budget.total_income == 1_200_000


class TestCompletion:
    """Test the final confirmation step"""

    def test_complete_without_service(self):
        wizard = make_wizard()
        run_to_step(wizard, 7)
        ok, error = wizard.complete()
        assert not ok
        assert 'not configured' in error

    def test_service_failure_keeps_progress(self):
        store = InMemoryProgressStore()
        service = Mock()
        service.create_budget.side_effect = BudgetServiceError(APIError.SERVER_ERROR)
        wizard = make_wizard(store, budget_service=service)
        run_to_step(wizard, 7)
        ok, _ = wizard.complete()
        assert not ok
        assert wizard.current_step == 7
        assert store.load() is not None

    def test_stale_completion_ignored(self):
        wizard = make_wizard()
        run_to_step(wizard, 7)

        def create_budget(payload):
            wizard.retreat()
            return {'id': 'b1'}

        wizard.budget_service = Mock()
        wizard.budget_service.create_budget.side_effect = create_budget
        on_complete = Mock()
        wizard.on_complete = on_complete

        ok, _ = wizard.complete()
        assert not ok
        on_complete.assert_not_called()


class TestEndToEnd:
    """A user builds a budget from scratch"""

    def test_build_from_scratch(self):
        store = InMemoryProgressStore()
        service = Mock()
        service.create_budget.return_value = {'id': 'budget-1'}
        on_complete = Mock()
        wizard = make_wizard(store, user_id='u1', budget_service=service, on_complete=on_complete)

        wizard.submit_priority(Priority.preset('increase-savings'))
        wizard.submit_income([IncomeSource(name='Salary', amount=100_000, frequency='monthly')])
        wizard.skip_profile()
        wizard.submit_categories(default_selection())
        wizard.decline_recommendation()

        budget = wizard.prepare_review()
        rent = next(e for e in budget.categories if e.subcategory == 'Rent/Mortgage')
        rent.set_monthly(30_000)
        percentage = allocation_percentage(budget, VIEW_MONTHLY)
        assert percentage == pytest.approx(30)
        assert allocation_status(percentage) == STATUS_NEUTRAL

        assert wizard.submit_budget(budget, VIEW_MONTHLY)[0]
        assert wizard.state.budget.total_allocated == 360_000
        assert wizard.summary()['essential'] == 360_000

        ok, _ = wizard.complete(today=date(2025, 5, 10))
        assert ok

        payload = service.create_budget.call_args[0][0]
        assert payload['month'] == '2025-05'
        assert payload['creationMethod'] == 'guided'
        assert payload['income']['annual'] == 1_200_000
        on_complete.assert_called_once_with({'id': 'budget-1'})
        assert wizard.completed_budget == {'id': 'budget-1'}
        assert store.load() is None

    def test_two_subcategories_scenario(self):
        """Housing and Entertainment with one subcategory each, no recommendation"""
        wizard = make_wizard()
        wizard.submit_priority(Priority.preset('increase-savings'))
        wizard.submit_income([IncomeSource(name='Salary', amount=100_000, frequency='monthly')])
        wizard.submit_profile()

        selection = toggle_subcategory(deselect_all(), 'Housing', 'Rent/Mortgage')
        selection = toggle_subcategory(selection, 'Entertainment', 'Cinema')
        assert wizard.submit_categories(selection)[0]
        wizard.decline_recommendation()

        budget = wizard.prepare_review()
        assert [(e.category, e.subcategory) for e in budget.categories] == [
            ('Housing', 'Rent/Mortgage'), ('Entertainment', 'Cinema')]
        assert all(e.monthly_budget == 0 for e in budget.categories)
        assert allocation_percentage(budget, VIEW_MONTHLY) == 0

        update_entry_amount(budget, budget.categories[0].id, 'monthly_budget', 30_000)
        assert budget.categories[0].annual_budget == 360_000
        assert allocation_percentage(budget, VIEW_MONTHLY) == pytest.approx(30)
        assert allocation_status(30) == STATUS_NEUTRAL

    def test_saved_state_restores_equal(self):
        """A second wizard on the same store picks up exactly where the first stopped"""
        store = InMemoryProgressStore()
        first = make_wizard(store, user_id='u1')
        run_to_step(first, 6)
        first.prepare_review()

        second = make_wizard(store, user_id='u1')
        assert second.resumed
        assert second.state == first.state


class TestClockAndSession:
    """Test clock normalization and clearing the wizard session"""

    def test_naive_clock_restores_record(self):
        store = InMemoryProgressStore()
        saved_record(store, step=4, saved_at=NOW - timedelta(hours=1))
        wizard = make_wizard(store, clock=lambda: NOW.replace(tzinfo=None))
        assert wizard.resumed
        assert wizard.current_step == 4

    def test_naive_clock_still_expires_record(self):
        store = InMemoryProgressStore()
        saved_record(store, saved_at=NOW - timedelta(hours=30))
        wizard = make_wizard(store, clock=lambda: NOW.replace(tzinfo=None))
        assert not wizard.resumed
        assert store.load() is None

    def test_clear_wizard_session(self):
        session = {
            'budget_wizard': object(),
            'created_budget': {'id': 'b1'},
            'wizard_completed': True,
            'wizard_cancelled': False,
            'wiz_selection': {},
            'confirm_abandon': False,
            'app_config': {'currency': 'KES'},
        }
        clear_wizard_session(session)
        assert session == {'app_config': {'currency': 'KES'}}
