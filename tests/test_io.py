"""
Unit tests for IO utilities (progress records, budget payload, exports).
"""
import pytest
import json
import pandas as pd
from io import StringIO
from datetime import datetime, date, timezone

from io_utils import (
    create_progress_record, parse_progress_record, build_budget_payload,
    budget_to_dataframe, export_budget_csv, format_currency, profile_to_payload,
)
from wizard_models import WizardState, Priority, IncomeSource, Profile, Budget, BudgetEntry


def make_state():
    entry = BudgetEntry('Housing', 'Rent/Mortgage', is_essential=True, group='essential')
    entry.set_monthly(30_000)
    return WizardState(
        current_step=7,
        priority=Priority.preset('increase-savings'),
        income_sources=[IncomeSource(name='Salary', amount=100_000)],
        profile=Profile(age_range='26-35', living_situation='renting-alone', dependents=1),
        budget=Budget(categories=[entry], total_income=1_200_000),
    )


class TestProgressRecord:
    """Test saved progress serialization"""

    def test_record_shape(self):
        now = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)
        record = json.loads(create_progress_record(make_state(), 'user-1', now))

        assert record['userId'] == 'user-1'
        assert record['currentStep'] == 7
        assert record['timestamp'] == now.isoformat()
        assert record['data']['priority'] == 'increase-savings'

    def test_parse_round_trip(self):
        now = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)
        parsed = parse_progress_record(create_progress_record(make_state(), None, now))

        assert parsed['userId'] is None
        assert parsed['timestamp'] == now
        assert parsed['data'].income_sources[0].name == 'Salary'

    def test_naive_timestamp_treated_as_utc(self):
        payload = json.dumps({'userId': None, 'currentStep': 2, 'data': {},
                              'timestamp': '2025-03-01T12:00:00'})
        assert parse_progress_record(payload)['timestamp'].tzinfo is not None

    def test_out_of_range_step_clamped(self):
        payload = json.dumps({'userId': None, 'currentStep': 42, 'data': {},
                              'timestamp': '2025-03-01T12:00:00+00:00'})
        assert parse_progress_record(payload)['currentStep'] == 7

    @pytest.mark.parametrize("payload", [
        'not json',
        '[]',
        '{"userId": null, "currentStep": 2, "data": {}}',
        '{"userId": null, "currentStep": 2, "data": {}, "timestamp": "yesterday"}',
    ])
    def test_corrupt_records_raise(self, payload):
        with pytest.raises((ValueError, KeyError, TypeError)):
            parse_progress_record(payload)


class TestBudgetPayload:
    """Test the budget creation request body"""

    def test_monthly_payload(self):
        payload = build_budget_payload(make_state(), 'monthly', date(2025, 4, 9))

        assert payload['month'] == '2025-04'
        assert 'year' not in payload
        assert payload['income']['annual'] == 1_200_000
        assert payload['income']['monthly'] == 100_000
        assert payload['creationMethod'] == 'guided'
        assert payload['priority'] == 'increase-savings'
        assert payload['categories'][0]['monthlyBudget'] == 30_000
        assert payload['categories'][0]['annualBudget'] == 360_000
        assert payload['userProfile']['livingSituation'] == 'renting-alone'

    def test_annual_payload(self):
        payload = build_budget_payload(make_state(), 'annual', date(2025, 4, 9))
        assert payload['year'] == 2025
        assert 'month' not in payload

    def test_profile_payload_is_camel_case(self):
        assert set(profile_to_payload(Profile())) == {
            'ageRange', 'livingSituation', 'lifeStage', 'dependents', 'location'}


class TestExports:
    """Test dataframe and CSV export"""

    def test_dataframe(self):
        df = budget_to_dataframe(make_state().budget)
        assert isinstance(df, pd.DataFrame)
        assert df.iloc[0]['group'] == 'Essential'
        assert df.iloc[0]['annual_budget'] == 360_000

    def test_empty_dataframe_keeps_columns(self):
        assert 'monthly_budget' in budget_to_dataframe(Budget()).columns

    def test_csv_has_no_id(self):
        df = pd.read_csv(StringIO(export_budget_csv(make_state().budget)))
        assert 'id' not in df.columns
        assert df.iloc[0]['subcategory'] == 'Rent/Mortgage'


class TestFormatting:
    """Test currency formatting"""

    def test_format_currency(self):
        assert format_currency(1_200_000) == 'KSh 1,200,000'
        assert format_currency(1234.5, 'USD', 2) == '$ 1,234.50'
        assert format_currency(-500) == '-KSh 500'
        assert format_currency(10, 'JPY') == 'JPY 10'
