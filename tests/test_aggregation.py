"""
Tests for record filtering and monthly aggregation.
"""
import numpy as np
import pandas as pd
import pytest

from waste_forecast.aggregation import aggregate_monthly, filter_records, validate_records
from waste_forecast.errors import DataError


def as_dict(points):
    return {str(p.period): p.value for p in points}


class TestAggregateMonthly:
    """Test monthly sums."""

    def test_sums_per_month(self, records_df):
        points = aggregate_monthly(records_df)

        assert as_dict(points) == {'2023-01': 30.0, '2023-02': 30.0, '2023-03': 20.0, '2023-04': 60.0}

    def test_sorted_by_period(self, records_df):
        shuffled = records_df.sample(frac=1.0, random_state=0)
        periods = [p.period for p in aggregate_monthly(shuffled)]
        assert periods == sorted(periods)

    def test_months_without_records_are_omitted(self, records_df):
        """Gaps are left to the normalizer."""
        points = aggregate_monthly(records_df, company='GreenCorp', start_date='2023-02-01')
        assert list(as_dict(points)) == ['2023-02', '2023-03', '2023-04']

        points = aggregate_monthly(records_df, author='Jose Reyes')
        assert list(as_dict(points)) == ['2023-01', '2023-03']

    def test_invalid_rows_dropped(self, records_df):
        records_df.loc[0, 'waste_amount'] = np.nan
        records_df['date'] = records_df['date'].astype(str)
        records_df.loc[1, 'date'] = 'unknown'

        points = aggregate_monthly(records_df)
        assert '2023-01' not in as_dict(points)

    def test_string_amounts_coerced(self, records_df):
        records_df['waste_amount'] = records_df['waste_amount'].astype(str)
        assert as_dict(aggregate_monthly(records_df))['2023-04'] == 60.0

    def test_missing_value_column(self, records_df):
        with pytest.raises(DataError):
            aggregate_monthly(records_df.drop(columns=['waste_amount']))

    def test_custom_columns(self, records_df):
        df = records_df.rename(columns={'waste_amount': 'tonnes', 'date': 'submitted_at'})
        points = aggregate_monthly(df, value_col='tonnes', date_col='submitted_at')
        assert as_dict(points)['2023-01'] == 30.0


class TestFilterRecords:
    """Test report filters."""

    def test_location_matches_region(self, records_df):
        points = aggregate_monthly(records_df, location='ncr')
        assert as_dict(points) == {'2023-01': 10.0, '2023-02': 30.0, '2023-03': 5.0, '2023-04': 60.0}

    def test_location_matches_municipality(self, records_df):
        points = aggregate_monthly(records_df, location='Makati')
        assert as_dict(points) == {'2023-02': 30.0, '2023-04': 35.0}

    def test_title_case_insensitive(self, records_df):
        points = aggregate_monthly(records_df, title='monthly report')
        assert as_dict(points)['2023-03'] == 15.0

    def test_company(self, records_df):
        points = aggregate_monthly(records_df, company='EcoWaste')
        assert as_dict(points) == {'2023-01': 20.0, '2023-03': 15.0, '2023-04': 35.0}

    def test_author(self, records_df):
        filtered = filter_records(records_df, author='Maria Santos')
        assert filtered['waste_amount'].sum() == 65.0

    def test_date_range_inclusive(self, records_df):
        """The end date includes the whole day."""
        points = aggregate_monthly(records_df, start_date='2023-02-01', end_date='2023-04-15')
        assert as_dict(points) == {'2023-02': 30.0, '2023-03': 20.0, '2023-04': 25.0}

    def test_no_filters_returns_copy(self, records_df):
        filtered = filter_records(records_df)
        assert len(filtered) == len(records_df)
        assert filtered is not records_df

    def test_empty_filters_ignored(self, records_df):
        assert len(filter_records(records_df, title='', location='')) == len(records_df)

    def test_no_match(self, records_df):
        assert aggregate_monthly(records_df, company='Nobody Inc') == []

    def test_missing_filter_column(self, records_df):
        with pytest.raises(DataError):
            filter_records(records_df.drop(columns=['company_name']), company='EcoWaste')

    def test_no_location_columns(self, records_df):
        df = records_df.drop(columns=['region', 'province', 'municipality'])
        with pytest.raises(DataError):
            filter_records(df, location='NCR')

    def test_invalid_date(self, records_df):
        with pytest.raises(DataError):
            filter_records(records_df, start_date='sometime')


class TestValidateRecords:
    """Test the pre-aggregation checklist."""

    def test_valid_records(self, records_df):
        assert validate_records(records_df) is True

    def test_negative_amount(self, records_df):
        records_df.loc[2, 'waste_amount'] = -1.0
        assert validate_records(records_df) is False

    def test_missing_column(self, records_df):
        assert validate_records(records_df.drop(columns=['date'])) is False

    def test_unparseable_date(self, records_df):
        df = records_df.assign(date=records_df['date'].astype(str))
        df.loc[0, 'date'] = 'unknown'
        assert validate_records(df) is False

    def test_month_gap_is_warning_only(self, records_df):
        gappy = records_df[records_df['date'].dt.month != 2]
        assert validate_records(gappy) is True

    def test_gap_reported(self, records_df, capsys):
        validate_records(records_df[records_df['date'].dt.month != 2])
        assert 'Month gaps detected (3/4 months)' in capsys.readouterr().out
