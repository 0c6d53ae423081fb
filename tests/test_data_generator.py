"""
Tests for synthetic submission records.
"""
import pandas as pd

from waste_forecast.aggregation import aggregate_monthly, validate_records
from waste_forecast.data_generator import SyntheticWasteDataGenerator, generate_and_save_data


class TestSyntheticWasteDataGenerator:
    def test_columns_and_size(self):
        generator = SyntheticWasteDataGenerator(n_months=6, regions=['A', 'B'],
                                                submissions_per_month=3, seed=1)
        df = generator.generate_submissions()

        assert len(df) == 6 * 2 * 3
        assert list(df.columns) == ['date', 'title', 'region', 'province', 'municipality',
                                    'name', 'company_name', 'waste_amount']
        assert (df['waste_amount'] >= 0).all()
        assert df['date'].is_monotonic_increasing

    def test_seeded(self):
        a = SyntheticWasteDataGenerator(n_months=4, seed=3).generate_submissions()
        b = SyntheticWasteDataGenerator(n_months=4, seed=3).generate_submissions()
        pd.testing.assert_frame_equal(a, b)

    def test_records_pass_validation(self):
        df = SyntheticWasteDataGenerator(n_months=12, seed=0).generate_submissions()
        assert validate_records(df) is True

    def test_aggregates_to_every_month(self):
        df = SyntheticWasteDataGenerator(start_period='2021-03', n_months=15, seed=0).generate_submissions()
        points = aggregate_monthly(df)

        assert len(points) == 15
        assert str(points[0].period) == '2021-03'

    def test_december_peak(self):
        """Holiday-season months are above mid-year months on average."""
        df = SyntheticWasteDataGenerator(n_months=48, seed=5).generate_submissions()
        monthly = df.groupby(df['date'].dt.month)['waste_amount'].sum()
        assert monthly[12] > monthly[6]


class TestGenerateAndSave:
    def test_writes_csv(self, tmp_path):
        path = tmp_path / 'data' / 'records.csv'
        df = generate_and_save_data(output_path=str(path), n_months=3, seed=2)

        assert path.exists()
        assert len(pd.read_csv(path)) == len(df)
