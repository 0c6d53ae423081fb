"""
End-to-end test of the pipeline on a small synthetic data set.
"""
import json

import joblib
import pandas as pd
import pytest

import config
from main_pipeline import WasteForecastPipeline


@pytest.fixture
def small_config(monkeypatch):
    monkeypatch.setitem(config.DATA_CONFIG, 'generate_new_data', True)
    monkeypatch.setitem(config.DATA_CONFIG, 'n_months', 30)
    monkeypatch.setitem(config.SIMULATION_CONFIG, 'iterations', 200)
    monkeypatch.setitem(config.SIMULATION_CONFIG, 'seed', 42)
    monkeypatch.setitem(config.FORECAST_CONFIG, 'forecast_horizon', 6)
    monkeypatch.setitem(config.EVALUATION_CONFIG, 'iterations', 100)


class TestWasteForecastPipeline:
    def test_complete_run(self, small_config, tmp_path):
        pipeline = WasteForecastPipeline(output_dir=str(tmp_path), make_plots=False)
        results = pipeline.run_complete_pipeline()

        forecast_df = results['forecast']
        assert len(forecast_df) == 6
        assert (forecast_df['lower'] <= forecast_df['mean']).all()
        assert (forecast_df['mean'] <= forecast_df['upper']).all()
        assert results['metrics']['n_samples'] == config.EVALUATION_CONFIG['holdout_months']

        response = json.loads((tmp_path / 'forecasts' / 'forecast_response.json').read_text())
        assert response['success'] is True
        assert response['simResult'] == [
            {'step': int(row.step), 'mean': row.mean, 'upper': row.upper, 'lower': row.lower}
            for row in forecast_df.itertuples()
        ]
        assert len(response['timeSeriesData']) == 30

        saved = pd.read_csv(tmp_path / 'forecasts' / 'forecast.csv')
        assert list(saved['period']) == list(forecast_df['period'])

        decomposition = joblib.load(tmp_path / 'models' / 'decomposition.pkl')
        assert decomposition.trend_slope == pytest.approx(results['decomposition'].trend_slope)

        assert (tmp_path / 'SUMMARY_REPORT.txt').exists()
        assert (tmp_path / 'data' / 'monthly_series.csv').exists()

    def test_filtered_run(self, small_config, tmp_path):
        region = config.DATA_CONFIG['regions'][0]
        pipeline = WasteForecastPipeline(output_dir=str(tmp_path), filters={'location': region},
                                         make_plots=False)
        pipeline.run_complete_pipeline()

        monthly = pd.read_csv(tmp_path / 'data' / 'monthly_series.csv')
        records = pipeline.records_df
        assert monthly['value'].sum() == pytest.approx(
            records.loc[records['region'] == region, 'waste_amount'].sum()
        )
