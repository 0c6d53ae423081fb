"""
Configuration File for Waste Generation Forecasting

Central place to configure all parameters for the forecasting engine
and the end-to-end pipeline. Modify values here to experiment with
different settings.
"""

# ==============================================================================
# SYNTHETIC DATA GENERATION
# ==============================================================================
DATA_CONFIG = {
    'generate_new_data': True,  # Set False to use existing data
    'data_path': 'data/waste_submissions.csv',  # Path if using existing data
    'start_period': '2020-01',
    'n_months': 60,  # 5 years of monthly submissions
    'regions': ['NCR', 'Region III (Central Luzon)', 'Region IV-A (CALABARZON)'],
    'companies': ['GreenCycle Inc.', 'EcoWaste Partners', 'CleanCity Services'],
    'submissions_per_month': 4,
    'seed': 42
}

# ==============================================================================
# MONTHLY AGGREGATION
# ==============================================================================
AGGREGATION_CONFIG = {
    'date_col': 'date',
    'value_col': 'waste_amount',
    'location_cols': ['location', 'region', 'province', 'municipality', 'barangay'],
    'title_col': 'title',
    'author_col': 'name',
    'company_col': 'company_name'
}

# ==============================================================================
# DECOMPOSITION (TREND + SEASONALITY)
# ==============================================================================
DECOMPOSITION_CONFIG = {
    'seasonal_mode': 'additive',   # 'additive' or 'multiplicative'
    'min_seasonal_months': 24,     # Shorter series get a neutral seasonal index
    'season_length': 12            # Calendar months
}

# ==============================================================================
# PATH SIMULATION
# ==============================================================================
SIMULATION_CONFIG = {
    'iterations': 1000,         # Number of Monte-Carlo trials
    'min_resample_size': 6,     # Below this, residual noise is Gaussian
    'trend_uncertainty': True,  # Perturb slope by its standard error per trial
    'n_jobs': 1,                # joblib workers (0 or 1 = sequential)
    'seed': None                # Master seed (None = fresh entropy)
}

# ==============================================================================
# ENSEMBLE AGGREGATION
# ==============================================================================
ENSEMBLE_CONFIG = {
    'band_method': 'percentile',  # 'percentile' or 'parametric'
    'confidence': 0.95            # 2.5th / 97.5th percentiles
}

# ==============================================================================
# FORECAST CONFIGURATION
# ==============================================================================
FORECAST_CONFIG = {
    'forecast_horizon': 12,             # Default forecastMonths
    'max_horizon': 120,
    'max_iterations': 100000,
    'recommended_min_iterations': 200   # Not enforced, reported when verbose
}

# ==============================================================================
# EVALUATION
# ==============================================================================
EVALUATION_CONFIG = {
    'holdout_months': 6,
    'iterations': 500,
    'seed': 42
}

# ==============================================================================
# OUTPUT CONFIGURATION
# ==============================================================================
OUTPUT_CONFIG = {
    'output_dir': 'outputs',
    'model_dir': 'models',
    'data_dir': 'data'
}

# ==============================================================================
# EVALUATION METRICS TARGETS
# ==============================================================================
METRIC_TARGETS = {
    'mape_target': 20.0,     # Target MAPE < 20%
    'coverage_target': 80.0  # At least 80% of held-out months inside the band
}
