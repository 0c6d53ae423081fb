"""
Synthetic Data Generator

Generates waste-generation submission records matching the dashboard's
form intake format:
- date, title, region, province, municipality, name, company_name, waste_amount

Monthly totals per region follow a linear trend with annual seasonality
(holiday-season peak) and multiplicative noise.
"""

import os
import pandas as pd
import numpy as np
from typing import List, Optional

from config import DATA_CONFIG

AUTHORS = ['Maria Santos', 'Jose Reyes', 'Ana Cruz', 'Paolo Garcia', 'Liza Mendoza']


class SyntheticWasteDataGenerator:
    """Generate synthetic waste-generation submission records"""

    def __init__(self,
                 start_period: str = '2020-01',
                 n_months: int = 60,
                 regions: Optional[List[str]] = None,
                 companies: Optional[List[str]] = None,
                 submissions_per_month: int = 4,
                 seed: int = 42):
        """
        Initialize data generator

        Args:
            start_period: First month ('YYYY-MM')
            n_months: Number of months to generate
            regions: Region names
            companies: Company names
            submissions_per_month: Submissions per region and month
            seed: Random seed for reproducibility
        """
        self.start_period = pd.Period(start_period, freq='M')
        self.n_months = n_months
        self.regions = regions or DATA_CONFIG['regions']
        self.companies = companies or DATA_CONFIG['companies']
        self.submissions_per_month = submissions_per_month
        self.seed = seed

        self.rng = np.random.default_rng(seed)
        self.periods = pd.period_range(start=self.start_period, periods=n_months, freq='M')

    def _monthly_level(self, region_idx: int, month_idx: int, month_of_year: int) -> float:
        """
        Expected monthly waste (tonnes) for a region

        Args:
            region_idx: Position of region in self.regions
            month_idx: Months since start
            month_of_year: 1-12

        Returns:
            Expected monthly total
        """
        base_level = 800.0 + 250.0 * region_idx
        growth = 4.0 + 1.5 * region_idx  # tonnes per month

        # Peak around December holidays, trough mid-year
        seasonal = 1.0 + 0.15 * np.cos(2 * np.pi * (month_of_year - 12) / 12)

        return (base_level + growth * month_idx) * seasonal

    def generate_submissions(self) -> pd.DataFrame:
        """
        Generate submission records

        Returns:
            DataFrame with columns: date, title, region, province,
                                   municipality, name, company_name, waste_amount
        """
        print("\nGenerating synthetic waste submission records...")
        print(f"  Regions: {len(self.regions)}")
        print(f"  Months: {self.n_months} ({self.periods[0]} to {self.periods[-1]})")
        print(f"  Submissions per region-month: {self.submissions_per_month}")

        records = []

        for month_idx, period in enumerate(self.periods):
            month_start = period.to_timestamp()
            days_in_month = period.days_in_month

            for region_idx, region in enumerate(self.regions):
                level = self._monthly_level(region_idx, month_idx, period.month)
                noise = max(0.0, self.rng.normal(1.0, 0.08))
                monthly_total = level * noise

                # Split the month's total across submissions
                shares = self.rng.dirichlet(np.ones(self.submissions_per_month))

                for share in shares:
                    day = int(self.rng.integers(0, days_in_month))
                    records.append({
                        'date': month_start + pd.Timedelta(days=day),
                        'title': f'{region} Waste Generation Report',
                        'region': region,
                        'province': f'{region} Province',
                        'municipality': f'{region} Municipality',
                        'name': AUTHORS[int(self.rng.integers(0, len(AUTHORS)))],
                        'company_name': self.companies[int(self.rng.integers(0, len(self.companies)))],
                        'waste_amount': round(float(monthly_total * share), 2)
                    })

        df = pd.DataFrame(records).sort_values('date').reset_index(drop=True)

        print(f"\n  Generated {len(df):,} submission records")
        print(f"  Avg monthly total per region: "
              f"{df['waste_amount'].sum() / (self.n_months * len(self.regions)):.2f}")

        return df


def generate_and_save_data(output_path: str = 'data/waste_submissions.csv',
                           start_period: str = '2020-01',
                           n_months: int = 60,
                           regions: Optional[List[str]] = None,
                           companies: Optional[List[str]] = None,
                           submissions_per_month: int = 4,
                           seed: int = 42) -> pd.DataFrame:
    """
    Generate submission records and save to CSV

    Args:
        output_path: CSV path
        start_period: First month
        n_months: Number of months
        regions: Region names
        companies: Company names
        submissions_per_month: Submissions per region and month
        seed: Random seed

    Returns:
        Submission records DataFrame
    """
    generator = SyntheticWasteDataGenerator(
        start_period=start_period,
        n_months=n_months,
        regions=regions,
        companies=companies,
        submissions_per_month=submissions_per_month,
        seed=seed
    )

    df = generator.generate_submissions()

    directory = os.path.dirname(output_path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    df.to_csv(output_path, index=False)
    print(f"\n✓ Submission records saved to: {output_path}")

    return df
