"""
Data Aggregation Module

Filters waste-generation submission records and aggregates them to the
monthly series the forecasting engine consumes. Months without any
submission are left out; gap handling belongs to the normalizer.
"""

import pandas as pd
import numpy as np
from typing import List, Optional

from config import AGGREGATION_CONFIG
from waste_forecast.errors import DataError
from waste_forecast.structures import TimeSeriesPoint


def _match_text(column: pd.Series, value: str) -> pd.Series:
    return column.astype(str).str.strip().str.lower() == str(value).strip().lower()


def filter_records(df: pd.DataFrame,
                   title: Optional[str] = None,
                   location: Optional[str] = None,
                   author: Optional[str] = None,
                   company: Optional[str] = None,
                   start_date=None,
                   end_date=None,
                   date_col: Optional[str] = None) -> pd.DataFrame:
    """
    Apply report filters to submission records

    Text filters are case-insensitive exact matches. The location filter
    matches any of the configured location columns present in the frame
    (region, province, municipality, ...). The date range is inclusive of
    both end days.

    Args:
        df: Submission records
        title: Submission title
        location: Region / province / municipality name or code
        author: Submitter name
        company: Company name
        start_date: First date to include
        end_date: Last date to include
        date_col: Date column (default from config)

    Returns:
        Filtered copy of the records
    """
    date_col = date_col or AGGREGATION_CONFIG['date_col']
    mask = pd.Series(True, index=df.index)

    text_filters = [
        ('title', title, AGGREGATION_CONFIG['title_col']),
        ('author', author, AGGREGATION_CONFIG['author_col']),
        ('company', company, AGGREGATION_CONFIG['company_col']),
    ]
    for name, value, col in text_filters:
        if value is None or value == '':
            continue
        if col not in df.columns:
            raise DataError(f"Cannot filter by {name}: column '{col}' missing from records")
        mask &= _match_text(df[col], value)

    if location is not None and location != '':
        location_cols = [col for col in AGGREGATION_CONFIG['location_cols'] if col in df.columns]
        if not location_cols:
            raise DataError("Cannot filter by location: no location columns in records")
        location_mask = pd.Series(False, index=df.index)
        for col in location_cols:
            location_mask |= _match_text(df[col], location)
        mask &= location_mask

    if start_date is not None or end_date is not None:
        if date_col not in df.columns:
            raise DataError(f"Cannot filter by date: column '{date_col}' missing from records")
        dates = pd.to_datetime(df[date_col], errors='coerce')
        try:
            if start_date is not None and start_date != '':
                mask &= dates >= pd.Timestamp(start_date)
            if end_date is not None and end_date != '':
                mask &= dates < pd.Timestamp(end_date).normalize() + pd.Timedelta(days=1)
        except (TypeError, ValueError) as e:
            raise DataError(f"Invalid date range: {start_date!r} to {end_date!r}") from e

    return df[mask].copy()


def aggregate_monthly(df: pd.DataFrame,
                      value_col: Optional[str] = None,
                      date_col: Optional[str] = None,
                      **filters) -> List[TimeSeriesPoint]:
    """
    Aggregate submission records to a monthly waste series

    Process:
        1. Apply report filters
        2. Drop records with unparseable dates or amounts
        3. Sum amounts per calendar month

    Args:
        df: Submission records
        value_col: Amount column (default from config)
        date_col: Date column (default from config)
        **filters: title, location, author, company, start_date, end_date

    Returns:
        TimeSeriesPoints sorted by period, one per month with data
    """
    value_col = value_col or AGGREGATION_CONFIG['value_col']
    date_col = date_col or AGGREGATION_CONFIG['date_col']

    missing = [col for col in (date_col, value_col) if col not in df.columns]
    if missing:
        raise DataError(f"Records are missing columns: {missing}")

    filtered = filter_records(df, date_col=date_col, **filters)

    frame = pd.DataFrame({
        'date': pd.to_datetime(filtered[date_col], errors='coerce'),
        'value': pd.to_numeric(filtered[value_col], errors='coerce')
    })
    invalid = frame.isna().any(axis=1)
    if invalid.any():
        print(f"  Dropping {invalid.sum():,} records with missing date or amount")
    frame = frame[~invalid]

    monthly = frame.groupby(frame['date'].dt.to_period('M'))['value'].sum().sort_index()

    print(f"  Aggregated {len(filtered):,} records into {len(monthly)} months")

    return [TimeSeriesPoint(period=period, value=float(value)) for period, value in monthly.items()]


def validate_records(df: pd.DataFrame,
                     value_col: Optional[str] = None,
                     date_col: Optional[str] = None) -> bool:
    """
    Validate submission records before aggregation

    Args:
        df: Submission records

    Returns:
        True if validation passes
    """
    value_col = value_col or AGGREGATION_CONFIG['value_col']
    date_col = date_col or AGGREGATION_CONFIG['date_col']

    print("\n" + "="*60)
    print("VALIDATING SUBMISSION RECORDS")
    print("="*60)

    checks_passed = True

    missing_cols = [col for col in (date_col, value_col) if col not in df.columns]
    if missing_cols:
        print(f"  ✗ Missing columns: {missing_cols}")
        print("="*60)
        return False
    print(f"  ✓ All required columns present")

    dates = pd.to_datetime(df[date_col], errors='coerce')
    if dates.isna().any():
        print(f"  ✗ Unparseable dates: {dates.isna().sum():,}")
        checks_passed = False
    else:
        print(f"  ✓ All dates parseable")

    amounts = pd.to_numeric(df[value_col], errors='coerce')
    if amounts.isna().any():
        print(f"  ✗ Missing or non-numeric amounts: {amounts.isna().sum():,}")
        checks_passed = False
    else:
        print(f"  ✓ No missing amounts")

    if (amounts < 0).any():
        print(f"  ✗ Negative amounts found")
        checks_passed = False
    else:
        print(f"  ✓ No negative amounts")

    if not np.isfinite(amounts.dropna()).all():
        print(f"  ✗ Infinite amounts found")
        checks_passed = False

    if not dates.dropna().empty:
        months = dates.dropna().dt.to_period('M')
        expected = (months.max() - months.min()).n + 1
        actual = months.nunique()
        if expected != actual:
            print(f"  ⚠ Month gaps detected ({actual}/{expected} months)")
        else:
            print(f"  ✓ Complete month sequence")

    if checks_passed:
        print("\n✓ All validation checks passed!")
    else:
        print("\n✗ Some validation checks failed!")

    print("="*60)

    return checks_passed
