from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import pandas as pd

from .classification import build_classification_table
from .models import Category, RawRow

SPREADSHEET_SUFFIXES = {".csv", ".xlsx", ".xls"}


def _load_source(source: Union[str, Path, pd.DataFrame]) -> pd.DataFrame:
    if isinstance(source, pd.DataFrame):
        return source.copy()

    path = Path(source)
    if not path.exists():
        raise FileNotFoundError(path)

    if path.suffix.lower() in {".xlsx", ".xls"}:
        # first sheet only
        return pd.read_excel(path, sheet_name=0)
    if path.suffix.lower() == ".csv":
        return pd.read_csv(path)
    raise ValueError("Unsupported file type. Use .csv, .xlsx or .xls")


def read_spreadsheet(source: Union[str, Path, pd.DataFrame]) -> List[RawRow]:
    """
    Load a CSV/Excel sheet as a list of header → cell dicts.
    Empty cells become "", everything else keeps the type pandas read it as.
    """
    df = _load_source(source)
    df.columns = [str(c) for c in df.columns]
    df = df.astype(object).where(df.notna(), "")
    return df.to_dict(orient="records")


def _find_column(columns: List[str], needle: str) -> Optional[str]:
    for col in columns:
        if needle in col.lower():
            return col
    return None


def load_classification_table(
    source: Union[str, Path, pd.DataFrame],
) -> Tuple[Dict[str, Category], List[str]]:
    """
    Read an account → category sheet.
    Uses the first column whose header contains "account" and the first containing
    "category"; returns the validated table plus warnings for rows that were skipped.
    """
    rows = read_spreadsheet(source)
    columns = list(rows[0].keys()) if rows else []
    account_col = _find_column(columns, "account")
    category_col = _find_column(columns, "category")
    if not rows:
        return {}, []
    if account_col is None or category_col is None:
        raise ValueError("Classification sheet needs an 'account' column and a 'category' column")

    entries = {row[account_col]: row[category_col] for row in rows}
    return build_classification_table(entries)
