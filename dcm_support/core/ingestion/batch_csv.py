"""
Batch CSV Ingestion

Loads a table of patients (one row each, header row first) from CSV text
or a file and parses every row into a PatientRecord.

Required columns: age, sex, mjoa, duration_months, levels, canal_ratio,
                  t2_signal
Optional columns: opll, smoker, t1_hypo (absent → "no")

A missing required column rejects the whole batch before any row is
parsed.  Blank rows are skipped.
"""
from __future__ import annotations

import io
from pathlib import Path
from typing import List, Optional

import pandas as pd

from dcm_support.core.clinical.base import ParsedRow
from dcm_support.utils import (
    BatchEmptyError,
    BatchHeaderError,
    BatchInputError,
    get_logger,
)
from .patient_parser import PatientRecordParser

logger = get_logger(__name__)

REQUIRED_COLUMNS = [
    "age", "sex", "mjoa", "duration_months", "levels", "canal_ratio", "t2_signal",
]
OPTIONAL_COLUMNS = ["opll", "smoker", "t1_hypo"]


class BatchCSVLoader:
    """
    CSV batch loader.

    Usage:
        loader = BatchCSVLoader()
        rows = loader.load_text("age,sex,mjoa,...\\n65,M,13,...")
        rows = loader.load_file("cohort.csv")
    """

    def __init__(self, parser: Optional[PatientRecordParser] = None):
        self.parser = parser or PatientRecordParser()

    def read_text(self, text: str, source: str = "<text>") -> pd.DataFrame:
        """
        Read CSV text into a DataFrame of stripped strings with normalised headers.

        Raises:
            BatchEmptyError: no header row
            BatchInputError: text is not parseable as CSV
        """
        if not text or not text.strip():
            raise BatchEmptyError("Batch input is empty; a header row is required")

        try:
            df = pd.read_csv(
                io.StringIO(text.strip()),
                dtype=str,
                # Trailing commas must not promote the first column to the index
                index_col=False,
                keep_default_na=False,
                skip_blank_lines=True,
            )
        except pd.errors.EmptyDataError:
            raise BatchEmptyError("Batch input is empty; a header row is required")
        except (pd.errors.ParserError, UnicodeDecodeError) as e:
            raise BatchInputError(f"Failed to parse batch CSV: {e}", source=source)

        df.columns = [str(c).strip().lower() for c in df.columns]
        for col in df.columns:
            df[col] = df[col].fillna("").astype(str).str.strip()
        return df

    def read_file(self, filepath: str) -> pd.DataFrame:
        path = Path(filepath)
        if not path.exists():
            raise BatchInputError(f"Batch file not found: {filepath}", source=str(filepath))

        try:
            text = path.read_text(encoding="utf-8-sig")
        except (OSError, UnicodeDecodeError) as e:
            raise BatchInputError(
                f"Failed to read batch file: {e}",
                source=str(filepath),
            )
        return self.read_text(text, source=str(filepath))

    def parse_frame(self, df: pd.DataFrame) -> List[ParsedRow]:
        """
        Validate columns and parse every non-blank row.

        Raises:
            BatchHeaderError: required columns missing (no rows parsed)
            BatchEmptyError: header present but no data rows
        """
        missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
        if missing:
            raise BatchHeaderError(missing, details={"found_columns": list(df.columns)})

        known = REQUIRED_COLUMNS + [c for c in OPTIONAL_COLUMNS if c in df.columns]
        data = df[known].reset_index(drop=True)
        # Rows made only of separators survive skip_blank_lines
        data = data[(data != "").any(axis=1)]
        if data.empty:
            raise BatchEmptyError("Batch input has a header but no data rows")

        rows = []
        for position, (_, row) in enumerate(data.iterrows()):
            row_number = position + 1
            record, fallbacks = self.parser.parse(row.to_dict(), row_number=row_number)
            rows.append(ParsedRow(row_number=row_number, record=record, fallbacks=fallbacks))

        flagged = sum(1 for r in rows if r.fallbacks)
        logger.info(
            f"Loaded batch: {len(rows)} row(s), columns={known}, "
            f"{flagged} row(s) with field fallbacks"
        )
        return rows

    def load_text(self, text: str) -> List[ParsedRow]:
        return self.parse_frame(self.read_text(text))

    def load_file(self, filepath: str) -> List[ParsedRow]:
        return self.parse_frame(self.read_file(filepath))
