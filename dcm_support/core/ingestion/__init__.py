"""
Data Ingestion Module

Converts form fields and CSV batches into validated PatientRecords,
reporting every field that fell back to its default.
"""
from .patient_parser import PatientRecordParser, FIELD_SPECS
from .batch_csv import BatchCSVLoader, REQUIRED_COLUMNS, OPTIONAL_COLUMNS

__all__ = [
    "PatientRecordParser",
    "FIELD_SPECS",
    "BatchCSVLoader",
    "REQUIRED_COLUMNS",
    "OPTIONAL_COLUMNS",
]
