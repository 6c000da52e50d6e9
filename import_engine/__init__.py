"""
import_engine - CSV employee-import pipeline.

Public API:
    run_import(file_content, uploaded_by, actor_role=...) → ImportResult
"""

from import_engine.importer import run_import, ImportResult, ImportNotPermitted   # noqa: F401
from import_engine.report import ImportReport                                      # noqa: F401
from import_engine.csv_parser import CsvParseError                                 # noqa: F401
