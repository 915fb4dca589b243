"""
Workbook reader.

Opens a spreadsheet workbook and returns each worksheet as a grid of cell
values, keyed by sheet name in workbook order. Office Open XML workbooks
(.xlsx and friends) are read with openpyxl; legacy binary .xls workbooks
are read through pandas with the calamine engine.
"""

import math
from io import BytesIO
from typing import Any, Dict, List

import numpy as np
import pandas as pd
from openpyxl import load_workbook

from .logging_utils import get_logger


SPREADSHEET_EXTENSIONS = ('.xlsx', '.xlsm', '.xltx', '.xltm', '.xls')

# Compound document header of binary .xls files
XLS_SIGNATURE = b'\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1'


class WorkbookReadError(Exception):
    """Raised when a workbook cannot be opened or read."""
    pass


def is_spreadsheet_name(filename: str) -> bool:
    return filename.lower().endswith(SPREADSHEET_EXTENSIONS)


def is_binary_xls(content: bytes) -> bool:
    return content[:len(XLS_SIGNATURE)] == XLS_SIGNATURE


def _empty_to_none(value: Any) -> Any:
    # pandas fills empty cells with NaN
    if isinstance(value, float) and math.isnan(value):
        return None
    if value is pd.NaT:
        return None
    if isinstance(value, np.generic):
        return value.item()
    return value


def read_workbook(content: bytes) -> Dict[str, List[List[Any]]]:
    """
    Read every worksheet of a workbook.

    Formula cells yield their cached values; date cells yield datetime
    objects. Empty cells are None.

    Args:
        content: Raw workbook bytes (.xlsx family or binary .xls)

    Returns:
        Sheet name -> grid of cell values

    Raises:
        WorkbookReadError: If the content is not a readable workbook
    """
    if is_binary_xls(content):
        return _read_binary_xls(content)
    return _read_openxml(content)


def _read_openxml(content: bytes) -> Dict[str, List[List[Any]]]:
    logger = get_logger('workbook_reader')
    try:
        wb = load_workbook(BytesIO(content), read_only=True, data_only=True)
    except Exception as e:
        raise WorkbookReadError(f"Failed to open workbook: {e}")

    try:
        sheets: Dict[str, List[List[Any]]] = {}
        for ws in wb.worksheets:
            sheets[ws.title] = [list(row) for row in ws.iter_rows(values_only=True)]
            logger.debug(f"Read sheet '{ws.title}' ({len(sheets[ws.title])} row(s))")
        return sheets
    except Exception as e:
        raise WorkbookReadError(f"Failed to read workbook: {e}")
    finally:
        wb.close()


def _read_binary_xls(content: bytes) -> Dict[str, List[List[Any]]]:
    logger = get_logger('workbook_reader')
    try:
        xl = pd.ExcelFile(BytesIO(content), engine='calamine')
    except Exception as e:
        raise WorkbookReadError(f"Failed to open .xls workbook: {e}")

    try:
        sheets: Dict[str, List[List[Any]]] = {}
        for name in xl.sheet_names:
            frame = xl.parse(sheet_name=name, header=None, dtype=object)
            rows = [[_empty_to_none(v) for v in row] for row in frame.values.tolist()]
            sheets[str(name)] = rows
            logger.debug(f"Read .xls sheet '{name}' ({len(rows)} row(s))")
        return sheets
    except Exception as e:
        raise WorkbookReadError(f"Failed to read .xls workbook: {e}")
    finally:
        xl.close()
