# pos_backend/services/imports.py
"""Bulk product creation from a spreadsheet.

Fixed column layout (first sheet, first row is a header):
description | quantity | total value | unit | unit price | sale price
"""
import logging
import math
from typing import IO, Any, Optional

import pandas as pd
from sqlalchemy.orm import Session

from pos_backend.schemas.product import ImportSummary
from pos_backend.services.products import insert_product
from pos_backend.utils.results import Failure, Ok, Result, invalid

logger = logging.getLogger(__name__)

COLUMNS = ["description", "quantity", "total_value", "unit", "unit_price", "sale_price"]


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return str(value).strip() == ""


def _number(value: Any) -> Optional[float]:
    if _is_blank(value):
        return None
    try:
        number = float(str(value).strip().replace(",", "."))
    except ValueError:
        return None
    return None if math.isnan(number) else number


def read_sheet(source: IO[bytes]) -> Result[pd.DataFrame]:
    try:
        frame = pd.read_excel(source, sheet_name=0, header=None, dtype=object)
    except Exception as exc:
        logger.warning("Unreadable spreadsheet: %s", exc)
        return invalid("Could not read the spreadsheet file")

    # Pad short sheets so every row exposes the six expected cells
    for idx in range(len(frame.columns), len(COLUMNS)):
        frame[idx] = None
    frame = frame.iloc[:, : len(COLUMNS)]
    frame.columns = COLUMNS
    return Ok(frame)


def import_products(db: Session, source: IO[bytes]) -> Result[ImportSummary]:
    """Insert one product + stock row per valid sheet row.

    Each row is committed on its own; a database error aborts the import but
    leaves the rows before it in place.
    """
    sheet = read_sheet(source)
    if isinstance(sheet, Failure):
        return sheet

    imported = skipped = 0
    for line_no, row in enumerate(sheet.value.itertuples(index=False), start=1):
        if line_no == 1:
            continue  # header

        description = row.description
        if _is_blank(description) or str(description).strip().upper() == "TOTAL":
            skipped += 1
            continue
        description = str(description).strip()

        quantity = _number(row.quantity)
        if quantity is None or quantity < 0:
            logger.warning("Row %d skipped: invalid quantity (%r)", line_no, row.quantity)
            skipped += 1
            continue

        sale_price = _number(row.sale_price)
        try:
            insert_product(
                db,
                name=description,
                unit_cost=_number(row.unit_price) or 0,
                sale_price=sale_price or None,
                description=description,
                quantity=math.floor(quantity),
            )
            db.commit()
        except Exception:
            db.rollback()
            logger.exception("Import aborted at row %d after %d product(s)", line_no, imported)
            raise
        imported += 1

    logger.info("Spreadsheet import finished: %d imported, %d skipped", imported, skipped)
    return Ok(ImportSummary(imported=imported, skipped=skipped))
