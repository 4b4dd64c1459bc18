"""PPLA command stream for 3-column barcode label rolls."""
import math

from pos_backend.services.products import barcode_from_id

LABELS_PER_ROW = 3
NAME_WIDTH = 30

# Column x offsets (printer dots) for the text block and the barcode
COLUMNS = [("050", "0040"), ("410", "0400"), ("770", "0760")]


def _column(name: str, price: str, barcode: str, text_x: str, code_x: str) -> str:
    return (
        f"111100001800{text_x}{name}\n"
        f"111100001600{text_x}\n"
        f"111100001300{text_x}{price}\n"
        f"1D420380050{code_x}{barcode}\n"
    )


def label_row(name: str, price: str, barcode: str) -> str:
    body = "\n".join(_column(name, price, barcode, tx, cx) for tx, cx in COLUMNS)
    return f"L\nm\ne\nPC\nD11\nH14\nz\n{body}\nQ001\nE\n"


def render_labels(product_id: int, name: str, price: float, count: int) -> str:
    """One printed row holds three labels, so ceil(count / 3) rows are emitted."""
    rows = math.ceil(max(count, 0) / LABELS_PER_ROW)
    row = label_row((name or "")[:NAME_WIDTH], f"{price:.2f}", barcode_from_id(product_id))
    return row * rows


def label_filename(product_id: int) -> str:
    return f"etiqueta_{product_id}.prn"
