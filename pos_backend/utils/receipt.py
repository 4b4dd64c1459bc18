# pos_backend/utils/receipt.py
import io
import logging
from pathlib import Path
from typing import Optional

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.pdfgen import canvas

from pos_backend.models.sale import Sale, SaleStatus
from pos_backend.services.customers import format_tax_id

logger = logging.getLogger(__name__)

PACKAGE_DIR = Path(__file__).resolve().parents[1]
FONT_DIRS = [PACKAGE_DIR / "assets" / "fonts", Path("/usr/share/fonts/truetype/dejavu")]

FONT_REGULAR_NAME = "Helvetica"
FONT_BOLD_NAME = "Helvetica-Bold"

_fonts_inited = False


def _find_font(name: str) -> Optional[Path]:
    for d in FONT_DIRS:
        p = d / name
        if p.exists():
            return p
    return None


def _init_fonts() -> None:
    """Register DejaVu (accented characters) when available, else keep Helvetica."""
    global _fonts_inited, FONT_REGULAR_NAME, FONT_BOLD_NAME
    if _fonts_inited:
        return
    _fonts_inited = True

    regular = _find_font("DejaVuSans.ttf")
    if not regular:
        return
    pdfmetrics.registerFont(TTFont("DejaVuSans", str(regular)))
    FONT_REGULAR_NAME = FONT_BOLD_NAME = "DejaVuSans"

    bold = _find_font("DejaVuSans-Bold.ttf")
    if bold:
        pdfmetrics.registerFont(TTFont("DejaVuSans-Bold", str(bold)))
        FONT_BOLD_NAME = "DejaVuSans-Bold"


def receipt_filename(sale_id: int) -> str:
    return f"receipt_sale_{sale_id}.pdf"


def money(value) -> str:
    return f"R$ {float(value or 0):.2f}"


def render_receipt(sale: Sale, store_name: str = "") -> bytes:
    """Itemised sale receipt: header, customer, total and one line per item."""
    _init_fonts()

    buffer = io.BytesIO()
    c = canvas.Canvas(buffer, pagesize=A4)
    width, height = A4
    c.setTitle(f"Receipt {sale.id}")

    y = height - 25 * mm
    if store_name:
        c.setFont(FONT_BOLD_NAME, 12)
        c.drawCentredString(width / 2, y, store_name)
        y -= 8 * mm

    c.setFont(FONT_BOLD_NAME, 20)
    c.drawCentredString(width / 2, y, "Sales Receipt")
    y -= 12 * mm

    customer = sale.customer
    date_str = sale.created_at.strftime("%d/%m/%Y %H:%M") if sale.created_at else "-"
    header_lines = [
        f"Sale ID: {sale.id}",
        f"Date: {date_str}",
        f"Customer: {customer.name if customer else 'No customer'}",
        f"Tax ID: {format_tax_id(customer.tax_id) if customer else '-'}",
        f"Total: {money(sale.total)}",
    ]
    if sale.status == SaleStatus.CANCELLED:
        header_lines.append("Status: CANCELLED")

    c.setFont(FONT_REGULAR_NAME, 12)
    for line in header_lines:
        c.drawString(20 * mm, y, line)
        y -= 6 * mm

    y -= 6 * mm
    c.setFont(FONT_BOLD_NAME, 12)
    c.drawString(20 * mm, y, "Sale items:")
    c.setLineWidth(0.5)
    c.line(20 * mm, y - 1.5 * mm, 45 * mm, y - 1.5 * mm)
    y -= 8 * mm

    c.setFont(FONT_REGULAR_NAME, 11)
    for item in sale.items:
        name = item.product.name if item.product else f"ID:{item.product_id}"
        subtotal = item.subtotal if item.subtotal is not None else item.quantity * item.unit_price
        c.drawString(
            20 * mm, y,
            f"{item.quantity}x {name[:60]} - {money(item.unit_price)} (Subtotal: {money(subtotal)})",
        )
        y -= 6 * mm

        # Page break
        if y < 25 * mm:
            c.showPage()
            y = height - 20 * mm
            c.setFont(FONT_REGULAR_NAME, 11)

    c.showPage()
    c.save()
    logger.debug("Receipt rendered for sale %s", sale.id)
    return buffer.getvalue()
