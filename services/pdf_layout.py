"""
One-page funding application renderer.

Lays out the application (logo header, legend, sectioned field grid, legal
authorization clause, signature lines, footer) on a single US Letter page with
reportlab. When the nominal layout is taller than the page, every geometry
constant is rescaled once by available / estimated height and clamped to a
minimum floor, so the output always stays on one page.

The logo is SVG markup; it is converted with PyMuPDF and stamped onto the
finished page as vector content.

Text is drawn with the standard Helvetica fonts, so characters outside their
WinAnsi encoding (CJK, emoji) are not representable and come out substituted.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, fields
from io import BytesIO
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Sequence, Tuple

import fitz  # PyMuPDF
from reportlab.lib.colors import HexColor, white
from reportlab.lib.pagesizes import letter
from reportlab.lib.utils import simpleSplit
from reportlab.pdfbase.pdfmetrics import getAscent, stringWidth
from reportlab.pdfgen import canvas

from services.application_fields import mark_label
from services.exceptions import PdfRenderError
from utils.name_utils import additional_owner_name, owner_name, preferred_contact_name
from utils.normalizers import normalize_value, to_yes_no, value_or_placeholder

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent.parent
DEFAULT_LOGO_PATH = BASE_DIR / "assets" / "images" / "logo.svg"

PAGE_SIZE = letter
FONT_REGULAR = "Helvetica"
FONT_BOLD = "Helvetica-Bold"
ELLIPSIS = "..."
PLACEHOLDER = "-"
CELL_INSET = 5
# Line box height of Helvetica relative to its size
LINE_HEIGHT_RATIO = 1.156
PARAGRAPH_LINE_GAP = 0.55
FONT_SIZE_STEP = 0.2
FOOTER_ALLOWANCE = 16

BRAND_BLUE = HexColor("#1a56db")
SECTION_FILL = HexColor("#1e3a8a")
HEADER_TEXT = HexColor("#1e293b")
LEGEND_TEXT = HexColor("#334155")
CELL_BORDER = HexColor("#94a3b8")
LABEL_TEXT = HexColor("#475569")
VALUE_TEXT = HexColor("#0f172a")
LINE_LABEL_TEXT = HexColor("#111827")
FOOTER_TEXT = HexColor("#64748b")

AUTHORIZATION_TEXT = (
    'By signing below, the Business and Owner(s) identified above (individually, an "Applicant") each '
    "represents, acknowledges, and agrees that: "
    "(1) all information and documents provided in connection with this application are true, accurate, "
    "and complete; "
    '(2) Applicant will immediately notify No Limit Capital ("No Limit Capital") of any change in the '
    "Business financial condition; "
    "(3) Applicant understands that No Limit Capital may share this information with its representatives, "
    "successors, assigns, affiliates and partners as well as third-party lenders/funders and their servicers "
    'and financial institutions ("Recipients"); '
    "(4) Applicant authorizes No Limit Capital and Recipients to request and receive any investigative "
    "reports, consumer credit reports, trade references, statements from creditors or financial institutions, "
    "verifications of information, or any other information that No Limit Capital and/or Recipients deem "
    "necessary; "
    "(5) Applicant waives and releases any claims against No Limit Capital, Recipients and any "
    "information-providers arising from any act or omission relating to the requesting, receiving, or "
    "release of information; "
    "(6) each Owner of the Business represents that he or she is authorized to sign and submit this "
    "application on behalf of Business."
)


@dataclass(frozen=True)
class RenderOptions:
    company_name: str = "No Limit Capital"
    margin: float = 24
    logo_path: Optional[Path] = DEFAULT_LOGO_PATH
    logo_svg: Optional[str] = None
    header_scale: float = 0.75
    # True renders absent values blank instead of the dash placeholder
    empty_fields: bool = False
    # True adds a named AcroForm text field over every value
    fillable: bool = False


# ------------------------------------------------------------------
# Geometry
# ------------------------------------------------------------------

# name: (nominal size at scale 1, minimum floor, rounded down to whole points)
LAYOUT_GEOMETRY = {
    "row_height": (23, 14, True),
    "section_header_height": (15, 11, True),
    "section_gap": (6, 3, True),
    "label_font_size": (6.4, 5.2, False),
    "value_font_size": (8.4, 6.9, False),
    "section_font_size": (8.7, 7.2, False),
    "value_offset_y": (13, 9, True),
    "legend_font_size": (6.6, 5.4, False),
    "legend_height": (10, 7, True),
    "authorization_label_gap": (10, 8, True),
    "authorization_text_height": (80, 56, True),
    "authorization_font_size": (7.4, 6.5, False),
    "authorization_min_font_size": (6.5, 6.0, False),
    "authorization_after_terms_gap": (5, 3, True),
    "authorization_line_label_font_size": (7.0, 6.0, False),
    "authorization_line_value_font_size": (7.1, 6.2, False),
    "authorization_line_gap": (16, 12, True),
    "authorization_line_baseline_offset": (10, 8, True),
    "authorization_owner_gap": (3, 2, True),
    "authorization_column_gap": (12, 8, True),
}


@dataclass(frozen=True)
class LayoutConfig:
    row_height: float
    section_header_height: float
    section_gap: float
    label_font_size: float
    value_font_size: float
    section_font_size: float
    value_offset_y: float
    legend_font_size: float
    legend_height: float
    authorization_label_gap: float
    authorization_text_height: float
    authorization_font_size: float
    authorization_min_font_size: float
    authorization_after_terms_gap: float
    authorization_line_label_font_size: float
    authorization_line_value_font_size: float
    authorization_line_gap: float
    authorization_line_baseline_offset: float
    authorization_owner_gap: float
    authorization_column_gap: float
    scale: float = 1.0
    show_empty_placeholder: bool = True

    def dimensions(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self) if f.name in LAYOUT_GEOMETRY}


def create_layout_config(scale: float = 1.0, show_empty_placeholder: bool = True) -> LayoutConfig:
    """
    Build every layout dimension from a single scale factor.

    Each dimension is nominal * scale (whole points where the layout needs
    them) clamped to its floor, so all of them shrink together and none can
    collapse below a readable size.
    """
    values = {}
    for name, (nominal, floor, integral) in LAYOUT_GEOMETRY.items():
        scaled = nominal * scale
        if integral:
            scaled = math.floor(scaled)
        values[name] = max(floor, scaled)
    return LayoutConfig(**values, scale=scale, show_empty_placeholder=show_empty_placeholder)


def resolve_scale(estimated_height: float, available_height: float) -> float:
    """Single-pass fit: 1.0 when the content fits, otherwise the shrink ratio."""
    if estimated_height <= 0 or estimated_height <= available_height:
        return 1.0
    return max(0.0, available_height) / estimated_height


# ------------------------------------------------------------------
# Declarative form layout
# ------------------------------------------------------------------

ValueSource = Callable[[Mapping[str, Any]], Any]


@dataclass(frozen=True)
class CellSpec:
    key: str
    label: str
    span: int = 1
    source: Optional[ValueSource] = None
    force_required: bool = False
    form_field: Optional[str] = None

    @property
    def display_label(self) -> str:
        return mark_label(self.key, self.label, force_required=self.force_required)

    @property
    def field_name(self) -> str:
        return self.form_field or self.key

    def resolve(self, record: Mapping[str, Any]) -> str:
        if self.source is not None:
            return normalize_value(self.source(record))
        return normalize_value(record.get(self.key))


@dataclass(frozen=True)
class SectionSpec:
    title: str
    rows: Tuple[Tuple[CellSpec, ...], ...]


def _yes_no(key: str) -> ValueSource:
    return lambda record: to_yes_no(record.get(key))


def _field(key, label, span=1, source=None, force_required=False, form_field=None) -> CellSpec:
    return CellSpec(key, label, span, source, force_required, form_field)


APPLICATION_SECTIONS: Tuple[SectionSpec, ...] = (
    SectionSpec(
        "BUSINESS INFORMATION",
        (
            (
                _field("legal_business_name", "Business Legal Name", 8),
                _field("business_dba", "Business DBA Name", 8),
            ),
            (
                _field("business_address", "Business Address", 8),
                _field("business_city", "City", 3),
                _field("business_state", "State", 2),
                _field("business_zip", "Zip", 3),
            ),
            (
                _field("business_phone", "Business Phone", 4),
                _field("business_website", "Business Website", 6),
                _field("industry", "Industry", 6),
            ),
            (
                _field("first_name", "Preferred Contact", 4, preferred_contact_name,
                       force_required=True, form_field="preferred_contact_name"),
                _field("contact_number", "Contact Number", 4),
                _field("email", "Email", 8),
            ),
            (
                _field("legal_entity", "Legal Entity", 3),
                _field("business_tax_id", "Tax ID / EIN", 3),
                _field("state_of_incorporation", "State of Incorporation", 4),
                _field("business_start_date", "Business Start Date", 3),
                _field("credit_score", "Credit Score", 3),
            ),
            (
                _field("loan_amount", "Funding Amount Requesting", 4),
                _field("funding_timeline", "Funding Timeline", 4),
                _field("loan_use", "Use of Proceeds", 8),
            ),
            (
                _field("gross_annual_sales", "Gross Annual Sales", 4),
                _field("avg_monthly_deposits", "Avg Monthly Deposits", 4),
                _field("avg_daily_balance", "Avg Daily Balance", 4),
                _field("credit_card_processor", "Card Processor", 4),
            ),
            (
                _field("has_other_financing", "Other Financing", 3, _yes_no("has_other_financing")),
                _field("outstanding_balance", "Outstanding Balance", 3),
                _field("funding_company", "Funding Company", 4),
                _field("has_open_bankruptcies", "Open Bankruptcies", 3, _yes_no("has_open_bankruptcies")),
                _field("has_judgements_liens", "Judgements/Liens", 3, _yes_no("has_judgements_liens")),
            ),
            (
                _field("seasonal_business", "Seasonal Business", 3, _yes_no("seasonal_business")),
                _field("peak_months", "Peak Months", 5),
                _field("application_agreement", "Application Agreement", 4, _yes_no("application_agreement")),
                _field("contact_agreement", "Contact Agreement", 4, _yes_no("contact_agreement")),
            ),
        ),
    ),
    SectionSpec(
        "OWNERSHIP INFORMATION",
        (
            (
                _field("owner_first_name", "Owner #1 Name", 4, owner_name,
                       force_required=True, form_field="owner1_name"),
                _field("owner_email", "Owner #1 Email", 6),
                _field("owner_ssn", "Owner #1 SSN", 2),
                _field("owner_dob", "Owner #1 DOB", 2),
                _field("owner_ownership", "Ownership %", 2),
            ),
            (
                _field("owner_address", "Owner #1 Address", 8),
                _field("owner_city", "City", 3),
                _field("owner_state", "State", 2),
                _field("owner_zip", "Zip", 3),
            ),
            (
                _field("additional_owner_first_name", "Owner #2 Name", 4, additional_owner_name,
                       form_field="owner2_name"),
                _field("additional_owner_email", "Owner #2 Email", 6),
                _field("additional_owner_ssn", "Owner #2 SSN", 2),
                _field("additional_owner_dob", "Owner #2 DOB", 2),
                _field("additional_owner_ownership", "Owner #2 Own %", 2),
            ),
            (
                _field("additional_owner_address", "Owner #2 Address", 8),
                _field("additional_owner_city", "City", 3),
                _field("additional_owner_state", "State", 2),
                _field("additional_owner_zip", "Zip", 3),
            ),
            (
                _field("owner_contact", "Owner #1 Phone", 4),
                _field("additional_owner_contact", "Owner #2 Phone", 4),
                _field("id", "Application ID", 8, force_required=True),
            ),
        ),
    ),
    SectionSpec(
        "REFERENCES",
        (
            (
                _field("landlord_name_mortgage_company", "Landlord / Mortgage Company", 8),
                _field("landlord_contact_person", "Contact Person", 4),
                _field("landlord_phone", "Phone", 4),
            ),
            (
                _field("business_trade_reference_2", "Business Trade Reference #2", 8),
                _field("business_trade_reference_2_contact_person", "Contact Person", 4),
                _field("business_trade_reference_2_phone", "Phone", 4),
            ),
            (
                _field("business_trade_reference_3", "Business Trade Reference #3", 8),
                _field("business_trade_reference_3_contact_person", "Contact Person", 4),
                _field("business_trade_reference_3_phone", "Phone", 4),
            ),
        ),
    ),
)


@dataclass(frozen=True)
class SignatureLine:
    label: str
    form_field: str
    source: ValueSource
    required: bool = False


def _key(name: str) -> ValueSource:
    return lambda record: record.get(name)


# Paired (left, right) rows below the clause; None marks the owner gap
AUTHORIZATION_ROWS: Tuple[Optional[Tuple[SignatureLine, SignatureLine]], ...] = (
    (
        SignatureLine("Owner #1 Name (Print)", "owner1_print_name", owner_name, required=True),
        SignatureLine("Owner #2 Name (Print)", "owner2_print_name", additional_owner_name),
    ),
    (
        SignatureLine("Owner #1 Signature", "signature", _key("signature"), required=True),
        SignatureLine("Owner #2 Signature", "signature_additional", _key("signature_additional")),
    ),
    (
        SignatureLine("Date", "application_date", _key("application_date"), required=True),
        SignatureLine("Date", "application_date_additional", _key("application_date_additional")),
    ),
    None,
    (
        SignatureLine("EIN#", "business_tax_id_confirm", _key("business_tax_id"), required=True),
        SignatureLine("Website (if applicable)", "business_website_confirm", _key("business_website")),
    ),
)

# Lines reserved by the fit estimate below the clause
AUTHORIZATION_LINE_SLOTS = 7
AUTHORIZATION_OWNER_GAP_SLOTS = 2


def cell_widths(total_width: float, spans: Sequence[int]) -> list:
    """
    Split a row width proportionally to the spans. Each cell is rounded to a
    whole point and the last cell takes the remainder, so widths always sum to
    the row width.
    """
    spans = [span or 1 for span in spans]
    total_span = sum(spans)
    widths = []
    used = 0.0
    for index, span in enumerate(spans):
        if index == len(spans) - 1:
            widths.append(total_width - used)
        else:
            width = round(total_width * span / total_span)
            widths.append(width)
            used += width
    return widths


def estimate_body_height(sections: Sequence[SectionSpec], config: LayoutConfig) -> float:
    rows_height = sum(len(section.rows) for section in sections) * config.row_height
    section_count = len(sections)
    authorization_height = (
        config.section_header_height
        + config.authorization_label_gap
        + config.authorization_text_height
        + config.authorization_after_terms_gap
        + config.authorization_line_gap * AUTHORIZATION_LINE_SLOTS
        + config.authorization_owner_gap * AUTHORIZATION_OWNER_GAP_SLOTS
    )
    return (
        section_count * config.section_header_height
        + rows_height
        + max(0, section_count - 1) * config.section_gap
        + config.section_gap
        + authorization_height
        + config.legend_height
        + FOOTER_ALLOWANCE
    )


def fit_layout(available_height: float, show_empty_placeholder: bool = True) -> LayoutConfig:
    config = create_layout_config(1.0, show_empty_placeholder)
    estimated = estimate_body_height(APPLICATION_SECTIONS, config)
    scale = resolve_scale(estimated, available_height)
    if scale < 1.0:
        logger.debug("fit_layout: estimated %.1fpt > available %.1fpt, scale=%.3f", estimated, available_height, scale)
        config = create_layout_config(scale, show_empty_placeholder)
    return config


# ------------------------------------------------------------------
# Text measurement
# ------------------------------------------------------------------

def text_width(text: str, font_name: str, font_size: float) -> float:
    return stringWidth(text, font_name, font_size)


def truncate_text(
    value: Any,
    max_width: float,
    font_name: str,
    font_size: float,
    empty_fallback: str = PLACEHOLDER,
) -> str:
    """
    Fit a single line into max_width, cutting it with an ellipsis when needed.

    The longest prefix whose width (with the ellipsis) fits is found by binary
    search; widths grow with prefix length so the search is exact.
    """
    text = normalize_value(value)
    if not text:
        return empty_fallback
    if max_width <= 8:
        return ""
    if text_width(text, font_name, font_size) <= max_width:
        return text

    low, high = 0, len(text) - 1
    while low < high:
        middle = (low + high + 1) // 2
        if text_width(text[:middle] + ELLIPSIS, font_name, font_size) <= max_width:
            low = middle
        else:
            high = middle - 1

    prefix = text[:low].rstrip()
    return f"{prefix}{ELLIPSIS}" if prefix else ELLIPSIS


def paragraph_leading(font_size: float) -> float:
    return font_size * LINE_HEIGHT_RATIO + PARAGRAPH_LINE_GAP


def wrap_paragraph(text: str, width: float, font_size: float) -> list:
    return simpleSplit(text, FONT_REGULAR, font_size, width)


def fit_paragraph(
    text: str,
    width: float,
    max_height: float,
    nominal_size: float,
    min_size: float,
) -> Tuple[float, list]:
    """
    Pick the largest font size (in 0.2pt steps from nominal down to min_size)
    whose wrapped height fits max_height. When even min_size is too tall the
    paragraph is cut to the lines that fit and the last one gets an ellipsis.
    """
    steps = max(0, int(math.floor((nominal_size - min_size) / FONT_SIZE_STEP + 1e-9)))
    sizes = [round(nominal_size - step * FONT_SIZE_STEP, 4) for step in range(steps + 1)]
    if sizes[-1] > min_size:
        sizes.append(min_size)

    def fits(size: float) -> bool:
        return len(wrap_paragraph(text, width, size)) * paragraph_leading(size) <= max_height

    # sizes is descending; find the first index that fits
    low, high = 0, len(sizes)
    while low < high:
        middle = (low + high) // 2
        if fits(sizes[middle]):
            high = middle
        else:
            low = middle + 1

    if low < len(sizes):
        size = sizes[low]
        return size, wrap_paragraph(text, width, size)

    size = sizes[-1]
    lines = wrap_paragraph(text, width, size)
    max_lines = max(1, int(max_height // paragraph_leading(size)))
    kept = lines[:max_lines]
    kept[-1] = truncate_text(kept[-1] + ELLIPSIS, width, FONT_REGULAR, size, empty_fallback=ELLIPSIS)
    return size, kept


# ------------------------------------------------------------------
# Drawing
# ------------------------------------------------------------------

class PageCanvas:
    """
    Thin wrapper over a reportlab canvas using a top-left origin, so layout
    code can walk the page downwards. Text is positioned by the top of its
    line box.
    """

    def __init__(self, canv: canvas.Canvas, margin: float, fillable: bool = False):
        self.canv = canv
        self.width, self.height = PAGE_SIZE
        self.margin = margin
        self.fillable = fillable

    @property
    def content_width(self) -> float:
        return self.width - self.margin * 2

    def _baseline(self, top: float, font_name: str, font_size: float) -> float:
        return self.height - top - getAscent(font_name, font_size)

    def text(self, text, x, top, font_name, font_size, color, align="left", width=None):
        self.canv.setFont(font_name, font_size)
        self.canv.setFillColor(color)
        baseline = self._baseline(top, font_name, font_size)
        if align == "center":
            self.canv.drawCentredString(x + width / 2, baseline, text)
        elif align == "right":
            self.canv.drawRightString(x + width, baseline, text)
        else:
            self.canv.drawString(x, baseline, text)

    def fill_rect(self, x, top, width, height, color):
        self.canv.setFillColor(color)
        self.canv.rect(x, self.height - top - height, width, height, stroke=0, fill=1)

    def stroke_rect(self, x, top, width, height, color, line_width):
        self.canv.setStrokeColor(color)
        self.canv.setLineWidth(line_width)
        self.canv.rect(x, self.height - top - height, width, height, stroke=1, fill=0)

    def hline(self, x0, x1, top, color, line_width):
        self.canv.setStrokeColor(color)
        self.canv.setLineWidth(line_width)
        self.canv.line(x0, self.height - top, x1, self.height - top)

    def form_field(self, name, x, top, width, height, value, font_size):
        self.canv.acroForm.textfield(
            name=name,
            value=value,
            x=x,
            y=self.height - top - height,
            width=width,
            height=height,
            borderWidth=0,
            borderColor=white,
            fillColor=white,
            textColor=VALUE_TEXT,
            fontName=FONT_REGULAR,
            fontSize=font_size,
            maxlen=1000,
        )


def draw_logo_header(page: PageCanvas, options: RenderOptions, has_logo: bool):
    """
    Reserve the logo box and draw the divider below it. Without a logo a
    bold company name is centred instead.

    Returns (body_top, logo_rect) where logo_rect is (x0, y0, x1, y1) in
    top-left page coordinates, or None when the text header was drawn (no
    logo, or a header scale or margin that leaves the logo box empty).
    """
    margin = page.margin
    available_width = page.content_width

    logo_width = logo_height = 0
    if has_logo:
        logo_scale = float(options.header_scale or 0.75)
        logo_width = min(250 * logo_scale, available_width - 10)
        logo_height = round(logo_width * 60 / 200)

    # a logo box with no area cannot be stamped; use the text header
    if logo_width > 0 and logo_height > 0:
        logo_x = round((page.width - logo_width) / 2)
        logo_y = margin - 5

        divider_y = logo_y + logo_height + 5
        page.hline(margin, page.width - margin, divider_y, BRAND_BLUE, 1.2)
        logo_rect = (logo_x, logo_y, logo_x + logo_width, logo_y + logo_height)
        return divider_y + 7, logo_rect

    page.text(
        options.company_name or "No Limit Capital",
        margin,
        margin + 8,
        FONT_BOLD,
        12,
        HEADER_TEXT,
        align="center",
        width=available_width,
    )
    divider_y = margin + 30
    page.hline(margin, page.width - margin, divider_y, BRAND_BLUE, 1.2)
    return divider_y + 6, None


def draw_legend(page: PageCanvas, x, y, width, config: LayoutConfig) -> float:
    page.text("* Required    No * = Optional", x, y, FONT_REGULAR, config.legend_font_size, LEGEND_TEXT,
              align="right", width=width)
    return y + config.legend_height


def draw_section_header(page: PageCanvas, x, y, width, title, config: LayoutConfig) -> float:
    page.fill_rect(x, y, width, config.section_header_height, SECTION_FILL)
    page.text(
        truncate_text(title, width - 14, FONT_BOLD, config.section_font_size),
        x + 7,
        y + 4,
        FONT_BOLD,
        config.section_font_size,
        white,
    )
    return y + config.section_header_height


def draw_field_row(page: PageCanvas, x, y, width, cells, record, config: LayoutConfig) -> float:
    widths = cell_widths(width, [cell.span for cell in cells])
    current_x = x
    empty_fallback = PLACEHOLDER if config.show_empty_placeholder else ""

    for cell, cell_width in zip(cells, widths):
        page.stroke_rect(current_x, y, cell_width, config.row_height, CELL_BORDER, 0.55)
        inner_width = max(10, cell_width - CELL_INSET * 2)

        page.text(
            truncate_text(cell.display_label, inner_width, FONT_BOLD, config.label_font_size),
            current_x + CELL_INSET,
            y + 3,
            FONT_BOLD,
            config.label_font_size,
            LABEL_TEXT,
        )

        value = cell.resolve(record)
        if page.fillable:
            page.form_field(
                cell.field_name,
                current_x + CELL_INSET,
                y + config.value_offset_y - 1,
                inner_width,
                config.row_height - config.value_offset_y,
                value,
                config.value_font_size,
            )
        else:
            page.text(
                truncate_text(
                    value_or_placeholder(value, config.show_empty_placeholder),
                    inner_width,
                    FONT_REGULAR,
                    config.value_font_size,
                    empty_fallback,
                ),
                current_x + CELL_INSET,
                y + config.value_offset_y,
                FONT_REGULAR,
                config.value_font_size,
                VALUE_TEXT,
            )

        current_x += cell_width

    return y + config.row_height


def draw_authorization_terms(page: PageCanvas, x, y, width, text, config: LayoutConfig) -> float:
    text_x = x + CELL_INSET
    text_width_available = max(20, width - CELL_INSET * 2)
    text_y = y + config.authorization_label_gap
    max_height = config.authorization_text_height

    font_size, lines = fit_paragraph(
        text,
        text_width_available,
        max_height,
        config.authorization_font_size,
        config.authorization_min_font_size,
    )
    leading = paragraph_leading(font_size)
    for index, line in enumerate(lines):
        page.text(line, text_x, text_y + index * leading, FONT_REGULAR, font_size, VALUE_TEXT)

    used_height = min(len(lines) * leading, max_height)
    return text_y + used_height + config.authorization_after_terms_gap


def draw_authorization_line(page: PageCanvas, x, y, width, line: SignatureLine, record, config: LayoutConfig) -> float:
    row_x = x + CELL_INSET
    row_width = max(24, width - CELL_INSET * 2)
    label_text = f"{line.label} *:" if line.required else f"{line.label}:"
    label_size = config.authorization_line_label_font_size

    page.text(label_text, row_x, y, FONT_REGULAR, label_size, LINE_LABEL_TEXT)

    label_width = min(row_width - 40, text_width(label_text, FONT_REGULAR, label_size) + 6)
    line_x = row_x + label_width
    line_y = y + config.authorization_line_baseline_offset
    page.hline(line_x, row_x + row_width, line_y, LEGEND_TEXT, 0.7)

    value = normalize_value(line.source(record))
    value_width = max(24, row_width - label_width - 4)
    value_size = config.authorization_line_value_font_size
    if page.fillable:
        page.form_field(line.form_field, line_x + 2, y - 1, value_width, line_y - y, value, value_size)
    elif value:
        page.text(
            truncate_text(value, value_width, FONT_REGULAR, value_size),
            line_x + 2,
            y - 1,
            FONT_REGULAR,
            value_size,
            VALUE_TEXT,
        )

    return y + config.authorization_line_gap


def draw_authorization_section(page: PageCanvas, x, y, width, record, config: LayoutConfig) -> float:
    current_y = draw_section_header(page, x, y, width, "AUTHORIZATION", config)
    current_y = draw_authorization_terms(page, x, current_y, width, AUTHORIZATION_TEXT, config)

    column_gap = config.authorization_column_gap
    column_width = math.floor((width - column_gap) / 2)
    for pair in AUTHORIZATION_ROWS:
        if pair is None:
            current_y += config.authorization_owner_gap
            continue
        left, right = pair
        next_y = draw_authorization_line(page, x, current_y, column_width, left, record, config)
        draw_authorization_line(page, x + column_width + column_gap, current_y, column_width, right, record, config)
        current_y = next_y

    return current_y


def draw_footer(page: PageCanvas, company_name: str) -> None:
    footer_y = page.height - page.margin - 12
    page.text(company_name, page.margin, footer_y, FONT_REGULAR, 7, FOOTER_TEXT, align="center",
              width=page.content_width)


def render_one_page_layout(page: PageCanvas, record: Mapping[str, Any], options: RenderOptions, has_logo: bool):
    content_x = page.margin
    content_width = page.content_width

    y, logo_rect = draw_logo_header(page, options, has_logo)
    available_height = page.height - page.margin - y
    config = fit_layout(available_height, show_empty_placeholder=not options.empty_fields)

    y = draw_legend(page, content_x, y, content_width, config)
    for index, section in enumerate(APPLICATION_SECTIONS):
        y = draw_section_header(page, content_x, y, content_width, section.title, config)
        for row in section.rows:
            y = draw_field_row(page, content_x, y, content_width, row, record, config)
        if index < len(APPLICATION_SECTIONS) - 1:
            y += config.section_gap

    y += config.section_gap
    draw_authorization_section(page, content_x, y, content_width, record, config)
    draw_footer(page, options.company_name or "No Limit Capital")
    return logo_rect


# ------------------------------------------------------------------
# Logo
# ------------------------------------------------------------------

def load_logo_markup(options: RenderOptions) -> str:
    markup = normalize_value(options.logo_svg)
    if markup:
        return markup
    if not options.logo_path:
        return ""
    try:
        return Path(options.logo_path).read_text(encoding="utf-8")
    except OSError as exc:
        logger.warning("Logo not readable at %s, using text header: %s", options.logo_path, exc)
        return ""


def load_logo_document(markup: str) -> Optional[fitz.Document]:
    """Convert SVG markup to a one-page PDF document, or None if it does not parse."""
    if not markup:
        return None
    try:
        with fitz.open(stream=markup.encode("utf-8"), filetype="svg") as svg_doc:
            pdf_bytes = svg_doc.convert_to_pdf()
        logo_doc = fitz.open(stream=pdf_bytes, filetype="pdf")
    except Exception as exc:
        logger.warning("Logo markup could not be parsed, using text header: %s", exc)
        return None
    if logo_doc.page_count < 1:
        logo_doc.close()
        return None
    return logo_doc


def stamp_logo(pdf_bytes: bytes, logo_doc: fitz.Document, logo_rect) -> bytes:
    with fitz.open(stream=pdf_bytes, filetype="pdf") as doc:
        doc[0].show_pdf_page(fitz.Rect(*logo_rect), logo_doc, 0, keep_proportion=True)
        return doc.tobytes(garbage=3, deflate=True, no_new_id=True)


# ------------------------------------------------------------------
# Public API
# ------------------------------------------------------------------

def render_application_pdf(record: Optional[Mapping[str, Any]], options: Optional[RenderOptions] = None) -> bytes:
    """
    Render an application record as a single-page PDF.

    Args:
        record: Field name to value mapping. Absent keys render as the
            placeholder (or blank when options.empty_fields is set). The
            record is only read.
        options: Branding and rendering switches.

    Returns:
        PDF bytes. Output is deterministic for identical inputs.

    Raises:
        PdfRenderError: If the document cannot be serialized.
    """
    record = record or {}
    options = options or RenderOptions()
    logo_doc = load_logo_document(load_logo_markup(options))

    try:
        buffer = BytesIO()
        canv = canvas.Canvas(buffer, pagesize=PAGE_SIZE, invariant=1)
        canv.setTitle("Business Funding Application")
        canv.setAuthor(options.company_name or "No Limit Capital")
        canv.setSubject(f"Application - {normalize_value(record.get('legal_business_name')) or 'Business'}")

        page = PageCanvas(canv, options.margin or 24, fillable=options.fillable)
        logo_rect = render_one_page_layout(page, record, options, logo_doc is not None)

        try:
            canv.showPage()
            canv.save()
            pdf_bytes = buffer.getvalue()
            if logo_doc is not None and logo_rect is not None:
                pdf_bytes = stamp_logo(pdf_bytes, logo_doc, logo_rect)
        except Exception as exc:
            raise PdfRenderError(f"Failed to serialize application PDF: {exc}") from exc
    finally:
        if logo_doc is not None:
            logo_doc.close()

    return pdf_bytes
