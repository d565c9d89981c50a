"""
Tests for the one-page application layout renderer.

Rendered documents are opened with PyMuPDF and checked for page count,
extracted text, metadata and form widgets.
"""

import fitz
import pytest

from services.pdf_layout import (
    APPLICATION_SECTIONS,
    ELLIPSIS,
    FONT_REGULAR,
    LAYOUT_GEOMETRY,
    RenderOptions,
    cell_widths,
    create_layout_config,
    estimate_body_height,
    fit_paragraph,
    paragraph_leading,
    render_application_pdf,
    resolve_scale,
    text_width,
    truncate_text,
    wrap_paragraph,
)

BLUE_BOX_SVG = (
    '<svg xmlns="http://www.w3.org/2000/svg" width="200" height="60" viewBox="0 0 200 60">'
    '<rect x="0" y="0" width="200" height="60" fill="#1a56db"/></svg>'
)


def _open(pdf_bytes):
    return fitz.open(stream=pdf_bytes, filetype="pdf")


def _words(page):
    return [word[4] for word in page.get_text("words")]


# ---------------------------------------------------------------------------
# One page, whatever the input
# ---------------------------------------------------------------------------

def test_empty_record_renders_single_letter_page(text_header_options):
    with _open(render_application_pdf({}, text_header_options)) as doc:
        assert doc.page_count == 1
        assert doc[0].rect.width == pytest.approx(612)
        assert doc[0].rect.height == pytest.approx(792)
        assert "-" in _words(doc[0])


def test_none_record_is_treated_as_empty(text_header_options):
    with _open(render_application_pdf(None, text_header_options)) as doc:
        assert doc.page_count == 1


def test_full_record_values_and_metadata(full_record, text_header_options):
    with _open(render_application_pdf(full_record, text_header_options)) as doc:
        assert doc.page_count == 1
        text = doc[0].get_text()
        metadata = doc.metadata

    assert "Acme Holdings LLC" in text
    assert "Jane Doe" in text
    assert "Jane Owner" in text
    assert "June, July" in text
    assert "BUSINESS INFORMATION" in text
    assert "OWNERSHIP INFORMATION" in text
    assert "REFERENCES" in text
    assert "AUTHORIZATION" in text
    assert metadata["title"] == "Business Funding Application"
    assert metadata["author"] == "Acme Funding"
    assert metadata["subject"] == "Application - Acme Holdings LLC"


def test_yes_no_flags_are_rendered_as_words(full_record, text_header_options):
    with _open(render_application_pdf(full_record, text_header_options)) as doc:
        words = _words(doc[0])

    assert "YES" in words
    assert "NO" in words


def test_required_marker_only_on_required_labels(text_header_options):
    with _open(render_application_pdf({}, text_header_options)) as doc:
        text = doc[0].get_text()

    assert "Business Legal Name *" in text
    assert "Application ID *" in text
    assert "Peak Months *" not in text
    assert "Peak Months" in text
    assert "* Required" in text


def test_maximal_record_still_fits_one_page_with_truncation(maximal_record, text_header_options):
    with _open(render_application_pdf(maximal_record, text_header_options)) as doc:
        assert doc.page_count == 1
        text = doc[0].get_text()

    assert ELLIPSIS in text
    assert "W" * 400 not in text


def test_subject_falls_back_to_business(text_header_options):
    with _open(render_application_pdf({}, text_header_options)) as doc:
        assert doc.metadata["subject"] == "Application - Business"


# ---------------------------------------------------------------------------
# Determinism
# ---------------------------------------------------------------------------

def test_rendering_is_byte_identical_for_identical_input(full_record, text_header_options):
    first = render_application_pdf(full_record, text_header_options)
    second = render_application_pdf(dict(full_record), text_header_options)
    assert first == second


def test_rendering_with_logo_is_byte_identical(full_record):
    options = RenderOptions(logo_svg=BLUE_BOX_SVG)
    assert render_application_pdf(full_record, options) == render_application_pdf(full_record, options)


def test_record_is_not_modified(full_record, text_header_options):
    snapshot = dict(full_record)
    render_application_pdf(full_record, text_header_options)
    assert full_record == snapshot


# ---------------------------------------------------------------------------
# Header / logo
# ---------------------------------------------------------------------------

def test_text_header_when_logo_is_missing(tmp_path):
    options = RenderOptions(company_name="Acme Funding", logo_path=tmp_path / "missing.svg")
    with _open(render_application_pdf({}, options)) as doc:
        assert doc.page_count == 1
        # header and footer
        assert doc[0].get_text().count("Acme Funding") == 2


def test_text_header_when_logo_markup_is_invalid():
    options = RenderOptions(company_name="Acme Funding", logo_path=None, logo_svg="this is not svg markup")
    with _open(render_application_pdf({}, options)) as doc:
        assert doc.page_count == 1
        assert doc[0].get_text().count("Acme Funding") == 2


def test_logo_replaces_text_header():
    options = RenderOptions(company_name="Acme Funding", logo_path=None, logo_svg=BLUE_BOX_SVG)
    with _open(render_application_pdf({}, options)) as doc:
        page = doc[0]
        assert doc.page_count == 1
        # footer only
        assert page.get_text().count("Acme Funding") == 1
        assert page.get_xobjects()


def test_bundled_logo_renders():
    with _open(render_application_pdf({}, RenderOptions())) as doc:
        assert doc.page_count == 1


# ---------------------------------------------------------------------------
# Blank specimen and fillable output
# ---------------------------------------------------------------------------

def test_empty_fields_leave_cells_blank():
    options = RenderOptions(company_name="Acme Funding", logo_path=None, empty_fields=True)
    with _open(render_application_pdf({}, options)) as doc:
        assert doc.page_count == 1
        assert "-" not in _words(doc[0])
        assert not doc.is_form_pdf


def test_fillable_render_exposes_named_fields():
    options = RenderOptions(logo_path=None, empty_fields=True, fillable=True)
    with _open(render_application_pdf({}, options)) as doc:
        assert doc.page_count == 1
        assert doc.is_form_pdf
        names = [widget.field_name for widget in doc[0].widgets()]

    assert len(names) == len(set(names))
    for expected in (
        "legal_business_name",
        "preferred_contact_name",
        "owner1_name",
        "owner2_name",
        "id",
        "owner1_print_name",
        "owner2_print_name",
        "signature",
        "signature_additional",
        "application_date",
        "application_date_additional",
        "business_tax_id_confirm",
        "business_website_confirm",
    ):
        assert expected in names


# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("scale", [0.01, 0.2, 0.5, 0.75, 0.9])
def test_layout_never_crosses_floors(scale):
    config = create_layout_config(scale)
    for name, (nominal, floor, _integral) in LAYOUT_GEOMETRY.items():
        value = getattr(config, name)
        assert floor <= value <= max(floor, nominal)


def test_layout_dimensions_are_monotonic_in_scale():
    scales = [0.1, 0.3, 0.5, 0.7, 0.85, 1.0]
    configs = [create_layout_config(scale).dimensions() for scale in scales]
    for smaller, larger in zip(configs, configs[1:]):
        for name in LAYOUT_GEOMETRY:
            assert smaller[name] <= larger[name]


def test_nominal_layout_at_scale_one():
    config = create_layout_config(1.0)
    assert config.row_height == 23
    assert config.authorization_text_height == 80
    assert config.show_empty_placeholder is True


def test_resolve_scale():
    assert resolve_scale(500, 700) == 1.0
    assert resolve_scale(700, 700) == 1.0
    assert resolve_scale(800, 600) == pytest.approx(0.75)
    assert resolve_scale(0, 600) == 1.0


def test_taller_content_never_gets_a_larger_scale():
    available = 650
    estimates = [651, 700, 820, 1000, 1500]
    scales = [resolve_scale(estimate, available) for estimate in estimates]
    assert scales == sorted(scales, reverse=True)


def test_estimate_shrinks_with_scale():
    nominal = estimate_body_height(APPLICATION_SECTIONS, create_layout_config(1.0))
    shrunk = estimate_body_height(APPLICATION_SECTIONS, create_layout_config(0.8))
    assert shrunk < nominal


def test_cell_widths_sum_to_row_width():
    widths = cell_widths(564, [3, 3, 4, 3, 3])
    assert sum(widths) == pytest.approx(564)
    assert widths[:4] == [round(564 * 3 / 16), round(564 * 3 / 16), round(564 * 4 / 16), round(564 * 3 / 16)]


# ---------------------------------------------------------------------------
# Text fitting
# ---------------------------------------------------------------------------

def test_truncate_text_keeps_short_values():
    assert truncate_text("Acme", 100, FONT_REGULAR, 8) == "Acme"


def test_truncate_text_empty_value_uses_fallback():
    assert truncate_text("", 100, FONT_REGULAR, 8) == "-"
    assert truncate_text(None, 100, FONT_REGULAR, 8, empty_fallback="") == ""


def test_truncate_text_tiny_width_gives_empty_string():
    assert truncate_text("Acme", 8, FONT_REGULAR, 8) == ""


def test_truncate_text_longest_prefix_with_ellipsis():
    value = "Extremely long business address that will never fit"
    result = truncate_text(value, 60, FONT_REGULAR, 8)

    assert result.endswith(ELLIPSIS)
    assert text_width(result, FONT_REGULAR, 8) <= 60
    prefix = result[: -len(ELLIPSIS)]
    assert value.startswith(prefix)
    longer = value[: len(prefix) + 1] + ELLIPSIS
    assert text_width(longer, FONT_REGULAR, 8) > 60 or value[len(prefix)] == " "


def test_fit_paragraph_stays_within_bounds():
    text = "word " * 300
    size, lines = fit_paragraph(text, 500, 80, 7.4, 6.5)

    assert 6.5 <= size <= 7.4
    assert len(lines) * paragraph_leading(size) <= 80


def test_fit_paragraph_keeps_nominal_size_when_it_fits():
    size, lines = fit_paragraph("short clause", 500, 80, 7.4, 6.5)
    assert size == pytest.approx(7.4)
    assert lines == ["short clause"]


def test_fit_paragraph_cuts_overflow_with_ellipsis():
    text = "word " * 2000
    size, lines = fit_paragraph(text, 200, 30, 7.4, 6.5)

    assert size == pytest.approx(6.5)
    assert len(lines) * paragraph_leading(size) <= 30
    assert lines[-1].endswith(ELLIPSIS)


def test_fit_paragraph_tries_min_size_off_the_step_grid():
    # 7.4 -> 6.5 is not a whole number of 0.2pt steps
    text = "word " * 300
    max_height = len(wrap_paragraph(text, 500, 6.5)) * paragraph_leading(6.5)
    size, lines = fit_paragraph(text, 500, max_height, 7.4, 6.5)

    assert size == pytest.approx(6.5)
    assert not lines[-1].endswith(ELLIPSIS)


@pytest.mark.parametrize("overrides", [{"header_scale": -1}, {"margin": 301}])
def test_empty_logo_box_uses_text_header(overrides):
    options = RenderOptions(company_name="Acme Funding", logo_path=None, logo_svg=BLUE_BOX_SVG, **overrides)
    with _open(render_application_pdf({}, options)) as doc:
        assert doc.page_count == 1
        assert not doc[0].get_xobjects()
