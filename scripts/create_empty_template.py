#!/usr/bin/env python3
"""
Render the blank fillable application into the template location used by the
template filler.

Usage:
    python -m scripts.create_empty_template [output.pdf]
"""

import sys
from pathlib import Path

from services.application_service import render_options_from
from services.pdf_layout import render_application_pdf
from settings import BASE_DIR, get_settings

DEFAULT_OUTPUT = BASE_DIR / "pdf_templates" / "nolimitcap-empty-application.pdf"


def create_empty_template(output_path: Path) -> Path:
    options = render_options_from(get_settings(), empty_fields=True, fillable=True)
    pdf_bytes = render_application_pdf({}, options)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(pdf_bytes)
    return output_path


def main():
    settings = get_settings()
    if len(sys.argv) > 1:
        output_path = Path(sys.argv[1])
    else:
        output_path = Path(settings.pdf_template_path or DEFAULT_OUTPUT)

    try:
        create_empty_template(output_path)
    except Exception as e:
        print(f"Failed to create template: {e}")
        sys.exit(1)

    print(f"✓ No Limit Capital empty template created: {output_path}")


if __name__ == "__main__":
    main()
