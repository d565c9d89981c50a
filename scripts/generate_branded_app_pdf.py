#!/usr/bin/env python3
"""
Generate the branded No Limit Capital application PDFs:
  - example-pdfs/APP-NLC.pdf            blank printable form
  - pdf_templates/nolimitcap-empty-application.pdf  fillable template

Usage:
    python -m scripts.generate_branded_app_pdf
"""

import sys

from scripts.create_empty_template import DEFAULT_OUTPUT, create_empty_template
from services.application_service import render_options_from
from services.pdf_layout import render_application_pdf
from settings import BASE_DIR, get_settings

EXAMPLES_DIR = BASE_DIR / "example-pdfs"


def main():
    settings = get_settings()

    try:
        blank = render_application_pdf({}, render_options_from(settings, empty_fields=True))
        EXAMPLES_DIR.mkdir(parents=True, exist_ok=True)
        example_path = EXAMPLES_DIR / "APP-NLC.pdf"
        example_path.write_bytes(blank)
        print(f"✓ {example_path.relative_to(BASE_DIR)}")

        template_path = create_empty_template(settings.pdf_template_path or DEFAULT_OUTPUT)
        print(f"✓ {template_path}")
    except Exception as e:
        print(f"Error generating PDFs: {e}")
        sys.exit(1)

    print("\nDone - No Limit Capital PDFs generated.")


if __name__ == "__main__":
    main()
