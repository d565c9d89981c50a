#!/usr/bin/env python3
"""
List the fillable form fields of an application template.

Usage:
    python -m scripts.inspect_template_fields [path/to/template.pdf]
"""

import sys
from pathlib import Path

import fitz  # PyMuPDF

from settings import get_settings


def list_template_fields(pdf_path: Path) -> list:
    """Return (field name, field type) pairs for every widget in the document."""
    fields = []
    with fitz.open(pdf_path) as doc:
        if not doc.is_form_pdf:
            return fields
        for page in doc:
            for widget in page.widgets() or []:
                fields.append((widget.field_name, widget.field_type_string))
    return fields


def main():
    if len(sys.argv) > 1:
        pdf_path = Path(sys.argv[1]).resolve()
    else:
        pdf_path = Path(get_settings().pdf_template_path or "")

    if not pdf_path.is_file():
        print(f"Template not found: {pdf_path}")
        sys.exit(1)

    try:
        fields = list_template_fields(pdf_path)
    except Exception as e:
        print(f"Error reading template: {e}")
        sys.exit(1)

    if not fields:
        print(f"Template is not fillable (AcroForm missing): {pdf_path}")
        sys.exit(1)

    print(f"Template: {pdf_path}")
    print(f"Field count: {len(fields)}")
    for name, field_type in fields:
        print(f"{name} | {field_type}")


if __name__ == "__main__":
    main()
