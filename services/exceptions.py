"""Exception classes for PDF generation services."""


class PdfRenderError(Exception):
    """Raised when the layout renderer cannot serialize the document."""
    pass


class TemplateFillError(Exception):
    """Raised when a fillable template cannot be used for an application."""
    pass


class TemplateNotConfiguredError(TemplateFillError):
    """Raised when no template path is configured."""
    pass


class TemplateRejectedError(TemplateFillError):
    """Raised when the template path belongs to a different branded form."""
    pass


class TemplateNotFoundError(TemplateFillError):
    """Raised when the template file is missing or unreadable."""
    pass


class TemplateInvalidError(TemplateFillError):
    """Raised when the template bytes are not a readable PDF."""
    pass


class TemplateHasNoFieldsError(TemplateFillError):
    """Raised when the template exposes no fillable form fields."""
    pass


class SubmissionStorageError(Exception):
    """Raised when a submission could not be stored in the database or on disk."""
    pass
