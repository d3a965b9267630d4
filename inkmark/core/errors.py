"""
Exception types raised by the annotation core.
"""


class InkmarkError(Exception):
    """Base class for all annotation core errors."""


class LoadError(InkmarkError):
    """The source buffer is not a valid, parseable PDF document."""


class RangeError(InkmarkError, IndexError):
    """A page number or stored rectangle falls outside the document bounds."""

    def __init__(self, page_number: int, page_count: int, annotation_id: str = None,
                 rect=None):
        self.page_number = page_number
        self.page_count = page_count
        self.annotation_id = annotation_id
        self.rect = rect
        where = f" (annotation {annotation_id})" if annotation_id else ""
        if rect is None:
            message = f"Page {page_number} is outside the document range 1..{page_count}"
        else:
            message = f"Rectangle {tuple(rect)} lies outside page {page_number}"
        super().__init__(message + where)


class RecordError(InkmarkError, ValueError):
    """A stored record holds a value the exporter cannot draw."""

    def __init__(self, annotation_id: str, reason: str):
        self.annotation_id = annotation_id
        super().__init__(f"Cannot export annotation {annotation_id}: {reason}")


class DuplicateIdError(InkmarkError, ValueError):
    """An annotation with the same id already exists in the store."""

    def __init__(self, annotation_id: str):
        self.annotation_id = annotation_id
        super().__init__(f"Annotation id already exists: {annotation_id}")
