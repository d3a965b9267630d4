"""
Core logic for the Inkmark PDF annotator.
"""

from .annotations import Annotation, AnnotationStore, AnnotationType, StoreSnapshot
from .document import PDFExporter
from .errors import DuplicateIdError, InkmarkError, LoadError, RangeError, RecordError

__all__ = [
    "Annotation",
    "AnnotationStore",
    "AnnotationType",
    "StoreSnapshot",
    "PDFExporter",
    "InkmarkError",
    "LoadError",
    "RangeError",
    "RecordError",
    "DuplicateIdError",
]
