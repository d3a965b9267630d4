"""
Annotation records and the session store.
"""
from .models import (
    IMMUTABLE_FIELDS,
    TYPE_TO_CLASS,
    Annotation,
    AnnotationType,
    BorderStyle,
    CommentAnnotation,
    EllipseAnnotation,
    FreehandDrawingAnnotation,
    HighlightAnnotation,
    Position,
    RectangleAnnotation,
    Reply,
    SignatureAnnotation,
    StrikeThroughAnnotation,
    TextBoxAnnotation,
    TextSelection,
    UnderlineAnnotation,
    with_changes,
)
from .store import AnnotationStore, StoreSnapshot

__all__ = [
    'Annotation',
    'AnnotationType',
    'BorderStyle',
    'CommentAnnotation',
    'EllipseAnnotation',
    'FreehandDrawingAnnotation',
    'HighlightAnnotation',
    'IMMUTABLE_FIELDS',
    'Position',
    'RectangleAnnotation',
    'Reply',
    'SignatureAnnotation',
    'StrikeThroughAnnotation',
    'TextBoxAnnotation',
    'TextSelection',
    'TYPE_TO_CLASS',
    'UnderlineAnnotation',
    'with_changes',
    'AnnotationStore',
    'StoreSnapshot',
]
