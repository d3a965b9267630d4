"""
Controllers connecting viewer input to the annotation store.
"""
from .input_handler import UserInputHandler
from .interaction_controller import (
    Capturing,
    DragGesture,
    EditorGesture,
    IdGenerator,
    Idle,
    InteractionController,
    StrokeGesture,
    Tool,
    ToolArmed,
)
from .overlay import OverlayItem, overlays_for_layout, overlays_for_page
from .selection import TextSelectionModel
from .view_layout import PageLayout, PageStackLayout

__all__ = [
    'UserInputHandler',
    'Capturing',
    'DragGesture',
    'EditorGesture',
    'IdGenerator',
    'Idle',
    'InteractionController',
    'StrokeGesture',
    'Tool',
    'ToolArmed',
    'OverlayItem',
    'overlays_for_layout',
    'overlays_for_page',
    'TextSelectionModel',
    'PageLayout',
    'PageStackLayout',
]
