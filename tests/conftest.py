"""Shared fixtures for the Inkmark test suite."""

import fitz
import pytest
from PyQt5.QtCore import QCoreApplication

from inkmark.controllers import InteractionController, PageStackLayout, TextSelectionModel
from inkmark.core.annotations import AnnotationStore, HighlightAnnotation, Position

LETTER = (612, 792)


@pytest.fixture(scope="session", autouse=True)
def qapp():
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


def make_pdf(page_count: int = 3, size=LETTER) -> bytes:
    doc = fitz.open()
    for i in range(page_count):
        page = doc.new_page(width=size[0], height=size[1])
        page.insert_text((72, 72), f"Page {i + 1}", fontsize=11)
    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture
def sample_pdf() -> bytes:
    return make_pdf()


@pytest.fixture
def store() -> AnnotationStore:
    return AnnotationStore()


@pytest.fixture
def layout() -> PageStackLayout:
    return PageStackLayout([LETTER] * 3, scale=1.0, page_spacing=30)


@pytest.fixture
def selection() -> TextSelectionModel:
    return TextSelectionModel()


@pytest.fixture
def controller(store, layout, selection) -> InteractionController:
    return InteractionController(store, layout, selection)


def highlight(annotation_id: str, page: int = 1, rect=(10, 20, 100, 30),
              color: str = "#FFEB3B") -> HighlightAnnotation:
    return HighlightAnnotation(
        id=annotation_id,
        position=Position(*rect, page_number=page),
        color=color,
        content="text",
    )
