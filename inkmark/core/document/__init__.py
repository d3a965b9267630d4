"""
PDF export of annotations.
"""
from .pdf_exporter import DrawOp, PDFExporter

__all__ = ["DrawOp", "PDFExporter"]
