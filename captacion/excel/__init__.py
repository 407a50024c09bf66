"""Styled Excel output for capture reports."""
from .writer import CaptureWorkbook, Column
