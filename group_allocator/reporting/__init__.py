"""Reporting utilities for group_allocator."""

from .rationale import (
    format_seat_rationales,
    export_yaml,
    export_csv,
)

__all__ = ["format_seat_rationales", "export_yaml", "export_csv"]
