"""Client-side event tracking runtime, run headlessly against parsed pages."""

from traffic_source.main import boot_page
from traffic_source.page import DomEvent, Page

__all__ = ["boot_page", "Page", "DomEvent"]
