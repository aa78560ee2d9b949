"""Reporters for outputting documentation coverage results."""

from __future__ import annotations

from doccov.agents.reporters.html import HTMLReporter
from doccov.agents.reporters.json_reporter import JSONReporter
from doccov.agents.reporters.pages import Page, PageRegistry, PageType
from doccov.agents.reporters.terminal import reporter

__all__ = [
    "HTMLReporter",
    "JSONReporter",
    "Page",
    "PageRegistry",
    "PageType",
    "reporter",
]
