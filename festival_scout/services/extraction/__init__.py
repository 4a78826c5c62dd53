"""Structured (plan-based) extraction of festival lineups from rendered pages."""

from festival_scout.services.extraction.document_parser import ParserState, StructuredDocumentParser
from festival_scout.services.extraction.html_cleaner import strip_noise
from festival_scout.services.extraction.plan_interpreter import execute_plan

__all__ = ["ParserState", "StructuredDocumentParser", "execute_plan", "strip_noise"]
