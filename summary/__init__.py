"""Natural-language summaries of execution reports"""
from summary.stream import SummaryEvent, SummaryEventKind, SummaryStream
from summary.generator import SummaryGenerator, TextGenerator
from summary.prompts import SummaryPrompts

__all__ = [
    "SummaryEvent",
    "SummaryEventKind",
    "SummaryStream",
    "SummaryGenerator",
    "TextGenerator",
    "SummaryPrompts",
]
