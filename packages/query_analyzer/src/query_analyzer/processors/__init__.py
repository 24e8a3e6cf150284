"""Pattern processors of the What, When and Where facets."""

from query_analyzer.processors.base import Processor
from query_analyzer.processors.what import WhatProcessor
from query_analyzer.processors.when import WhenProcessor
from query_analyzer.processors.where import WhereProcessor

__all__ = [
    "Processor",
    "WhatProcessor",
    "WhenProcessor",
    "WhereProcessor",
]
