"""
Report compilation.
"""

from .compiler import (
    ReportInputs,
    ai_share_of_voice,
    compile_report,
    position_distribution,
    quick_wins,
    total_keywords,
)
