"""
Package Analytics

Download trends, growth rate and security audit summary for npm packages.
"""

__version__ = "0.1.0"

from .analyzer import PackageAnalyzer
from .cli import main
from .models import AnalysisReport, HistoryMode

__all__ = ["AnalysisReport", "HistoryMode", "PackageAnalyzer", "main"]
