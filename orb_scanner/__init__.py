"""
ORB Scanner - Opening Range Breakout and Index Lotto Scanner

Forms opening ranges for index symbols, detects and scores breakouts
against them, and synthesizes option trade parameters on a fixed scan
cadence. A slower index lotto scan ranks out-of-the-money option plays
from daily technicals.
"""

__version__ = "0.1.0"
__author__ = "ORB Scanner Team"

from .engine import ScanEngine, ScanResult, ScannerStatus

__all__ = ["ScanEngine", "ScanResult", "ScannerStatus", "__version__"]
