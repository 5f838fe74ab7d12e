"""
Index lotto scan: daily technicals and out-of-the-money option plays.
"""

from .models import IndexData, LottoPlay, LottoScanResult
from .scanner import LottoScanner, generate_plays

__all__ = ["IndexData", "LottoPlay", "LottoScanResult", "LottoScanner", "generate_plays"]
