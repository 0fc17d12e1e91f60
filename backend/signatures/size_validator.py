"""
Signature size estimation

Email clients truncate signatures by bytes, so the size is the UTF-8
encoded length of the HTML, not its character count.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List

GMAIL_LIMIT_KB = 10
RECOMMENDED_LIMIT_KB = 8
GMAIL_LIMIT_BYTES = GMAIL_LIMIT_KB * 1024
RECOMMENDED_LIMIT_BYTES = RECOMMENDED_LIMIT_KB * 1024


@dataclass
class SizeEstimate:
    """Size of a rendered signature against client limits"""
    byte_length: int
    kilobytes: float
    within_limit: bool
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "byte_length": self.byte_length,
            "kilobytes": self.kilobytes,
            "within_limit": self.within_limit,
            "warnings": self.warnings,
        }


def estimate_size(html: str) -> SizeEstimate:
    byte_length = len((html or "").encode("utf-8"))
    kb = round(byte_length / 1024, 2)

    result = SizeEstimate(
        byte_length=byte_length,
        kilobytes=kb,
        within_limit=byte_length <= GMAIL_LIMIT_BYTES,
    )

    if byte_length > GMAIL_LIMIT_BYTES:
        result.warnings.append(
            f"Signature size ({kb}KB) exceeds Gmail's ~10KB limit. Gmail may truncate your signature."
        )
        result.warnings.append(
            "Consider: 1) Using smaller images, 2) Removing unnecessary elements, 3) Simplifying styling"
        )
    elif byte_length > RECOMMENDED_LIMIT_BYTES:
        result.warnings.append(
            f"Signature size ({kb}KB) is close to Gmail's limit. Consider optimizing."
        )

    return result
