"""
Target Classifier
-----------------
Infers which ShieldAPI parameter a free-form scan target belongs to.

Rules are ordered, first match wins:
1. contains '@'                  -> email
2. four dot-separated digit runs -> ip (no octet range check, the API validates)
3. http:// or https:// prefix    -> url
4. anything else                 -> domain
"""

from typing import Dict
import re

IPV4_SHAPE = re.compile(r"\d+\.\d+\.\d+\.\d+", re.ASCII)

URL_PREFIXES = ("http://", "https://")


def classify_target(target: str) -> Dict[str, str]:
    """Map a target string to a single-key parameter set."""
    if "@" in target:
        return {"email": target}
    if IPV4_SHAPE.fullmatch(target):
        return {"ip": target}
    if target.startswith(URL_PREFIXES):
        return {"url": target}
    return {"domain": target}
