"""
Pathogenic-variant classification.

Two signals are computed for every candidate record and kept separately
observable:

* the accession signal: the accession carries a variant marker (``-VAR_``)
  or ends with a substitution suffix such as ``-A123B``;
* the marker signal: the description contains ``PATHOGENIC_VARIANT``.

A third, softer keyword signal (``pathogenic``, ``cancer``, ...) is also
computed. Which combination qualifies a record is decided by a policy
predicate. The default ``strict`` policy requires both the accession and the
marker signal.
"""

import re
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Optional, Union

from proteovariant.core.common import (
    DEFAULT_DISEASE_ASSOCIATION,
    DEFAULT_DISEASE_KEYWORDS,
    PATHOGENIC_ASSOCIATION,
    PATHOGENIC_MARKER_TOKEN,
    VARIANT_MARKER_TOKEN,
    VARIANT_SUFFIX_PATTERN,
)

_ACCESSION_PATTERN = re.compile(
    f"(?:{re.escape(VARIANT_MARKER_TOKEN)})|(?:{VARIANT_SUFFIX_PATTERN})"
)
_ASSOCIATION_PATTERN = re.compile(
    r"\bAssociation:\s*(.+?)\s*(?=\s[A-Z]{2}=|\b[A-Za-z]+:|\b"
    + PATHOGENIC_MARKER_TOKEN
    + r"\b|[;|]|$)"
)
_SIGNIFICANCE_PATTERN = re.compile(
    r"\bClinicalSignificance:\s*(.+?)\s*(?=\s[A-Z]{2}=|\b[A-Za-z]+:|\b"
    + PATHOGENIC_MARKER_TOKEN
    + r"\b|[;|]|$)"
)


@dataclass(frozen=True)
class ClassificationSignals:
    accession_match: bool
    marker_match: bool
    keyword_match: bool = False


Policy = Callable[[ClassificationSignals], bool]

POLICIES: Dict[str, Policy] = {
    "strict": lambda s: s.accession_match and s.marker_match,
    "any": lambda s: s.accession_match or s.marker_match,
    "keyword": lambda s: (s.accession_match and s.marker_match) or s.keyword_match,
}

DEFAULT_POLICY = "strict"


def accession_matches(accession: str) -> bool:
    return bool(accession) and _ACCESSION_PATTERN.search(accession) is not None


def description_has_marker(description: str) -> bool:
    return PATHOGENIC_MARKER_TOKEN.lower() in (description or "").lower()


def disease_association(description: str, pathogenic: bool = False) -> str:
    """
    Derive the disease association shown for a record.

    The ``Association:`` marker wins, then ``ClinicalSignificance:``; records
    without either are labelled ``Pathogenic`` when classified, ``N/A`` otherwise.
    A value ends at the next ``Key:`` marker, UniProt header tag (`` OS=``,
    `` GN=``, ...), ``PATHOGENIC_VARIANT``, ``;`` or ``|``.
    """
    for pattern in (_ASSOCIATION_PATTERN, _SIGNIFICANCE_PATTERN):
        match = pattern.search(description or "")
        if match and match.group(1).strip():
            return match.group(1).strip()
    return PATHOGENIC_ASSOCIATION if pathogenic else DEFAULT_DISEASE_ASSOCIATION


class PathogenicClassifier:
    """Computes the classification signals and applies a policy to them."""

    def __init__(
        self,
        policy: Union[str, Policy] = DEFAULT_POLICY,
        keywords: Optional[Iterable[str]] = None,
    ):
        if isinstance(policy, str):
            if policy not in POLICIES:
                raise ValueError(
                    f"Unknown classification policy '{policy}'. Available: {list(POLICIES)}"
                )
            self.policy_name = policy
            self.policy = POLICIES[policy]
        else:
            self.policy_name = getattr(policy, "__name__", "custom")
            self.policy = policy
        if keywords is None:
            keywords = DEFAULT_DISEASE_KEYWORDS
        self.keywords = tuple(k.lower() for k in keywords if k)

    def signals(self, accession: str, description: str) -> ClassificationSignals:
        lowered = (description or "").lower()
        return ClassificationSignals(
            accession_match=accession_matches(accession),
            marker_match=description_has_marker(description),
            keyword_match=any(keyword in lowered for keyword in self.keywords),
        )

    def is_pathogenic(self, signals: ClassificationSignals) -> bool:
        return bool(self.policy(signals))
