from __future__ import annotations
# buyictbot/scrapers/models.py

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class LabelValue:
    label: str
    value: str

    def to_dict(self) -> dict:
        return {"label": self.label, "value": self.value}

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "LabelValue":
        return cls(label=d.get("label") or "", value=d.get("value") or "")


@dataclass(frozen=True)
class Criterion:
    description: str
    weight: Optional[str] = None     # e.g. '20%'; absent on unweighted criteria

    def to_dict(self) -> dict:
        return {"description": self.description, "weight": self.weight}

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Criterion":
        return cls(description=d.get("description") or "", weight=d.get("weight"))


@dataclass(frozen=True)
class OpportunityDetail:
    overview: Tuple[LabelValue, ...] = ()
    requirements_description: str = ""          # raw HTML from the portal
    requirements_data: Tuple[LabelValue, ...] = ()
    essential_criteria: Tuple[Criterion, ...] = ()
    desirable_criteria: Tuple[Criterion, ...] = ()
    submission_requirements: Tuple[str, ...] = ()
    closing_at: Optional[str] = None            # ISO timestamp from the 'Closing date' row

    def overview_value(self, label: str) -> Optional[str]:
        """Case-insensitive lookup of an overview row, ignoring a trailing colon."""
        want = label.strip().rstrip(":").lower()
        for row in self.overview:
            if row.label.strip().rstrip(":").lower() == want:
                return row.value
        return None

    def to_dict(self) -> dict:
        return {
            "overview": [r.to_dict() for r in self.overview],
            "requirementsDescription": self.requirements_description,
            "requirementsData": [r.to_dict() for r in self.requirements_data],
            "essentialCriteria": [c.to_dict() for c in self.essential_criteria],
            "desirableCriteria": [c.to_dict() for c in self.desirable_criteria],
            "submissionRequirements": list(self.submission_requirements),
            "closingAt": self.closing_at,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "OpportunityDetail":
        return cls(
            overview=tuple(LabelValue.from_dict(x) for x in d.get("overview") or []),
            requirements_description=d.get("requirementsDescription") or "",
            requirements_data=tuple(LabelValue.from_dict(x) for x in d.get("requirementsData") or []),
            essential_criteria=tuple(Criterion.from_dict(x) for x in d.get("essentialCriteria") or []),
            desirable_criteria=tuple(Criterion.from_dict(x) for x in d.get("desirableCriteria") or []),
            submission_requirements=tuple(d.get("submissionRequirements") or []),
            closing_at=d.get("closingAt"),
        )


@dataclass(frozen=True)
class OpportunitySummary:
    # Identity
    href: str
    title: str = ""
    type: Optional[str] = None                 # eligibility pill, e.g. 'Open to all'
    raw_text: str = ""

    # Attached after the detail visit
    details: Optional[OpportunityDetail] = None
    details_error: Optional[str] = None

    def with_details(self, details: OpportunityDetail) -> "OpportunitySummary":
        return replace(self, details=details, details_error=None)

    def with_error(self, message: str) -> "OpportunitySummary":
        return replace(self, details=None, details_error=message)

    def to_dict(self) -> dict:
        out: Dict[str, Any] = {
            "title": self.title,
            "href": self.href,
            "type": self.type,
            "rawText": self.raw_text,
        }
        if self.details is not None:
            out["details"] = self.details.to_dict()
        if self.details_error is not None:
            out["detailsError"] = self.details_error
        return out

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "OpportunitySummary":
        details = d.get("details")
        return cls(
            href=d["href"],
            title=d.get("title") or "",
            type=d.get("type"),
            raw_text=d.get("rawText") or "",
            details=OpportunityDetail.from_dict(details) if details else None,
            details_error=d.get("detailsError"),
        )


@dataclass(frozen=True)
class RunSnapshot:
    generated_at: str
    opportunities: Tuple[OpportunitySummary, ...] = field(default_factory=tuple)

    def __post_init__(self):
        seen = set()
        for opp in self.opportunities:
            if opp.href in seen:
                raise ValueError(f"Duplicate href in snapshot: {opp.href}")
            seen.add(opp.href)

    @property
    def hrefs(self) -> List[str]:
        return [o.href for o in self.opportunities]

    def to_dict(self) -> dict:
        return {
            "generatedAt": self.generated_at,
            "opportunities": [o.to_dict() for o in self.opportunities],
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "RunSnapshot":
        return cls(
            generated_at=d["generatedAt"],
            opportunities=tuple(OpportunitySummary.from_dict(x) for x in d.get("opportunities") or []),
        )
