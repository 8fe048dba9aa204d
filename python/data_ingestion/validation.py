"""
Reference integrity tracking for externally supplied schedule data.

Pre-schedule feeds and rosters are allowed to drift out of sync with the
catalog. Dangling references are dropped from placement lists, but every drop
is recorded here so the caller can surface a count instead of losing it.
"""

from typing import List, Dict, Any, Optional
import logging
from dataclasses import dataclass, field
from enum import Enum

from prometheus_client import Counter

logger = logging.getLogger(__name__)

dangling_references_total = Counter(
    "schedule_dangling_references_total",
    "Records dropped because they reference an unknown catalog entry or student",
    ["kind"]
)


class ValidationSeverity(Enum):
    """Classification of validation issues by severity"""
    WARNING = "warning"      # Record dropped, data feed out of sync
    INFO = "info"            # Minor issue - log for monitoring


class ReferenceKind(str, Enum):
    SECTION = "section"
    STUDENT = "student"


@dataclass(frozen=True)
class MissingReference:
    """A record that points at something absent from the catalog or roster"""
    kind: ReferenceKind
    reference: str
    owner: Optional[str] = None      # e.g. the student whose pre-schedule held it
    source: str = "pre_schedule"
    severity: ValidationSeverity = ValidationSeverity.WARNING

    @property
    def message(self) -> str:
        owner = f" (owner {self.owner})" if self.owner else ""
        return f"{self.source}: unknown {self.kind.value} '{self.reference}'{owner}"


@dataclass
class ReferenceTracker:
    """
    Collects MissingReference records across one loading or analysis pass.

    Recording never raises; it logs, counts and keeps the record for reporting.
    """
    issues: List[MissingReference] = field(default_factory=list)

    def record(self, issue: MissingReference) -> None:
        self.issues.append(issue)
        dangling_references_total.labels(kind=issue.kind.value).inc()
        if issue.severity == ValidationSeverity.WARNING:
            logger.warning(f"Dropping record: {issue.message}")
        else:
            logger.info(issue.message)

    def record_missing(
        self,
        kind: ReferenceKind,
        reference: str,
        owner: Optional[str] = None,
        source: str = "pre_schedule",
    ) -> MissingReference:
        issue = MissingReference(kind=kind, reference=reference, owner=owner, source=source)
        self.record(issue)
        return issue

    @property
    def dropped_count(self) -> int:
        return len(self.issues)

    def counts_by_kind(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for issue in self.issues:
            counts[issue.kind.value] = counts.get(issue.kind.value, 0) + 1
        return counts

    def get_quality_report(self) -> Dict[str, Any]:
        """Summarize dropped references for data-quality visibility"""
        top_references: Dict[str, int] = {}
        for issue in self.issues:
            top_references[issue.reference] = top_references.get(issue.reference, 0) + 1

        return {
            'summary': {
                'dropped_records': self.dropped_count,
                'by_kind': self.counts_by_kind(),
            },
            'top_missing_references': sorted(
                top_references.items(),
                key=lambda x: (-x[1], x[0])
            )[:10],
        }

    def log_quality_summary(self):
        report = self.get_quality_report()
        summary = report['summary']
        if not summary['dropped_records']:
            return

        logger.info(f"REFERENCE INTEGRITY: {summary['dropped_records']} record(s) dropped")
        for kind, count in sorted(summary['by_kind'].items()):
            logger.info(f"  {kind}: {count}")
        for reference, count in report['top_missing_references'][:5]:
            logger.info(f"    {reference}: {count} reference(s)")
