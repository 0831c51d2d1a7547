"""Documentation coverage computation."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from .models import (
    ClassDoc,
    Component,
    CoverageRecord,
    CoverageSummary,
    Injectable,
    Interface,
    Member,
    Pipe,
)


def get_status(percent: int) -> str:
    """Map a coverage percentage onto its status bucket."""
    if percent <= 25:
        return "low"
    if percent <= 50:
        return "medium"
    if percent <= 75:
        return "good"
    return "very-good"


def coverage_percent(documented: int, total: int) -> int:
    if total == 0:
        return 0
    return (documented * 100) // total


@dataclass
class CoverageEngine:
    """Scores how many documentable statements of each entity carry a description.

    Components, classes, injectables and interfaces are scored on their members
    (components get one extra unit for their own description); entities whose
    member lists were not extracted are skipped. Pipes are scored on their own
    description and never skipped.
    """

    def evaluate(
        self,
        *,
        components: Iterable[Component] = (),
        classes: Iterable[ClassDoc] = (),
        injectables: Iterable[Injectable] = (),
        interfaces: Iterable[Interface] = (),
        pipes: Iterable[Pipe] = (),
    ) -> CoverageSummary:
        records: List[CoverageRecord] = []

        for component in components:
            groups = (component.properties, component.methods, component.inputs, component.outputs)
            if any(group is None for group in groups):
                continue
            documented, total = self._count(*groups)
            # the component decorator comment counts as one statement
            total += 1
            if component.description:
                documented += 1
            records.append(self._record(component.file, component.kind, component.name, documented, total))

        for entity in (*classes, *injectables, *interfaces):
            if entity.properties is None or entity.methods is None:
                continue
            documented, total = self._count(entity.properties, entity.methods)
            records.append(self._record(entity.file, entity.kind, entity.name, documented, total))

        for pipe in pipes:
            documented = 1 if pipe.description else 0
            records.append(self._record(pipe.file, pipe.kind, pipe.name, documented, 1))

        records.sort(key=lambda record: record.file_path)
        if records:
            count = sum(record.percent for record in records) // len(records)
        else:
            count = 0
        return CoverageSummary(count=count, status=get_status(count), records=records)

    def save(self, output_dir: Path, summary: CoverageSummary) -> Path:
        """Write a machine-readable copy of the report next to the HTML output."""
        output = output_dir / "coverage.json"
        output.parent.mkdir(parents=True, exist_ok=True)
        payload = {
            "count": summary.count,
            "status": summary.status,
            "files": [
                dict(asdict(record), coverage_count=record.coverage_count)
                for record in summary.records
            ],
        }
        output.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
        return output

    @staticmethod
    def _count(*groups: Optional[Sequence[Member]]) -> tuple[int, int]:
        documented = 0
        total = 0
        for group in groups:
            for member in group or ():
                total += 1
                if member.description:
                    documented += 1
        return documented, total

    @staticmethod
    def _record(file_path: str, kind: str, name: str, documented: int, total: int) -> CoverageRecord:
        percent = coverage_percent(documented, total)
        return CoverageRecord(
            file_path=file_path,
            kind=kind,
            name=name,
            documented=documented,
            total=total,
            percent=percent,
            status=get_status(percent),
        )


__all__ = ["CoverageEngine", "coverage_percent", "get_status"]
