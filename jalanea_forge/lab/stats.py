"""Dashboard numbers: launch checklist progress and the overview stats."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Dict, Iterable, Mapping

from jalanea_forge.core.database.entities.lab import LabClientPreview, LabDevDeployment, LabProject
from jalanea_forge.core.models.domain.lab import CHECKLIST_KEYS, DevStatus, LabStatus, default_checklist


def checklist_progress(checklist: Mapping[str, bool]) -> float:
    """Percentage of launch steps done, over the eight known steps."""
    done = sum(1 for key in CHECKLIST_KEYS if checklist.get(key))
    return done / len(CHECKLIST_KEYS) * 100


def toggle_checklist(checklist: Mapping[str, bool], key: str) -> Dict[str, bool]:
    """A copy of ``checklist`` with ``key`` flipped.

    Raises:
        ValueError: ``key`` is not a launch checklist step
    """
    if key not in CHECKLIST_KEYS:
        raise ValueError(f"Unknown checklist item: {key}")
    updated = {**default_checklist(), **checklist}
    updated[key] = not updated[key]
    return updated


@dataclass(frozen=True)
class LabStats:
    total_projects: int
    active_experiments: int
    live_products: int
    ideas_in_queue: int
    client_projects: int
    live_deployments: int

    def as_dict(self) -> Dict[str, int]:
        return asdict(self)


def compute_stats(
    projects: Iterable[LabProject],
    clients: Iterable[LabClientPreview],
    deployments: Iterable[LabDevDeployment],
) -> LabStats:
    statuses = [p.status for p in projects]
    return LabStats(
        total_projects=len(statuses),
        active_experiments=sum(1 for s in statuses if s in (LabStatus.building.value, LabStatus.testing.value)),
        live_products=statuses.count(LabStatus.graduated.value),
        ideas_in_queue=statuses.count(LabStatus.idea.value),
        client_projects=sum(1 for _ in clients),
        live_deployments=sum(1 for d in deployments if d.status == DevStatus.production.value),
    )
