"""Domain enums and value objects for the Jalanea Lab dashboard."""

from __future__ import annotations

from enum import Enum
from typing import Dict


class LabStatus(str, Enum):
    idea = "idea"
    building = "building"
    testing = "testing"
    graduated = "graduated"


class ProjectCategory(str, Enum):
    career = "Career/Job"
    spirituality = "Spirituality"
    finance = "Finance"
    health = "Health"
    design_ai = "Design/AI"
    marketplace = "Marketplace"


class ClientStatus(str, Enum):
    draft = "draft"
    sent = "sent"
    viewed = "viewed"
    expired = "expired"


class DevStatus(str, Enum):
    development = "development"
    staging = "staging"
    production = "production"


class ActivityType(str, Enum):
    experiment = "experiment"
    client = "client"
    deploy = "deploy"
    tool = "tool"
    note = "note"


# Launch checklist keys in the order the dashboard shows them.
CHECKLIST_KEYS = (
    "ideaDocumented",
    "mvpDefined",
    "domainSecured",
    "uiDesigned",
    "coreBuilt",
    "deployedStaging",
    "testedMobile",
    "launchedProduction",
)


def default_checklist() -> Dict[str, bool]:
    return {key: False for key in CHECKLIST_KEYS}
