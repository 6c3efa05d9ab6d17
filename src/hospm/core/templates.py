"""Default project layout and the built-in project templates."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from hospm.errors import TemplateNotFoundError
from hospm.models import DEFAULT_PROJECT_NAME, Item, Link, Project, ProjectStage

DEFAULT_STAGES: list[str] = [
    "Approval & Feasibility",
    "Pre-Preliminary Design",
    "Scheme & Preliminary Design",
    "Construction Drawings",
    "Construction Drawings & Tendering",
    "Construction",
    "Completion Acceptance",
    "Completion to Opening",
    "Operation & Maintenance",
]

HOSPITAL_LEAD = "Hospital Lead"
AGENT_LEAD = "Agent-Builder Lead"
MANAGEMENT_CENTER_LEAD = "Management Center Lead"

# The six management threads present in every stage.
DEFAULT_LINKS: list[dict[str, str]] = [
    {"name": "Requirement Generation", "owner": HOSPITAL_LEAD, "color": "#3B82F6"},
    {"name": "Design Conversion", "owner": AGENT_LEAD, "color": "#10B981"},
    {"name": "Procurement Integration", "owner": HOSPITAL_LEAD, "color": "#F59E0B"},
    {"name": "Construction Control", "owner": AGENT_LEAD, "color": "#EF4444"},
    {"name": "Operations Handoff", "owner": HOSPITAL_LEAD, "color": "#8B5CF6"},
    {"name": "Continuous Improvement", "owner": MANAGEMENT_CENTER_LEAD, "color": "#06B6D4"},
]

SAMPLE_ITEM: dict[str, Any] = {
    "description": "Front-load medical process requirements",
    "participants": ["Planning", "Architecture", "Medical Process Consulting"],
    "status": "todo",
    "priority": "high",
    "notes": "Settle the hospital's functional requirements and process flows",
}


@dataclass(frozen=True)
class Template:
    """A named starting layout for a new project."""

    id: str
    name: str
    description: str
    category: str
    stages: list[str]
    link_count: int = 6
    features: list[str] = field(default_factory=list)


TEMPLATES: dict[str, Template] = {
    t.id: t
    for t in (
        Template(
            id="hospital-comprehensive",
            name="General Hospital Construction",
            description="Large general hospitals with full medical process design and equipment fit-out",
            category="Healthcare",
            stages=DEFAULT_STAGES,
            features=[
                "Full medical process design",
                "Clean operating theatre systems",
                "Medical gas systems",
                "HIS/LIS/PACS integration",
                "Infection control workflow",
                "Emergency planning",
            ],
        ),
        Template(
            id="hospital-specialized",
            name="Specialist Hospital Construction",
            description="Specialist hospitals such as oncology or cardiovascular centres",
            category="Healthcare",
            stages=DEFAULT_STAGES,
            features=[
                "Specialist medical process",
                "Special equipment fit-out",
                "Dedicated clean-air systems",
                "Research laboratories",
                "Teaching and training areas",
            ],
        ),
        Template(
            id="hospital-community",
            name="Community Hospital Construction",
            description="Community health centres and small hospitals",
            category="Healthcare",
            stages=[
                "Approval",
                "Scheme Design",
                "Construction Drawing Design",
                "Construction",
                "Completion Acceptance",
                "Operation & Maintenance",
            ],
            link_count=5,
            features=[
                "Primary care functions",
                "Preventive care services",
                "Family doctor workstations",
                "Health management centre",
                "Convenience facilities",
            ],
        ),
        Template(
            id="hospital-renovation",
            name="Hospital Renovation & Expansion",
            description="Renovation and extension of an operating hospital",
            category="Renovation",
            stages=[
                "Site Survey",
                "Renovation Scheme",
                "Construction Drawing Design",
                "Phased Construction",
                "System Commissioning",
                "Acceptance & Handover",
                "Operation & Maintenance",
            ],
            features=[
                "Condition survey and assessment",
                "Phased construction plan",
                "Works during live operation",
                "System upgrades",
                "Functional optimisation",
            ],
        ),
    )
}


def _stage_description(name: str) -> str:
    return f"Work belonging to the {name} stage"


def _build_stage(name: str, link_specs: list[dict[str, str]]) -> ProjectStage:
    stage = ProjectStage(name=name, description=_stage_description(name))
    for fields in link_specs:
        stage.add_link(Link(**fields))
    return stage


def build_default_project() -> Project:
    """Nine default stages with all six links and one sample item."""
    project = Project(
        name=DEFAULT_PROJECT_NAME,
        description="Full lifecycle management of a hospital construction project",
        start_date=datetime.now(UTC).date(),
    )
    for name in DEFAULT_STAGES:
        project.add_stage(_build_stage(name, DEFAULT_LINKS))

    project.stages[0].links[0].add_item(Item.from_json(SAMPLE_ITEM))
    return project


def _sample_items(template_id: str, stage_index: int, stage_name: str, link_name: str) -> list[dict[str, Any]]:
    items: list[dict[str, Any]] = []

    if stage_index == 0 and link_name == "Requirement Generation":
        items.append(dict(SAMPLE_ITEM))
        if template_id == "hospital-comprehensive":
            items.append(
                {
                    "description": "Survey specialist department requirements",
                    "participants": ["Medical Process Consulting", "Clinical Experts", "Hospital"],
                    "priority": "high",
                    "notes": "Collect the particular needs of each specialist department",
                }
            )

    if stage_name == "Construction Drawings" and link_name == "Design Conversion":
        items.append(
            {
                "description": "Medical gas system design",
                "participants": ["MEP", "Medical Process", "Equipment Supplier"],
                "priority": "medium",
                "notes": "Design central oxygen supply and vacuum suction",
            }
        )
        items.append(
            {
                "description": "Clean operating theatre design",
                "participants": ["Architecture", "MEP", "Cleanroom Specialist"],
                "priority": "high",
                "notes": "Design operating theatres that meet clean-room codes",
            }
        )

    if stage_name == "Construction" and link_name == "Construction Control":
        items.append(
            {
                "description": "Medical equipment installation and commissioning",
                "participants": ["Equipment Supplier", "Contractor", "Supervisor"],
                "priority": "medium",
                "notes": "Install and commission medical equipment",
            }
        )

    return items


def build_template_project(template_id: str) -> Project:
    """Build a fresh project from one of ``TEMPLATES``."""
    template = TEMPLATES.get(template_id)
    if template is None:
        raise TemplateNotFoundError(f"Unknown template: {template_id}")

    project = Project(name=template.name, description=template.description)
    link_specs = DEFAULT_LINKS[: template.link_count]

    for index, stage_name in enumerate(template.stages):
        stage = _build_stage(stage_name, link_specs)
        for link in stage.links:
            for data in _sample_items(template.id, index, stage_name, link.name):
                link.add_item(Item.from_json(data))
        project.add_stage(stage)

    return project
