"""Public model re-exports for triage_rulesets.

Consumers should import from ``triage_rulesets.models`` rather than
reaching into sub-modules directly.
"""

# --- Access ---
from triage_rulesets.models.access import (
    AccessDecision,
    AccessFacts,
    AccessState,
    CallToActionContext,
)

# --- Evaluation ---
from triage_rulesets.models.evaluation import RedFlagEvaluation

# --- Guidance ---
from triage_rulesets.models.guidance import (
    GuidanceOutcome,
    GuidancePlan,
    GuidanceSections,
    SchemaDescriptor,
    TriageRequest,
)

# --- Questions ---
from triage_rulesets.models.question import (
    BaseQuestion,
    FreeTextQuestion,
    MultiSelectQuestion,
    NumberQuestion,
    Question,
    ScaleQuestion,
    ShowIf,
    SingleSelectQuestion,
    question_mapper,
)

# --- Red flags ---
from triage_rulesets.models.red_flag import (
    ActionLevel,
    ActionLevelConst,
    Condition,
    RedFlag,
)

# --- Safety ---
from triage_rulesets.models.safety import PhiCounts, PhiIssue, PhiScanResult

# --- Templates ---
from triage_rulesets.models.template import OutputSpec, Template

__all__ = [
    # Access
    "AccessDecision",
    "AccessFacts",
    "AccessState",
    "CallToActionContext",
    # Evaluation
    "RedFlagEvaluation",
    # Guidance
    "GuidanceOutcome",
    "GuidancePlan",
    "GuidanceSections",
    "SchemaDescriptor",
    "TriageRequest",
    # Questions
    "BaseQuestion",
    "FreeTextQuestion",
    "MultiSelectQuestion",
    "NumberQuestion",
    "Question",
    "ScaleQuestion",
    "ShowIf",
    "SingleSelectQuestion",
    "question_mapper",
    # Red flags
    "ActionLevel",
    "ActionLevelConst",
    "Condition",
    "RedFlag",
    # Safety
    "PhiCounts",
    "PhiIssue",
    "PhiScanResult",
    # Templates
    "OutputSpec",
    "Template",
]
