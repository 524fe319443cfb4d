import pytest

from helpers.builders import branching_template
from triage_rulesets.ruleset import TemplateStore


@pytest.fixture(scope="session")
def store():
    """Load the full TemplateStore once for the entire test session."""
    s = TemplateStore()
    s.load()
    return s


@pytest.fixture(scope="session")
def branching():
    return branching_template()
