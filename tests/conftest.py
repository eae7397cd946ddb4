import pytest

from ai_learning.engine import PreferenceEngine
from data.dummy_session_repository_impl import DummySessionRepositoryImpl


@pytest.fixture
def person():
    return {
        "id": "p-1",
        "full_name": "Jane Doe",
        "headline": "Founder at Stealth",
        "about": "Building machine learning tools for analysts",
        "level_of_seniority": "Founder",
        "region": "Europe",
        "people_highlights": ["serial_founder", "top_university"],
        "experience": [
            {"company_name": "Stealth AI", "title": "Founder", "is_current": True},
            {"company_name": "Google", "title": "Engineer", "industry": "Tech"},
            {"company_name": "Meta", "title": "Intern"},
            {"company_name": "IBM", "title": "Intern"},
        ],
    }


@pytest.fixture
def other_person():
    return {
        "id": "p-2",
        "full_name": "John Roe",
        "headline": "Sales Director at Acme Banking",
        "region": "North America",
        "people_highlights": ["sales_leader"],
    }


@pytest.fixture
def company():
    return {
        "id": "c-1",
        "organization_name": "Ledgerly",
        "tagline": "Payments infrastructure for marketplaces",
        "hq_location": "London",
        "company_highlights": "yc_backed; rapid_growth",
        "investors": ["Sequoia", "Accel"],
    }


@pytest.fixture
def signal():
    return {
        "id": "s-1",
        "full_name": "Ada Smith",
        "signal_type": "New Company",
        "headline": "Co-Founder at NewCo",
        "new_position_company_name": "NewCo",
        "past_position_company_name": "Stripe",
        "new_position_title": "Co-Founder",
    }


@pytest.fixture
def repository():
    return DummySessionRepositoryImpl()


@pytest.fixture
def engine(repository):
    return PreferenceEngine(repository=repository)
