"""
Pytest configuration and shared fixtures for the bid desk tests.
"""

from types import SimpleNamespace

import pytest
from django.contrib.auth.models import User

from bids.models import AISettings, Profile
from bids.schemas import AIConfig, Budget, MarketplaceProject, ProfileSnapshot, ScreeningQuestion


def completion(text):
    """Shape of an OpenAI chat completion response, as far as the adapter reads it."""
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=text))])


@pytest.fixture
def ai_config():
    return AIConfig(api_key="sk-test-1234", model="gpt-4o", temperature=0.7, max_tokens=1000)


@pytest.fixture
def profile_snapshot():
    return ProfileSnapshot(
        name="Dana Reyes",
        skills=("React", "Node"),
        experience="6 years building SaaS dashboards",
        bio="Full-stack developer focused on clean UIs.",
        hourly_rate=45,
        portfolio=("https://example.com/work",),
    )


@pytest.fixture
def listing():
    return MarketplaceProject(
        id="1001",
        title="Inventory dashboard",
        description="Build a React dashboard on top of our Node API.",
        budget=Budget(minimum=250, maximum=750, currency="USD"),
        skills=["React", "Node.js"],
        type="fixed",
        questions=[
            ScreeningQuestion(id="q1", question="Have you built dashboards before?"),
            ScreeningQuestion(id="q2", question="What is your timeline?", is_required=False),
            ScreeningQuestion(id="q3", question="Which charting library do you prefer?"),
        ],
    )


@pytest.fixture
def user(db):
    return User.objects.create_user(username="dana", password="pw-123456")


@pytest.fixture
def other_user(db):
    return User.objects.create_user(username="sam", password="pw-123456")


@pytest.fixture
def configured_user(user):
    """A user with an API key and a filled-in profile."""
    ai = AISettings.for_user(user)
    ai.api_key = "sk-test-1234"
    ai.save()
    profile = Profile.for_user(user)
    profile.name = "Dana Reyes"
    profile.skills = ["React", "Node"]
    profile.experience = "6 years building SaaS dashboards"
    profile.save()
    return user


@pytest.fixture
def auth_client(client, configured_user):
    client.force_login(configured_user)
    return client
