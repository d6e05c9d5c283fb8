import json
from unittest import mock

import pytest
from django.urls import reverse

from bids.errors import CompletionError
from bids.models import AISettings, MarketplaceAccount, Message, Profile, Project
from bids.services import conversation

pytestmark = pytest.mark.django_db


def post_json(client, url, payload):
    return client.post(url, data=json.dumps(payload), content_type="application/json")


@pytest.fixture
def complete():
    with mock.patch("bids.services.llm.complete") as patched:
        yield patched


@pytest.fixture
def project(configured_user):
    return conversation.create_project(
        configured_user, "Inventory dashboard", proposal="Need a React dashboard", generated_bid="👋 I can help"
    )


def test_login_required(client):
    response = client.get(reverse("projects"))
    assert response.status_code == 302
    assert "/admin/login/" in response["Location"]


def test_invalid_json_is_rejected(auth_client):
    response = auth_client.post(reverse("profile"), data="{not json", content_type="application/json")
    assert response.status_code == 400


# --- profile & settings ---

def test_profile_partial_update(auth_client, configured_user):
    response = post_json(auth_client, reverse("profile"), {"hourlyRate": 60, "skills": "React, react, Vue"})

    assert response.status_code == 200
    data = response.json()["profile"]
    assert data["hourlyRate"] == 60
    assert data["skills"] == ["React", "Vue"]
    # untouched fields keep their values
    assert data["name"] == "Dana Reyes"
    assert Profile.objects.get(user=configured_user).experience == "6 years building SaaS dashboards"


def test_profile_rejects_negative_rate(auth_client):
    response = post_json(auth_client, reverse("profile"), {"hourlyRate": -5})
    assert response.status_code == 400
    assert "hourly_rate" in response.json()["errors"]


def test_profile_rejects_bad_portfolio_url(auth_client):
    response = post_json(auth_client, reverse("profile"), {"portfolio": ["not a url"]})
    assert response.status_code == 400


def test_ai_settings_masks_key(auth_client):
    data = auth_client.get(reverse("ai_settings")).json()
    assert data["apiKey"] == "********1234"
    assert data["hasApiKey"] is True
    assert "sk-test" not in json.dumps(data)


def test_ai_settings_echoed_mask_keeps_key(auth_client, configured_user):
    response = post_json(auth_client, reverse("ai_settings"), {"apiKey": "********1234", "temperature": 0.2})

    assert response.status_code == 200
    ai = AISettings.objects.get(user=configured_user)
    assert ai.api_key == "sk-test-1234"
    assert ai.temperature == 0.2


def test_ai_settings_new_key(auth_client, configured_user):
    response = post_json(auth_client, reverse("ai_settings"), {"apiKey": "sk-new-9999", "maxTokens": 400})
    assert response.status_code == 200
    assert response.json()["aiSettings"]["apiKey"].endswith("9999")
    ai = AISettings.objects.get(user=configured_user)
    assert (ai.api_key, ai.max_tokens) == ("sk-new-9999", 400)


@pytest.mark.parametrize("payload", [
    {"temperature": 1.5},
    {"maxTokens": 0},
    {"provider": "custom"},
    {"provider": "bard"},
    {"provider": "anthropic"},
    {"provider": "openai", "model": "claude-3-5-sonnet-latest"},
])
def test_ai_settings_validation(auth_client, payload):
    assert post_json(auth_client, reverse("ai_settings"), payload).status_code == 400


def test_marketplace_settings(auth_client, configured_user):
    response = post_json(auth_client, reverse("marketplace_settings"), {
        "accessToken": "tok", "sandbox": False, "defaultBidStrategy": "premium",
    })
    assert response.status_code == 200
    data = response.json()["marketplace"]
    assert data == {"hasAccessToken": True, "sandbox": False, "defaultBidStrategy": "premium"}
    assert MarketplaceAccount.objects.get(user=configured_user).access_token == "tok"


# --- projects & messages ---

def test_create_and_list_projects(auth_client, other_user):
    conversation.create_project(other_user, "Not mine", proposal="x")
    response = post_json(auth_client, reverse("projects"), {
        "title": "Shop", "proposal": "Build a shop", "generatedBid": "👋 Shop expert",
    })

    assert response.status_code == 201
    project = response.json()["project"]
    assert project["proposal"] == "Build a shop"
    assert project["generatedBid"] == "👋 Shop expert"
    assert project["conversation"] == []

    titles = [p["title"] for p in auth_client.get(reverse("projects")).json()["projects"]]
    assert titles == ["Shop"]


def test_create_project_requires_title(auth_client):
    response = post_json(auth_client, reverse("projects"), {"title": "  ", "proposal": "x"})
    assert response.status_code == 400
    assert Project.objects.count() == 0


def test_other_users_project_is_not_found(auth_client, other_user):
    theirs = conversation.create_project(other_user, "Not mine", proposal="x")
    assert auth_client.get(reverse("project_detail", args=[theirs.id])).status_code == 404
    assert auth_client.delete(reverse("project_detail", args=[theirs.id])).status_code == 404
    assert Project.objects.filter(id=theirs.id).exists()


def test_delete_project(auth_client, project):
    response = auth_client.delete(reverse("project_detail", args=[project.id]))
    assert response.status_code == 200
    assert not Project.objects.filter(id=project.id).exists()
    assert Message.objects.count() == 0


def test_append_message(auth_client, project):
    url = reverse("project_messages", args=[project.id])

    response = post_json(auth_client, url, {"type": "client", "content": "When can you start?"})
    assert response.status_code == 201
    assert response.json()["message"]["type"] == "client"

    messages = auth_client.get(url).json()["messages"]
    assert [m["type"] for m in messages] == ["proposal", "bid", "client"]


def test_duplicate_seed_message_conflicts(auth_client, project):
    url = reverse("project_messages", args=[project.id])
    response = post_json(auth_client, url, {"type": "bid", "content": "Another bid"})
    assert response.status_code == 409


def test_invalid_message_type(auth_client, project):
    url = reverse("project_messages", args=[project.id])
    response = post_json(auth_client, url, {"type": "system", "content": "hi"})
    assert response.status_code == 400
    assert response.json()["error"] == "Type and content are required"


def test_conversation_pdf(auth_client, project):
    response = auth_client.get(reverse("download_conversation_pdf", args=[project.id]))
    assert response.status_code == 200
    assert response["Content-Type"] == "application/pdf"
    assert response.content.startswith(b"%PDF")


# --- generation ---

def test_generate_bid_saves_project(auth_client, configured_user, complete):
    complete.return_value = '"👋 Dashboards are my thing."'

    response = post_json(auth_client, reverse("generate_bid"), {
        "projectTitle": "Inventory dashboard", "proposal": "Need a React dashboard",
    })

    assert response.status_code == 200
    data = response.json()
    assert data["bid"] == "👋 Dashboards are my thing."
    project = Project.objects.get(user=configured_user)
    assert project.generated_bid == "👋 Dashboards are my thing."
    assert data["project"]["id"] == project.id
    # profile snapshot reached the prompt
    assert "Dana Reyes" in complete.call_args.args[2]


def test_generate_bid_without_saving(auth_client, complete):
    complete.return_value = "Hi"
    response = post_json(auth_client, reverse("generate_bid"), {
        "projectTitle": "X", "proposal": "Y", "save": False,
    })
    assert response.status_code == 200
    assert "project" not in response.json()
    assert Project.objects.count() == 0


def test_generate_bid_without_api_key(auth_client, configured_user, complete):
    AISettings.objects.filter(user=configured_user).update(api_key="")

    response = post_json(auth_client, reverse("generate_bid"), {"projectTitle": "X", "proposal": "Y"})

    assert response.status_code == 400
    body = response.json()
    assert body["kind"] == "configuration"
    assert body["hint"]
    complete.assert_not_called()
    assert Project.objects.count() == 0


def test_generate_bid_provider_rejects_key(auth_client, complete):
    complete.side_effect = CompletionError("Incorrect API key provided", status=401)
    response = post_json(auth_client, reverse("generate_bid"), {"projectTitle": "X", "proposal": "Y"})
    assert response.status_code == 401
    assert response.json()["kind"] == "authentication"
    assert Project.objects.count() == 0


def test_generate_answers(auth_client, listing, complete):
    complete.side_effect = ["React for six years.", "Two weeks.", "Recharts."]

    response = post_json(auth_client, reverse("generate_answers"), {"project": listing.to_dict()})

    assert response.status_code == 200
    answers = response.json()["answers"]
    assert [a["questionId"] for a in answers] == ["q1", "q2", "q3"]
    assert answers[0]["answer"] == "React for six years."
    assert 0.70 <= answers[0]["confidence"] <= 0.95


def test_generate_single_answer(auth_client, listing, complete):
    complete.return_value = "Yes."
    response = post_json(auth_client, reverse("generate_answers"), {
        "project": listing.to_dict(),
        "singleQuestion": {"id": "q3", "question": "Which charting library do you prefer?"},
    })
    assert [a["questionId"] for a in response.json()["answers"]] == ["q3"]
    assert complete.call_count == 1


def test_generate_answers_requires_project(auth_client, complete):
    assert post_json(auth_client, reverse("generate_answers"), {}).status_code == 400


def test_generate_reply_records_exchange(auth_client, project, complete):
    conversation.record_exchange(project, "What's your rate?", "$45/hour.")
    complete.return_value = "I can start Monday."

    response = post_json(auth_client, reverse("generate_reply"), {
        "projectId": project.id, "clientReply": "When can you start?",
    })

    assert response.status_code == 200
    data = response.json()
    assert data["reply"] == "I can start Monday."
    assert [m["type"] for m in data["messages"]] == ["client", "me"]
    assert [m.content for m in project.conversation()] == [
        "What's your rate?", "$45/hour.", "When can you start?", "I can start Monday.",
    ]
    prompt = complete.call_args.args[2]
    assert "CLIENT: What's your rate?\nME: $45/hour." in prompt
    assert "MY INITIAL BID: 👋 I can help" in prompt


def test_generate_reply_failure_appends_nothing(auth_client, project, complete):
    complete.side_effect = CompletionError("quota exceeded", status=429)

    response = post_json(auth_client, reverse("generate_reply"), {
        "projectId": project.id, "clientReply": "When can you start?",
    })

    assert response.status_code == 429
    assert response.json()["kind"] == "rate_limit"
    assert project.conversation().count() == 0


def test_generate_reply_for_other_users_project(auth_client, other_user, complete):
    theirs = conversation.create_project(other_user, "Not mine", proposal="x")
    response = post_json(auth_client, reverse("generate_reply"), {"projectId": theirs.id, "clientReply": "Hi"})
    assert response.status_code == 404
    complete.assert_not_called()


# --- marketplace ---

def test_marketplace_requires_token(auth_client):
    response = auth_client.get(reverse("marketplace_projects"))
    assert response.status_code == 401
    assert response.json()["error"] == "Access token is required"


def test_marketplace_projects_include_suggested_bid(auth_client, configured_user, listing):
    account = MarketplaceAccount.for_user(configured_user)
    account.access_token = "tok"
    account.default_bid_strategy = "premium"
    account.save()

    with mock.patch("bids.services.marketplace.list_active_projects", return_value=([listing], 1)) as listed:
        response = auth_client.get(reverse("marketplace_projects"), {"skills": "React,Node", "limit": "5"})

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 1
    assert data["projects"][0]["suggestedBid"] == 625
    assert listed.call_args.kwargs["skills"] == ["React", "Node"]
    assert listed.call_args.kwargs["limit"] == 5


# --- dashboard ---

def test_dashboard_stats(auth_client, configured_user, other_user):
    awaiting = conversation.create_project(configured_user, "A", proposal="a", generated_bid="bid a")
    conversation.append_message(awaiting, Message.CLIENT, "Hello?")
    replied = conversation.create_project(configured_user, "B", proposal="b", generated_bid="bid b")
    conversation.record_exchange(replied, "Price?", "$300")
    conversation.create_project(configured_user, "C", proposal="c")
    conversation.create_project(other_user, "D", proposal="d", generated_bid="bid d")

    data = auth_client.get(reverse("dashboard")).json()

    assert data["stats"] == {
        "totalProjects": 3,
        "projectsWithBid": 2,
        "awaitingReply": 1,
        "repliesSent": 1,
        "totalMessages": 8,
    }
    assert [p["title"] for p in data["recentProjects"]] == ["C", "B", "A"]


# --- request edge cases ---

def test_ai_settings_switch_to_anthropic(auth_client, configured_user):
    response = post_json(auth_client, reverse("ai_settings"), {
        "provider": "anthropic", "model": "claude-3-5-sonnet-latest",
    })
    assert response.status_code == 200
    assert AISettings.objects.get(user=configured_user).provider == "anthropic"


def test_whitespace_proposal_is_not_seeded(auth_client):
    response = post_json(auth_client, reverse("projects"), {"title": "T", "proposal": "   "})

    assert response.status_code == 201
    project = response.json()["project"]
    assert project["messages"] == []
    assert project["proposal"] == ""

    url = reverse("project_messages", args=[project["id"]])
    assert post_json(auth_client, url, {"type": "proposal", "content": "Real brief"}).status_code == 201


@pytest.mark.parametrize("project_id", ["abc", None, {"id": 1}])
def test_generate_reply_bad_project_id(auth_client, complete, project_id):
    response = post_json(auth_client, reverse("generate_reply"), {"projectId": project_id, "clientReply": "hi"})
    assert response.status_code == 400
    assert response.json()["error"] == "Project is required"
    complete.assert_not_called()


def test_generate_reply_accepts_numeric_string_id(auth_client, project, complete):
    complete.return_value = "Sure."
    response = post_json(auth_client, reverse("generate_reply"), {
        "projectId": str(project.id), "clientReply": "Still available?",
    })
    assert response.status_code == 200


@pytest.mark.parametrize("payload", [
    {"projectTitle": "X", "proposal": 123},
    {"projectTitle": ["X"], "proposal": "Y"},
])
def test_generate_bid_rejects_non_text(auth_client, complete, payload):
    response = post_json(auth_client, reverse("generate_bid"), payload)
    assert response.status_code == 400
    assert response.json()["kind"] == "validation"
    complete.assert_not_called()


def test_generate_reply_rejects_non_text(auth_client, project, complete):
    response = post_json(auth_client, reverse("generate_reply"), {"projectId": project.id, "clientReply": 42})
    assert response.status_code == 400
    assert response.json()["kind"] == "validation"
    complete.assert_not_called()


def test_generate_bid_title_too_long(auth_client, complete):
    response = post_json(auth_client, reverse("generate_bid"), {"projectTitle": "x" * 201, "proposal": "Y"})
    assert response.status_code == 400
    assert "title" in response.json()["errors"]
    complete.assert_not_called()
    assert Project.objects.count() == 0


def test_long_title_is_fine_when_not_saving(auth_client, complete):
    complete.return_value = "Hi"
    response = post_json(auth_client, reverse("generate_bid"), {
        "projectTitle": "x" * 201, "proposal": "Y", "save": False,
    })
    assert response.status_code == 200


def test_strict_reply_out_of_turn_skips_generation(auth_client, project, complete, settings):
    settings.BID_DESK_STRICT_ALTERNATION = True
    conversation.append_message(project, Message.CLIENT, "Are you there?")

    response = post_json(auth_client, reverse("generate_reply"), {
        "projectId": project.id, "clientReply": "Hello?",
    })

    assert response.status_code == 409
    complete.assert_not_called()
    assert project.conversation().count() == 1


def test_dashboard_recent_projects_are_newest_first(auth_client, configured_user):
    for i in range(7):
        conversation.create_project(configured_user, f"P{i}", proposal="p")

    data = auth_client.get(reverse("dashboard")).json()

    assert [p["title"] for p in data["recentProjects"]] == ["P6", "P5", "P4", "P3", "P2"]
