from bids.prompts import (
    DEFAULT_SYSTEM_PROMPT,
    SYSTEM_PROMPTS,
    build_answer_prompt,
    build_bid_prompt,
    build_reply_prompt,
    format_money,
    render_history,
    system_prompt_for,
)
from bids.schemas import AIConfig, HistoryEntry, ProfileSnapshot, ScreeningQuestion


def test_bid_prompt_embeds_title_and_proposal_verbatim(profile_snapshot):
    proposal = 'Need a "fast" site\n  with <html> & {braces} and 100% uptime'
    prompt = build_bid_prompt("Shop: rebuild {v2}", proposal, profile_snapshot)

    assert "PROJECT: Shop: rebuild {v2}" in prompt
    assert proposal in prompt
    assert "- Name: Dana Reyes" in prompt
    assert "- Skills: React, Node" in prompt
    assert "- Rate: $45/hour" in prompt
    assert prompt.endswith("Write the bid now:")


def test_bid_prompt_fallbacks_for_empty_profile():
    prompt = build_bid_prompt("Logo", "Design a logo", ProfileSnapshot())

    assert "- Name: Professional Freelancer" in prompt
    assert "- Skills: Relevant technical skills" in prompt
    assert "- Experience: Experienced in similar projects" in prompt
    assert "- About: Dedicated professional" in prompt
    assert "- Rate: $50/hour" in prompt


def test_bid_prompt_lists_analysis_points(profile_snapshot):
    prompt = build_bid_prompt("X", "Y", profile_snapshot)
    assert "What specific problem does the client want solved?" in prompt
    assert "What exact deliverables do they need?" in prompt
    assert "What concerns might they have?" in prompt
    assert "RIGHT person for THIS project" in prompt


def test_answer_prompt_contents(listing, profile_snapshot):
    prompt = build_answer_prompt(listing, listing.questions[0], profile_snapshot)

    assert "Title: Inventory dashboard" in prompt
    assert "Budget: $250 - $750 (USD)" in prompt
    assert "Required Skills: React, Node.js" in prompt
    assert "Project Type: fixed" in prompt
    assert "Hourly Rate: $45/hour" in prompt
    assert "Have you built dashboards before?\n(This is a required question)" in prompt
    assert "2-4 paragraphs max" in prompt
    assert prompt.endswith("Answer:")


def test_answer_prompt_optional_question_and_missing_profile_fields(listing):
    question = ScreeningQuestion(id="q9", question="Timeline?", is_required=False)
    prompt = build_answer_prompt(listing, question, ProfileSnapshot())

    assert "(This is a required question)" not in prompt
    assert "Experience: Not specified" in prompt
    assert "Bio: Not specified" in prompt


def test_reply_prompt_without_history(profile_snapshot):
    prompt = build_reply_prompt("App", "Need an app", "👋 I can help", "When can you start?", [], profile_snapshot)

    assert "PREVIOUS CONVERSATION" not in prompt
    assert "MY INITIAL BID: 👋 I can help" in prompt
    assert "CLIENT'S LATEST REPLY:\nWhen can you start?" in prompt
    assert "- Name: Dana Reyes" in prompt


def test_reply_prompt_renders_history_in_order():
    history = [
        HistoryEntry("client", "What is your rate?"),
        HistoryEntry("me", "45 per hour."),
        HistoryEntry("client", "Can you do fixed price?"),
        HistoryEntry("me", "Yes, 900 total."),
    ]
    prompt = build_reply_prompt("App", "p", None, "Deal?", history, ProfileSnapshot())

    expected = (
        "PREVIOUS CONVERSATION:\n"
        "CLIENT: What is your rate?\n"
        "ME: 45 per hour.\n"
        "CLIENT: Can you do fixed price?\n"
        "ME: Yes, 900 total."
    )
    assert expected in prompt
    assert prompt.index("PREVIOUS CONVERSATION") < prompt.index("CLIENT'S LATEST REPLY")
    assert "- Name: Freelancer" in prompt
    assert "- Skills: Various skills" in prompt
    assert "- Experience: Experienced" in prompt


def test_render_history_empty():
    assert render_history([]) == ""


def test_system_prompts_per_variant():
    assert "wave emoji" in SYSTEM_PROMPTS["bid"]
    assert "under 80 words" in SYSTEM_PROMPTS["reply"]
    assert "first person" in SYSTEM_PROMPTS["answer"]
    assert system_prompt_for("bid") == SYSTEM_PROMPTS["bid"]


def test_custom_system_prompt_only_overrides_answers():
    config = AIConfig(api_key="k", system_prompt="Be brief.")
    assert system_prompt_for("answer", config) == "Be brief."
    assert system_prompt_for("bid", config) == SYSTEM_PROMPTS["bid"]
    assert system_prompt_for("reply", config) == SYSTEM_PROMPTS["reply"]
    assert system_prompt_for("answer", AIConfig(system_prompt="")) == SYSTEM_PROMPTS["answer"]


def test_default_system_prompt_mentions_dash_bullets():
    assert "bullet points with dashes" in DEFAULT_SYSTEM_PROMPT


def test_format_money():
    assert format_money(50) == "50"
    assert format_money(50.0) == "50"
    assert format_money(37.5) == "37.5"
    assert format_money(None) == "0"
