# bids/prompts.py

# Stored default for AISettings.system_prompt
DEFAULT_SYSTEM_PROMPT = (
    "You are an expert freelancer bid writer creating SHORT, SPECIFIC, WINNING bids.\n"
    "\n"
    "Rules:\n"
    "- First sentence ONLY: ONE friendly emoji (👋 or 🤝 or 💬)\n"
    "- Rest of bid: NO emojis, NO quotation marks\n"
    "- Use bullet points with dashes (-)\n"
    "- Keep it under 120 words\n"
    "- Be specific to their requirements\n"
    "- End with call to action to discuss"
)

SYSTEM_PROMPTS = {
    "bid": (
        "You are a top freelancer who wins most bids by making clients feel understood.\n"
        "\n"
        "WINNING BID STRUCTURE:\n"
        "\n"
        "1. OPENING - One line with wave emoji, show you read their project\n"
        "2. BULLET POINTS - 2-3 specific solutions for their requirements\n"
        "3. EXPERIENCE - One sentence about relevant work\n"
        "4. CALL TO ACTION - Invite them to discuss\n"
        "\n"
        "RULES:\n"
        "- Start with wave emoji only\n"
        "- Use bullet points with dashes, no other emojis\n"
        "- Reference specific things from their proposal\n"
        "- Keep under 100 words\n"
        "- No quotation marks anywhere\n"
        "- No Dear Client or formal greetings\n"
        "- Sound human, not like a template\n"
        "\n"
        "EXAMPLE:\n"
        "👋 I can build your e-commerce mobile app with the features you described.\n"
        "\n"
        "- Cross-platform React Native for iOS and Android\n"
        "- Offline cart that syncs when back online\n"
        "- Stripe payment integration with order notifications\n"
        "\n"
        "I built 3 similar apps last year. When works for a quick call?"
    ),
    "answer": (
        "You are an expert freelancer assistant helping to craft professional, persuasive "
        "responses to project screening questions.\n"
        "\n"
        "Your answers should be:\n"
        "- Concise yet comprehensive\n"
        "- Professional and confident\n"
        "- Tailored to the specific project requirements\n"
        "- Highlighting relevant skills and experience\n"
        "- Avoiding generic or templated responses\n"
        "- Written in first person\n"
        "- Demonstrating clear understanding of the client's needs\n"
        "\n"
        "Do not include greetings, signatures, or meta-commentary. "
        "Focus only on answering the question directly."
    ),
    "reply": (
        "You are helping a freelancer respond to client messages to win a project.\n"
        "\n"
        "RULES:\n"
        "- Be helpful, professional, and friendly\n"
        "- Answer any questions the client asks directly\n"
        "- Address any concerns they raise\n"
        "- Keep moving toward closing the deal\n"
        "- Keep replies concise (under 80 words)\n"
        "- Sound human and natural\n"
        "- No quotation marks\n"
        "- No formal greetings or sign-offs\n"
        "- If they ask about price/timeline, be flexible but reasonable\n"
        "- If they seem ready, suggest next steps (call, starting work, etc.)\n"
        "\n"
        "Goal: Win the project by building trust and showing you understand their needs."
    ),
}


def system_prompt_for(kind, config=None):
    """
    Returns the system instruction for a prompt variant ("bid", "answer", "reply").
    A custom prompt saved in the AI settings replaces the screening-answer default.
    """
    if kind == "answer" and config is not None and config.system_prompt:
        return config.system_prompt
    return SYSTEM_PROMPTS[kind]


def format_money(amount):
    """50.0 -> "50", 37.5 -> "37.5"."""
    if amount is None:
        return "0"
    amount = float(amount)
    if amount.is_integer():
        return str(int(amount))
    return f"{amount:.2f}".rstrip("0").rstrip(".")


def _skills_or(skills, fallback):
    return ", ".join(skills) if skills else fallback


def build_bid_prompt(project_title, proposal, profile):
    """
    Builds the user prompt for a first bid on a client's proposal.
    Title and proposal are embedded verbatim.
    """
    return f"""
PROJECT: {project_title}

CLIENT'S REQUIREMENTS:
{proposal}

MY CREDENTIALS:
- Name: {profile.name or "Professional Freelancer"}
- Skills: {_skills_or(profile.skills, "Relevant technical skills")}
- Experience: {profile.experience or "Experienced in similar projects"}
- Rate: ${format_money(profile.hourly_rate)}/hour
- About: {profile.bio or "Dedicated professional"}

---

Analyze this project and write a WINNING bid. Focus on:
1. What specific problem does the client want solved?
2. What exact deliverables do they need?
3. What concerns might they have?
4. How can I show I'm the RIGHT person for THIS project?

Write the bid now:"""


def build_answer_prompt(project, question, profile):
    budget = project.budget
    required_note = "(This is a required question)" if question.is_required else ""
    return f"""
PROJECT DETAILS:
Title: {project.title}
Description: {project.description}
Budget: ${format_money(budget.minimum)} - ${format_money(budget.maximum)} ({budget.currency})
Required Skills: {", ".join(project.skills)}
Project Type: {project.type}

YOUR PROFILE:
Skills: {", ".join(profile.skills)}
Experience: {profile.experience or "Not specified"}
Hourly Rate: ${format_money(profile.hourly_rate)}/hour
Bio: {profile.bio or "Not specified"}

QUESTION TO ANSWER:
{question.question}
{required_note}

Please provide a professional, compelling answer that:
1. Directly addresses the question
2. Highlights relevant skills and experience from the profile
3. Shows understanding of the project requirements
4. Is concise but comprehensive (2-4 paragraphs max)
5. Demonstrates enthusiasm and professionalism
6. Avoids generic or templated responses

Answer:"""


def render_history(history):
    if not history:
        return ""
    lines = [
        f"{'CLIENT' if entry.type == 'client' else 'ME'}: {entry.content}"
        for entry in history
    ]
    return "\nPREVIOUS CONVERSATION:\n" + "\n".join(lines)


def build_reply_prompt(project_title, proposal, initial_bid, client_reply, history, profile):
    return f"""
PROJECT: {project_title}

ORIGINAL PROPOSAL: {proposal}

MY INITIAL BID: {initial_bid or ""}
{render_history(history)}

CLIENT'S LATEST REPLY:
{client_reply}

MY PROFILE:
- Name: {profile.name or "Freelancer"}
- Skills: {_skills_or(profile.skills, "Various skills")}
- Experience: {profile.experience or "Experienced"}

Write my reply to continue the conversation and move closer to winning this project:"""
