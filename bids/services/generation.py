# bids/services/generation.py
import logging

from bids.errors import CompletionError, GenerationError, kind_for_status
from bids.postprocess import score_confidence, strip_quotes, suggest_improvements
from bids.prompts import (
    build_answer_prompt,
    build_bid_prompt,
    build_reply_prompt,
    system_prompt_for,
)
from bids.schemas import GeneratedAnswer
from bids.services import llm

logger = logging.getLogger(__name__)

BID_MAX_TOKENS = 1000
ANSWER_MAX_TOKENS = 1000
REPLY_MAX_TOKENS = 500


def _require_api_key(config):
    if not config.api_key:
        raise GenerationError.configuration("API key is required")


def _call(config, kind, user_prompt, default_max_tokens):
    """Runs one completion and maps every failure onto a GenerationError."""
    max_tokens = config.max_tokens or default_max_tokens
    try:
        return llm.complete(config, system_prompt_for(kind, config), user_prompt, max_tokens)
    except CompletionError as e:
        raise GenerationError(
            e.message or "LLM provider error",
            kind_for_status(e.status),
            e.status or 500,
        ) from e
    except Exception as e:
        logger.exception("Unexpected error while generating %s", kind)
        raise GenerationError(str(e) or "Unknown error occurred") from e


def generate_bid(config, profile, project_title, proposal):
    _require_api_key(config)
    if not (proposal or "").strip():
        raise GenerationError.validation("Proposal is required")

    prompt = build_bid_prompt(project_title, proposal, profile)
    raw = _call(config, "bid", prompt, BID_MAX_TOKENS)
    return strip_quotes(raw)


def generate_answers(config, profile, project, single_question=None):
    """
    Answers the project's screening questions one at a time, in order.
    Any failure aborts the batch; no partial list is returned.
    """
    _require_api_key(config)
    questions = [single_question] if single_question is not None else list(project.questions)

    answers = []
    for question in questions:
        prompt = build_answer_prompt(project, question, profile)
        text = _call(config, "answer", prompt, ANSWER_MAX_TOKENS).strip()
        answers.append(
            GeneratedAnswer(
                question_id=question.id,
                question=question.question,
                answer=text,
                confidence=score_confidence(text, profile),
                suggestions=suggest_improvements(text, profile),
            )
        )
    logger.info("Generated %d screening answer(s) for %r", len(answers), project.title)
    return answers


def generate_reply(config, profile, project_title, proposal, initial_bid, client_reply, history):
    _require_api_key(config)
    if not (client_reply or "").strip():
        raise GenerationError.validation("Client reply is required")

    prompt = build_reply_prompt(project_title, proposal, initial_bid, client_reply, history, profile)
    raw = _call(config, "reply", prompt, REPLY_MAX_TOKENS)
    return strip_quotes(raw)
