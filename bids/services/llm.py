# bids/services/llm.py
"""
Chat-completion adapter. One request in, the first completion's text out.

Clients are built per call from the request's AIConfig snapshot; nothing is
cached at module level.
"""
import logging
import time

import anthropic
import openai
from anthropic import Anthropic
from openai import OpenAI

from bids.errors import CompletionError
from bids.schemas import DEFAULT_ANTHROPIC_MODEL, DEFAULT_MODEL, DEFAULT_TEMPERATURE

logger = logging.getLogger(__name__)

PROVIDERS = ("openai", "anthropic", "custom")


def _openai_complete(config, system_prompt, user_prompt, max_tokens, temperature):
    client = OpenAI(api_key=config.api_key, base_url=config.base_url or None)
    resp = client.chat.completions.create(
        model=config.model or DEFAULT_MODEL,
        temperature=temperature,
        max_tokens=max_tokens,
        messages=[
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ],
    )
    if not resp.choices:
        return ""
    return resp.choices[0].message.content or ""


def _anthropic_complete(config, system_prompt, user_prompt, max_tokens, temperature):
    client = Anthropic(api_key=config.api_key)
    resp = client.messages.create(
        model=config.model or DEFAULT_ANTHROPIC_MODEL,
        temperature=temperature,
        max_tokens=max_tokens,
        system=system_prompt,
        messages=[{"role": "user", "content": user_prompt}],
    )
    for block in resp.content or []:
        text = getattr(block, "text", None)
        if text is not None:
            return text
    return ""


def complete(config, system_prompt, user_prompt, max_tokens):
    """
    Sends one system + user exchange to the configured provider.

    Raises CompletionError carrying the provider's HTTP status (when it has one)
    for any SDK-level failure. Other exceptions propagate unchanged.
    """
    provider = config.provider if config.provider in PROVIDERS else "openai"
    temperature = DEFAULT_TEMPERATURE if config.temperature is None else config.temperature
    started = time.monotonic()

    try:
        if provider == "anthropic":
            text = _anthropic_complete(config, system_prompt, user_prompt, max_tokens, temperature)
        else:
            text = _openai_complete(config, system_prompt, user_prompt, max_tokens, temperature)
    except (openai.APIError, anthropic.APIError) as e:
        status = getattr(e, "status_code", None)
        logger.warning("%s completion failed (status=%s): %s", provider, status, e)
        raise CompletionError(getattr(e, "message", None) or str(e), status=status, provider=provider) from e

    logger.info(
        "%s completion ok model=%s latency_ms=%d chars=%d",
        provider,
        config.model or DEFAULT_MODEL,
        int((time.monotonic() - started) * 1000),
        len(text),
    )
    return text
