"""
Client for the OpenAI-compatible chat completions gateway.

One request per call and no retries.  Upstream 429 and 402 are surfaced
to the caller with their own status; any other failure becomes a 500.
"""
from __future__ import annotations

import json
import logging
from typing import Any

import requests
from django.conf import settings

from clinic.exceptions import GatewayError

logger = logging.getLogger(__name__)

RATE_LIMITED = 'Rate limit exceeded. Please try again later.'
CREDITS_EXHAUSTED = 'AI credits exhausted. Please add funds.'


def chat(system: str, user: str, *, temperature: float = 0.3, max_tokens: int = 2000) -> str:
    """Send one system+user exchange and return the assistant's text."""
    api_key = settings.LLM_API_KEY
    if not api_key:
        raise GatewayError('LLM_API_KEY not configured', status_code=500)

    body = {
        'model': settings.LLM_MODEL,
        'messages': [
            {'role': 'system', 'content': system},
            {'role': 'user', 'content': user},
        ],
        'temperature': temperature,
        'max_tokens': max_tokens,
    }
    try:
        resp = requests.post(
            settings.LLM_GATEWAY_URL,
            json=body,
            headers={'Authorization': f'Bearer {api_key}'},
            timeout=settings.LLM_TIMEOUT,
        )
    except requests.RequestException as e:
        logger.error('AI gateway unreachable: %s', e)
        raise GatewayError(f'AI gateway unreachable: {e}', status_code=500)

    if resp.status_code == 429:
        raise GatewayError(RATE_LIMITED, status_code=429, code='rate_limited')
    if resp.status_code == 402:
        raise GatewayError(CREDITS_EXHAUSTED, status_code=402, code='credits_exhausted')
    if resp.status_code >= 400:
        logger.error('AI gateway error %s: %s', resp.status_code, resp.text[:500])
        raise GatewayError(f'AI API error: {resp.status_code}', status_code=500)

    try:
        return resp.json()['choices'][0]['message']['content'] or ''
    except ValueError:
        raise GatewayError('AI gateway returned a non-JSON body', status_code=500)
    except (KeyError, IndexError, TypeError):
        logger.warning('AI gateway returned no choices')
        return ''


def strip_fences(content: str) -> str:
    text = (content or '').strip()
    if text.startswith('```json'):
        text = text[7:]
    if text.startswith('```'):
        text = text[3:]
    if text.endswith('```'):
        text = text[:-3]
    return text.strip()


def parse_json(content: str, default: Any) -> Any:
    """Parse the model's JSON reply, falling back to ``default``."""
    try:
        return json.loads(strip_fences(content))
    except ValueError:
        logger.warning('could not parse AI response as JSON (%d chars)', len(content or ''))
        return default
