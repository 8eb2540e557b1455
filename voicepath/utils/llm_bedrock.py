"""Bedrock client helpers.

Utilities to initialize the AWS Bedrock runtime client and LangChain chat
models. Calls are made exactly once: the boto client is configured with a
single attempt and throttling is surfaced to the caller as
:class:`~voicepath.errors.LLMRateLimitError`.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional, Tuple

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError
from flask import current_app, has_app_context
from langchain_aws import ChatBedrock
from langchain_core.prompts import PromptTemplate

from voicepath.config import Config
from voicepath.errors import LLMError, LLMNotConfiguredError, LLMRateLimitError

logger = logging.getLogger(__name__)

_THROTTLING_CODES = ("ThrottlingException", "TooManyRequestsException")
_THROTTLING_STATUS = 429


def _setting(name: str) -> Any:
    """Read a setting from the active Flask app, falling back to ``Config``."""
    if has_app_context() and name in current_app.config:
        return current_app.config[name]
    return getattr(Config, name)


def get_bedrock_runtime_client():
    """Return a configured boto3 Bedrock Runtime client.

    Uses explicit credentials from Config if provided, else falls back
    to standard AWS credential resolution (env vars, profiles, etc.).
    """
    kwargs: Dict[str, Any] = {"region_name": _setting("AWS_REGION")}

    access_key = _setting("AWS_ACCESS_KEY_ID")
    secret_key = _setting("AWS_SECRET_ACCESS_KEY")
    if access_key and secret_key:
        kwargs.update(
            dict(
                aws_access_key_id=access_key,
                aws_secret_access_key=secret_key,
            )
        )
        session_token = _setting("AWS_SESSION_TOKEN")
        if session_token:
            kwargs["aws_session_token"] = session_token

    kwargs["config"] = BotoConfig(
        connect_timeout=_setting("BEDROCK_CONNECT_TIMEOUT_SECONDS"),
        read_timeout=_setting("BEDROCK_READ_TIMEOUT_SECONDS"),
        retries={"mode": "standard", "max_attempts": 1},
    )

    return boto3.client("bedrock-runtime", **kwargs)


def is_bedrock_configured() -> bool:
    """Best-effort check whether Bedrock is likely configured.

    We avoid making a network call. We consider it configured if:
    - An AWS region is set, and
    - Either explicit access keys are provided via Config, or
      boto3 can resolve credentials from the default chain.
    """
    if not _setting("AWS_REGION"):
        return False
    if _setting("AWS_ACCESS_KEY_ID") and _setting("AWS_SECRET_ACCESS_KEY"):
        return True
    try:
        return boto3.Session().get_credentials() is not None
    except BotoCoreError:
        return False


def _resolve_logger() -> logging.Logger:
    """Return Flask app logger when available, else module logger."""
    if has_app_context():
        return current_app.logger
    return logger


def _extract_error_details(exc: Exception) -> Tuple[Optional[str], Optional[int]]:
    code: Optional[str] = None
    status: Optional[int] = None
    response = exc.response if isinstance(exc, ClientError) else getattr(exc, "response", None)
    if isinstance(response, Mapping):
        error_body = response.get("Error", {}) or {}
        code = error_body.get("Code")
        metadata = response.get("ResponseMetadata", {}) or {}
        status = metadata.get("HTTPStatusCode")
    return code, status


def is_rate_limited(exc: Exception) -> bool:
    code, status = _extract_error_details(exc)
    if code in _THROTTLING_CODES or status == _THROTTLING_STATUS:
        return True
    lowered = str(exc).lower()
    return "too many requests" in lowered or "throttl" in lowered


def get_chat_llm(model_id: Optional[str] = None, model_kwargs: Optional[Dict[str, Any]] = None) -> ChatBedrock:
    """Return a configured ChatBedrock model (defaults to ``BEDROCK_MODEL_ID``).

    model_kwargs will be passed to the underlying provider (temperature, max_tokens, etc.).
    """
    if not is_bedrock_configured():
        raise LLMNotConfiguredError("AI service is not configured")

    client = get_bedrock_runtime_client()
    return ChatBedrock(
        model=model_id or _setting("BEDROCK_MODEL_ID"),
        client=client,
        model_kwargs=model_kwargs or {},
    )


def response_text(raw: Any) -> str:
    """Normalize a chain result (message, dict or str) to plain text."""
    text = raw
    if hasattr(raw, "content"):
        text = raw.content
    elif isinstance(raw, dict) and "content" in raw:
        text = raw["content"]
    if isinstance(text, list):
        # Content blocks: [{"type": "text", "text": "..."}]
        text = "".join(
            part.get("text", "") if isinstance(part, dict) else str(part) for part in text
        )
    if not isinstance(text, str):
        text = str(text)
    return text


def invoke_prompt(
    template: str,
    variables: Dict[str, Any],
    *,
    model_id: Optional[str] = None,
    temperature: float = 0.7,
    max_tokens: Optional[int] = None,
    component: str = "LLM",
) -> str:
    """Render ``template`` with ``variables``, call the model once, return its text.

    Raises ``LLMRateLimitError`` on throttling and ``LLMError`` for any other
    provider failure.
    """
    log = _resolve_logger()
    llm = get_chat_llm(
        model_id=model_id,
        model_kwargs={
            "temperature": temperature,
            "max_tokens": max_tokens or _setting("LLM_MAX_TOKENS"),
        },
    )
    chain = PromptTemplate.from_template(template) | llm
    try:
        raw = chain.invoke(variables)
    except (ClientError, BotoCoreError) as exc:
        if is_rate_limited(exc):
            log.warning(f"[{component}] Bedrock request throttled: {exc}")
            raise LLMRateLimitError() from exc
        log.error(f"[{component}] Bedrock request failed: {exc}")
        raise LLMError("AI service request failed", details=str(exc)) from exc
    except ValueError as exc:
        # langchain-aws wraps provider errors in ValueError
        if is_rate_limited(exc):
            log.warning(f"[{component}] Bedrock request throttled: {exc}")
            raise LLMRateLimitError() from exc
        log.error(f"[{component}] Bedrock request failed: {exc}")
        raise LLMError("AI service request failed", details=str(exc)) from exc

    text = response_text(raw)
    log.debug(f"[{component}] Raw LLM output: {text[:500]}")
    return text
