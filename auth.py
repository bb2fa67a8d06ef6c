#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Authentication Module for Delete GitHub Branches

Contains:
- GitHub token resolution (explicit value, environment, 1Password)
- 1Password SDK integration with `op` CLI fallback
"""

import asyncio
import os
import subprocess
from typing import TypeAlias

from onepassword.client import Client as OnePasswordClient

from logger_config import get_logger
from version import __version__

logger = get_logger(__name__)

# Type aliases for clarity
SecretValue: TypeAlias = str | None

GITHUB_TOKEN_ENV = 'GITHUB_TOKEN'


def load_secret_with_fallback(secret_reference: str, secret_name: str) -> SecretValue:
    """
    Load a secret from 1Password using the SDK with CLI fallback.

    Args:
        secret_reference: The 1Password secret reference (``op://vault/item/field``)
        secret_name: Human-readable name for the secret (for log messages)

    Returns:
        The secret string if successful, None if both methods failed
    """
    try:
        secret = get_secret_from_1password(secret_reference, secret_name)
        logger.info(f"✅ {secret_name} loaded from 1Password SDK.")
        return secret
    except Exception as e:
        logger.debug(f"1Password SDK unavailable for {secret_name}: {e}")

    logger.info(f"Falling back to 1Password CLI for {secret_name}...")
    try:
        secret = subprocess.check_output(
            ['op', 'read', secret_reference], encoding='utf-8'
        ).strip()
    except (OSError, subprocess.CalledProcessError) as cli_error:
        logger.error(f"Could not read {secret_name} from 1Password CLI: {cli_error}")
        return None

    if not secret:
        logger.error(f"1Password CLI returned an empty {secret_name}")
        return None
    logger.info(f"✅ {secret_name} loaded from 1Password CLI.")
    return secret


def get_secret_from_1password(secret_reference: str, secret_type: str = "GitHub token") -> str:
    """
    Retrieve a secret from 1Password using the SDK.

    Requires a service account token in ``OP_SERVICE_ACCOUNT_TOKEN``.

    Raises:
        ValueError: If OP_SERVICE_ACCOUNT_TOKEN is not set
        RuntimeError: If the SDK cannot resolve the reference
    """
    service_token = os.environ.get('OP_SERVICE_ACCOUNT_TOKEN')
    if not service_token:
        raise ValueError("OP_SERVICE_ACCOUNT_TOKEN environment variable not set. Required for 1Password SDK authentication.")

    async def _get_secret() -> str:
        client = await OnePasswordClient.authenticate(
            auth=service_token,
            integration_name="Delete GitHub Branches",
            integration_version=__version__
        )
        secret = await client.secrets.resolve(secret_reference)
        if not secret:
            raise ValueError(f"Secret reference '{secret_reference}' resolved to empty value")
        return secret.strip()

    try:
        return asyncio.run(_get_secret())
    except Exception as e:
        raise RuntimeError(f"Failed to retrieve {secret_type} from 1Password: {type(e).__name__}: {e}") from e


def resolve_token(token: str | None = None, secret_reference: str | None = None) -> SecretValue:
    """
    Resolve the GitHub token.

    Priority:
    1. Explicit ``token`` (``--token`` flag or config file)
    2. GITHUB_TOKEN environment variable
    3. 1Password ``secret_reference`` (SDK, then `op` CLI)

    Returns:
        The token, or None if no source provided one
    """
    if token:
        return token

    env_token = os.environ.get(GITHUB_TOKEN_ENV)
    if env_token:
        logger.debug(f"Using token from {GITHUB_TOKEN_ENV}")
        return env_token

    if secret_reference:
        return load_secret_with_fallback(secret_reference, "GitHub token")

    return None
