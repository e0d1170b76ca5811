# config.py

import json
import logging
from dataclasses import dataclass, field, fields, replace

from constants import (
    ALLOW_SELECTOR,
    CONFIRM_SELECTOR,
    DEFAULT_INSPECT_DELAY,
    DEFAULT_TIMEOUT,
    DEVICE_URL_PATTERN,
    PASSWORD_SELECTOR,
    SUCCESS_SELECTOR,
    TOTP_SELECTOR,
    USERNAME_SELECTOR,
)
from exceptions import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SelectorSet:
    """Selectors for each element the login flow touches."""

    username: str = USERNAME_SELECTOR
    password: str = PASSWORD_SELECTOR
    totp: str = TOTP_SELECTOR
    confirm: str = CONFIRM_SELECTOR
    allow: str = ALLOW_SELECTOR
    success: str = SUCCESS_SELECTOR


@dataclass(frozen=True)
class LoginOptions:
    headless: bool = True
    timeout: float = DEFAULT_TIMEOUT
    inspect_delay: float = DEFAULT_INSPECT_DELAY
    selectors: SelectorSet = field(default_factory=SelectorSet)


def load_selectors(path):
    """Load selector overrides from a JSON object file, keeping defaults for missing keys."""
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"cannot read selectors file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"selectors file {path} must contain a JSON object")

    known = {f.name for f in fields(SelectorSet)}
    unknown = set(data) - known
    if unknown:
        raise ConfigurationError(f"unknown selector keys in {path}: {', '.join(sorted(unknown))}")

    for key, value in data.items():
        if not isinstance(value, str) or not value.strip():
            raise ConfigurationError(f"selector '{key}' must be a non-empty string")

    logger.info(f"Loaded {len(data)} selector override(s) from {path}")
    return replace(SelectorSet(), **data)


def validate_options(options):
    if options.timeout < 1:
        raise ConfigurationError(f"timeout must be at least 1 second, got: {options.timeout}")
    if options.inspect_delay < 0:
        raise ConfigurationError(f"inspect delay cannot be negative, got: {options.inspect_delay}")


def validate_device_url(url, pattern=DEVICE_URL_PATTERN):
    if not pattern.fullmatch(url):
        raise ConfigurationError(f"URL does not match expected AWS SSO device URL pattern: {url}")
    return url
