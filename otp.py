# otp.py

import logging
import re
import time
from dataclasses import dataclass
from typing import Optional

import pyotp

from exceptions import ConfigurationError, CredentialError

logger = logging.getLogger(__name__)

CODE_PATTERN = re.compile(r"\d{6}")


def generate_totp(secret, for_time):
    """Return the 6-digit TOTP code for a base32 secret at a unix timestamp (30 second steps)."""
    return pyotp.TOTP(secret).at(for_time)


def normalize_secret(secret):
    return secret.replace(" ", "").replace("-", "").upper()


@dataclass(frozen=True)
class OneTimeCodeSource:
    """Where the one-time code comes from: a literal code, a shared secret, or the console."""

    code: Optional[str] = None
    secret: Optional[str] = None

    def __post_init__(self):
        if self.code and self.secret:
            raise ConfigurationError("provide either a TOTP code or a TOTP secret, not both")
        if self.code and not CODE_PATTERN.fullmatch(self.code):
            raise ConfigurationError("TOTP code must be exactly 6 digits")
        if self.secret:
            object.__setattr__(self, "secret", normalize_secret(self.secret))

    @property
    def interactive(self):
        return not self.code and not self.secret

    def acquire(self, generate=generate_totp, prompt=input, clock=time.time):
        """Produce the code. Call this right before the code is typed: generated codes expire quickly."""
        if self.code:
            logger.info("Using TOTP code supplied on the command line")
            return self.code

        if self.secret:
            logger.info("Generating TOTP code from secret...")
            try:
                return generate(self.secret, clock())
            except ValueError as e:
                raise CredentialError(f"failed to generate TOTP code: {e}") from e

        try:
            code = prompt("Enter the code from your authenticator app: ").strip()
        except EOFError as e:
            raise CredentialError("failed to read TOTP code: no input available") from e
        if not code:
            raise CredentialError("TOTP code is empty")
        return code
