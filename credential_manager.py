# credential_manager.py

import getpass
import logging
import os
from dataclasses import dataclass

import keyring
from keyring.errors import KeyringError

from constants import ENV_PASSWORD, ENV_TOTP_SECRET, ENV_USERNAME, SERVICE_NAME
from exceptions import CredentialError
from otp import OneTimeCodeSource

logger = logging.getLogger(__name__)

STDIN_BUSY = "stdin carries the AWS CLI output; pass it with a flag, an environment variable or --device-url"


@dataclass(frozen=True)
class Credentials:
    username: str
    password: str
    otp: OneTimeCodeSource

    def __repr__(self):
        return f"Credentials(username={self.username!r}, password='***', otp={self.otp_mode})"

    @property
    def otp_mode(self):
        if self.otp.code:
            return "code"
        return "secret" if self.otp.secret else "prompt"


class CredentialManager:
    """Resolve credentials: command line, then environment, then keyring, then an interactive prompt."""

    def __init__(self, use_keyring=True, update_password=False, environ=None, prompt=input, secret_prompt=None):
        self.use_keyring = use_keyring
        self.update_password = update_password
        self.environ = os.environ if environ is None else environ
        self.prompt = prompt
        self.secret_prompt = secret_prompt or getpass.getpass

    def get_credentials(self, username=None, password=None, totp_secret=None, totp_code=None, allow_prompt=True):
        """Build the credential bundle.

        allow_prompt must be False when the device URL is read from stdin: the
        same stream cannot also answer interactive prompts.
        """
        username = self._resolve("username", username, ENV_USERNAME, allow_prompt, secret=False)
        password = self._resolve("password", password, ENV_PASSWORD, allow_prompt, secret=True)

        if totp_code:
            logger.info("Using TOTP code from command line")
        elif totp_secret:
            logger.info("Using TOTP secret from command line")
        elif self.environ.get(ENV_TOTP_SECRET):
            totp_secret = self.environ[ENV_TOTP_SECRET]
            logger.info("Using TOTP secret from environment variable")
        elif not allow_prompt:
            raise CredentialError(f"no TOTP secret or code given and {STDIN_BUSY}")
        else:
            logger.info("No TOTP secret provided - will prompt for TOTP code interactively")

        otp = OneTimeCodeSource(code=totp_code or None, secret=totp_secret or None)
        return Credentials(username=username, password=password, otp=otp)

    def _resolve(self, name, value, env_var, allow_prompt, secret):
        if value:
            logger.info(f"Using {name} from command line")
            return value

        forced = secret and self.update_password
        if not forced:
            value = self.environ.get(env_var)
            if value:
                logger.info(f"Using {name} from environment variable {env_var}")
                return value

            value = self._keyring_get(name)
            if value:
                logger.info(f"Using {name} from keyring")
                return value

        if not allow_prompt:
            raise CredentialError(f"no {name} given and {STDIN_BUSY}")

        ask = self.secret_prompt if secret else self.prompt
        try:
            value = ask(f"Enter AWS SSO {name}: ").strip()
        except EOFError as e:
            raise CredentialError(f"failed to read {name}: no input available") from e
        if not value:
            raise CredentialError(f"{name} is empty")

        self._keyring_set(name, value)
        if forced:
            logger.info("Password updated successfully.")
        return value

    def _keyring_get(self, name):
        if not self.use_keyring:
            return None
        try:
            return keyring.get_password(SERVICE_NAME, name)
        except KeyringError as e:
            logger.warning(f"Keyring unavailable, cannot read {name}: {e}")
            return None

    def _keyring_set(self, name, value):
        if not self.use_keyring:
            return
        try:
            keyring.set_password(SERVICE_NAME, name, value)
        except KeyringError as e:
            logger.warning(f"Keyring unavailable, {name} not stored: {e}")
