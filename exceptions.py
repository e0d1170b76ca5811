# exceptions.py


class SSOLoginError(Exception):
    """Base class for every failure reported by the login tool."""


class ConfigurationError(SSOLoginError):
    """Invalid options, detected before any browser interaction."""


class CredentialError(SSOLoginError):
    """A credential could not be resolved."""


class ExtractionError(SSOLoginError):
    """No device URL found in the AWS CLI output."""


class BrowserError(Exception):
    """Raised by the browser driver when a browser command fails."""


class ElementNotFoundError(BrowserError):
    """No element matched the selector before the timeout ran out."""


class SessionError(SSOLoginError):
    """Launching, connecting to or navigating the browser failed."""

    def __init__(self, stage, cause):
        self.stage = stage
        self.cause = cause
        super().__init__(f"failed to {stage}: {cause}")


class StepError(SSOLoginError):
    """A login step failed. Carries the step identity and the underlying cause."""

    def __init__(self, description, selector, cause):
        self.description = description
        self.selector = selector
        self.cause = cause
        outcome = "not found" if isinstance(cause, ElementNotFoundError) else "failed"
        super().__init__(f"{description} {outcome} (selector {selector}): {cause}")
