# login_flow.py

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from browser_utils import SeleniumBrowser
from config import validate_options
from constants import DEFAULT_TIMEOUT
from exceptions import BrowserError, CredentialError, SessionError, SSOLoginError, StepError
from otp import generate_totp

logger = logging.getLogger(__name__)


class LoginState(Enum):
    START = "start"
    BROWSER_LAUNCHED = "browser launched"
    SESSION_CONNECTED = "session connected"
    PAGE_OPENED = "page opened"
    USERNAME_SUBMITTED = "username submitted"
    PASSWORD_SUBMITTED = "password submitted"
    ONE_TIME_CODE_SUBMITTED = "one-time code submitted"
    FIRST_CONSENT_GRANTED = "first consent granted"
    SECOND_CONSENT_GRANTED = "second consent granted"
    SUCCESS_VERIFIED = "success verified"
    FAILED = "failed"


class StepKind(Enum):
    FILL_AND_SUBMIT = "fill and submit"
    CLICK = "click"
    VERIFY_PRESENCE = "verify presence"


class StepValue(Enum):
    """Which credential a fill step types."""

    USERNAME = "username"
    PASSWORD = "password"
    ONE_TIME_CODE = "one-time code"


@dataclass(frozen=True)
class Step:
    name: str
    kind: StepKind
    selector: str
    description: str
    reached: LoginState
    timeout: float = DEFAULT_TIMEOUT
    value: Optional[StepValue] = None


def build_steps(selectors, timeout=DEFAULT_TIMEOUT):
    """The fixed page sequence of the AWS SSO device login, in order."""
    fill, click, verify = StepKind.FILL_AND_SUBMIT, StepKind.CLICK, StepKind.VERIFY_PRESENCE
    return (
        Step("username", fill, selectors.username, "username field", LoginState.USERNAME_SUBMITTED,
             timeout, StepValue.USERNAME),
        Step("password", fill, selectors.password, "password field", LoginState.PASSWORD_SUBMITTED,
             timeout, StepValue.PASSWORD),
        Step("totp", fill, selectors.totp, "TOTP field", LoginState.ONE_TIME_CODE_SUBMITTED,
             timeout, StepValue.ONE_TIME_CODE),
        Step("confirm", click, selectors.confirm, "first Allow button", LoginState.FIRST_CONSENT_GRANTED, timeout),
        Step("allow", click, selectors.allow, "second Allow button", LoginState.SECOND_CONSENT_GRANTED, timeout),
        Step("success", verify, selectors.success, "success indicator", LoginState.SUCCESS_VERIFIED, timeout),
    )


@dataclass
class LoginResult:
    state: LoginState
    last_state: LoginState
    error: Optional[SSOLoginError] = None
    message: Optional[str] = None

    @property
    def success(self):
        return self.state is LoginState.SUCCESS_VERIFIED


class LoginAutomator:
    """Drive one browser session through the device login pages.

    Steps run strictly in order and the first failure ends the run. The
    browser is closed exactly once, whatever happened.
    """

    def __init__(self, options, browser_factory=SeleniumBrowser, generate=generate_totp, prompt=input,
                 sleep=time.sleep, clock=time.time):
        self.options = options
        self.browser_factory = browser_factory
        self.generate = generate
        self.prompt = prompt
        self.sleep = sleep
        self.clock = clock
        self.steps = build_steps(options.selectors, options.timeout)

    def run(self, device_url, credentials):
        validate_options(self.options)

        browser = self.browser_factory()
        state = LoginState.START
        result = None
        try:
            for state in self._open_session(browser, device_url):
                logger.debug(f"State: {state.value}")

            for step in self.steps:
                message = self._execute(browser, step, credentials)
                state = step.reached
                logger.debug(f"State: {state.value}")

            logger.info(f"Success page found with text: {message}")
            result = LoginResult(state=state, last_state=state, message=message)
        except SSOLoginError as e:
            logger.error(f"Login failed after '{state.value}': {e}")
            result = LoginResult(state=LoginState.FAILED, last_state=state, error=e)
        finally:
            self._teardown(browser, failed=result is None or not result.success)
        return result

    def _open_session(self, browser, device_url):
        if self.options.headless:
            logger.info("Running browser in headless mode")
        else:
            logger.info("Browser will be visible")

        try:
            endpoint = browser.launch(headless=self.options.headless)
        except BrowserError as e:
            raise SessionError("launch browser", e) from e
        yield LoginState.BROWSER_LAUNCHED

        try:
            browser.connect(endpoint)
        except BrowserError as e:
            raise SessionError(f"connect to browser at {endpoint}", e) from e
        yield LoginState.SESSION_CONNECTED

        logger.info(f"Opening device URL: {device_url}")
        try:
            browser.open(device_url)
        except BrowserError as e:
            raise SessionError(f"open page {device_url}", e) from e
        yield LoginState.PAGE_OPENED

    def _execute(self, browser, step, credentials):
        logger.info(f"Looking for {step.description}...")
        try:
            element = browser.locate(step.selector, step.timeout, clickable=step.kind is StepKind.CLICK)
            logger.info(f"Found {step.description}")

            if step.kind is StepKind.FILL_AND_SUBMIT:
                browser.set_value(element, self._value_for(step, credentials))
                logger.info(f"Submitting {step.description}...")
                browser.submit(element)
            elif step.kind is StepKind.CLICK:
                browser.click(element)
                logger.info(f"Clicked {step.description}")
            else:
                return browser.read_text(element)
        except (BrowserError, CredentialError) as e:
            raise StepError(step.description, step.selector, e) from e
        return None

    def _value_for(self, step, credentials):
        if step.value is StepValue.USERNAME:
            return credentials.username
        if step.value is StepValue.PASSWORD:
            return credentials.password
        if step.value is StepValue.ONE_TIME_CODE:
            # Only reached once the TOTP field is on screen
            return credentials.otp.acquire(generate=self.generate, prompt=self.prompt, clock=self.clock)
        raise ValueError(f"step '{step.name}' has no value to fill")

    def _teardown(self, browser, failed):
        try:
            if failed and not self.options.headless and self.options.inspect_delay > 0:
                logger.info(f"Keeping the browser open for {self.options.inspect_delay}s to inspect the failed page...")
                self.sleep(self.options.inspect_delay)
        finally:
            try:
                browser.close()
            except Exception as e:
                logger.warning(f"Failed to close browser: {e}")


def run_login(device_url, credentials, options, **kwargs):
    return LoginAutomator(options, **kwargs).run(device_url, credentials)
