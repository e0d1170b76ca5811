# constants.py

import re

# Default selectors for the AWS access portal sign-in and device consent pages.
# Selectors starting with "/" or "(" are XPath, everything else is CSS.
USERNAME_SELECTOR = '//*[@id="awsui-input-0"]'
PASSWORD_SELECTOR = '//*[@id="awsui-input-1"]'
TOTP_SELECTOR = '//*[@id="awsui-input-2"]'
CONFIRM_SELECTOR = "#cli_verification_btn"
ALLOW_SELECTOR = "[data-testid='allow-access-button']"
SUCCESS_SELECTOR = "[data-analytics-alert='success']"

DEFAULT_TIMEOUT = 20  # seconds, per step
DEFAULT_INSPECT_DELAY = 30  # seconds, visible browser only

SERVICE_NAME = "aws_sso_login"

ENV_USERNAME = "AWSSSOLOGIN_USERNAME"
ENV_PASSWORD = "AWSSSOLOGIN_PASSWORD"
ENV_TOTP_SECRET = "AWSSSOLOGIN_TOTP_SECRET"

DEVICE_URL_PATTERN = re.compile(r"https://[A-Za-z0-9-]+\.awsapps\.com/start/#/device\?user_code=[A-Z0-9-]+")
