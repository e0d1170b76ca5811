# main.py

import argparse
import logging
import sys

from aws_cli_utils import AWSCLIUtils, find_device_url, forward_remaining
from config import LoginOptions, SelectorSet, load_selectors, validate_device_url, validate_options
from constants import DEFAULT_INSPECT_DELAY, DEFAULT_TIMEOUT, DEVICE_URL_PATTERN
from credential_manager import CredentialManager
from exceptions import SSOLoginError
from login_flow import run_login

logger = logging.getLogger(__name__)

DESCRIPTION = """Automate AWS SSO login by reading output from 'aws sso login --no-browser'
and filling in credentials through a browser.

  aws sso login --sso-session <session> --no-browser | aws-sso-login

Credentials are taken from command line flags, then environment variables
(AWSSSOLOGIN_USERNAME, AWSSSOLOGIN_PASSWORD, AWSSSOLOGIN_TOTP_SECRET), then
the system keyring, then interactive prompts. Prompts are only available when
stdin is not carrying the AWS CLI output (--device-url, --profile or --sso-session).
"""


def parse_args(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="aws-sso-login", description=DESCRIPTION, formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument("-u", "--username", help="AWS SSO username")
    parser.add_argument("-p", "--password", help="AWS SSO password")
    parser.add_argument("--totp-secret", help="TOTP secret key (base32) used to generate the 2FA code")
    parser.add_argument("--totp-code", help="6-digit TOTP code to submit as is")

    source = parser.add_mutually_exclusive_group()
    source.add_argument("--device-url", help="AWS SSO device URL (stdin is ignored when given)")
    source.add_argument("--profile", help="Run 'aws sso login --no-browser' for this profile instead of reading stdin")
    source.add_argument("--sso-session", help="Run 'aws sso login --no-browser' for this SSO session")

    parser.add_argument("--show-browser", action="store_true", help="Show the browser window (headless by default)")
    parser.add_argument(
        "--timeout", type=float, default=DEFAULT_TIMEOUT, help=f"Seconds to wait for each page element (default: {DEFAULT_TIMEOUT})"
    )
    parser.add_argument(
        "--inspect-delay",
        type=float,
        default=DEFAULT_INSPECT_DELAY,
        help=f"Seconds to keep a visible browser open after a failure (default: {DEFAULT_INSPECT_DELAY})",
    )
    parser.add_argument("--selectors", help="JSON file overriding page element selectors")
    parser.add_argument("--update-password", action="store_true", help="Prompt for the password and store it")
    parser.add_argument("--no-keyring", action="store_true", help="Do not read or store credentials in the keyring")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging and tracebacks")
    return parser.parse_args(argv)


def build_options(args):
    selectors = load_selectors(args.selectors) if args.selectors else SelectorSet()
    options = LoginOptions(
        headless=not args.show_browser,
        timeout=args.timeout,
        inspect_delay=args.inspect_delay,
        selectors=selectors,
    )
    validate_options(options)
    if args.device_url:
        validate_device_url(args.device_url, DEVICE_URL_PATTERN)
    return options


def run(args, stdin=None):
    """Resolve everything, run the browser login and hand the rest of the AWS CLI output back."""
    stdin = stdin or sys.stdin
    logger.info("Starting AWS SSO login automation...")
    options = build_options(args)

    reads_stdin = not (args.device_url or args.profile or args.sso_session)
    manager = CredentialManager(use_keyring=not args.no_keyring, update_password=args.update_password)
    credentials = manager.get_credentials(
        username=args.username,
        password=args.password,
        totp_secret=args.totp_secret,
        totp_code=args.totp_code,
        allow_prompt=not reads_stdin,
    )
    logger.debug(f"Resolved {credentials!r}")

    if args.device_url or reads_stdin:
        if args.device_url:
            device_url = args.device_url
            logger.info(f"Using device URL from command line: {device_url}")
        else:
            logger.info("Reading AWS SSO output from stdin to find device URL...")
            device_url = find_device_url(stdin, DEVICE_URL_PATTERN)

        result = run_login(device_url, credentials, options)
        if not result.success:
            raise result.error
        if reads_stdin:
            forward_remaining(stdin)
        return

    process = AWSCLIUtils.start_sso_login(profile=args.profile, sso_session=args.sso_session)
    try:
        device_url = find_device_url(process.stdout, DEVICE_URL_PATTERN)
        result = run_login(device_url, credentials, options)
        if not result.success:
            raise result.error
        if AWSCLIUtils.finish_sso_login(process) != 0:
            raise SSOLoginError("'aws sso login' did not complete")
    finally:
        AWSCLIUtils.stop_sso_login(process)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(levelname)s - %(message)s",
    )

    try:
        run(args)
        logger.info("AWS SSO login completed successfully!")
        return 0  # Success exit code
    except SSOLoginError as e:
        logger.error(f"An error occurred: {str(e)}")
        if args.debug:
            logger.exception("Detailed traceback:")
        return 1  # Failure exit code


if __name__ == "__main__":
    sys.exit(main())
