# aws_cli_utils.py

import logging
import subprocess
import sys
import threading

from constants import DEVICE_URL_PATTERN
from exceptions import ExtractionError

logger = logging.getLogger(__name__)


def find_device_url(stream, pattern=DEVICE_URL_PATTERN):
    """Read lines until one contains the device URL and return it. Later lines stay unread."""
    for line in iter(stream.readline, ""):
        logger.debug(f"AWS CLI output: {line.rstrip()}")
        match = pattern.search(line)
        if match:
            logger.info(f"Device URL found: {match.group(0)}")
            return match.group(0)
    raise ExtractionError("device URL not found in AWS SSO output")


def forward_remaining(stream, out=None):
    """Copy the lines nobody consumed to stdout so the AWS CLI messages are not lost."""
    out = out or sys.stdout
    for line in iter(stream.readline, ""):
        out.write(line)
        out.flush()


class AWSCLIUtils:
    @staticmethod
    def start_sso_login(profile=None, sso_session=None):
        """Run 'aws sso login --no-browser' and return the process, stdout left for the caller to read."""
        command = ["aws", "sso", "login", "--no-browser"]
        if sso_session:
            command += ["--sso-session", sso_session]
        elif profile:
            command += ["--profile", profile]
        logger.info(f"Executing '{' '.join(command)}'")

        try:
            process = subprocess.Popen(
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                bufsize=1,
            )
        except OSError as e:
            raise ExtractionError(f"failed to run aws CLI: {e}") from e

        # Drain stderr so the CLI never blocks on a full pipe
        def read_stderr():
            for line in process.stderr:
                if line.strip():
                    logger.debug(f"AWS CLI stderr: {line.strip()}")

        stderr_thread = threading.Thread(target=read_stderr)
        stderr_thread.daemon = True
        stderr_thread.start()

        return process

    @staticmethod
    def finish_sso_login(process):
        """Forward the rest of the CLI output and wait for it to store the token."""
        logger.info("Waiting for 'aws sso login' process to complete...")
        forward_remaining(process.stdout)
        returncode = process.wait()
        if returncode != 0:
            logger.error(f"'aws sso login' exited with code {returncode}")
        else:
            logger.info("AWS SSO login process completed successfully.")
        return returncode

    @staticmethod
    def stop_sso_login(process):
        """Terminate the CLI if it is still waiting for the login and reap it."""
        if process.poll() is None:
            logger.info("Stopping 'aws sso login'...")
            process.terminate()
            process.wait()
