import json

import pytest

from config import LoginOptions, SelectorSet, load_selectors, validate_device_url, validate_options
from constants import ALLOW_SELECTOR, DEVICE_URL_PATTERN
from exceptions import ConfigurationError


@pytest.mark.parametrize(
    "url",
    [
        "https://my-org.awsapps.com/start/#/device?user_code=ABCD-EFGH",
        "https://d-1234567890.awsapps.com/start/#/device?user_code=WXYZ-1234",
    ],
)
def test_valid_device_urls_accepted_unchanged(url):
    assert validate_device_url(url, DEVICE_URL_PATTERN) == url


@pytest.mark.parametrize(
    "url",
    [
        "http://my-org.awsapps.com/start/#/device?user_code=ABCD-EFGH",
        "https://my_org.awsapps.com/start/#/device?user_code=ABCD-EFGH",
        "https://my-org.awsapps.com/start/#/device?user_code=abcd-efgh",
        "https://evil.example.com/?u=https://my-org.awsapps.com/start/#/device?user_code=ABCD",
        "",
    ],
)
def test_malformed_device_urls_rejected(url):
    with pytest.raises(ConfigurationError):
        validate_device_url(url)


def test_default_options_are_valid():
    validate_options(LoginOptions())


@pytest.mark.parametrize("timeout", [0, -1, 0.9])
def test_timeout_below_one_second_rejected(timeout):
    with pytest.raises(ConfigurationError, match="timeout"):
        validate_options(LoginOptions(timeout=timeout))


def test_negative_inspect_delay_rejected():
    with pytest.raises(ConfigurationError):
        validate_options(LoginOptions(inspect_delay=-1))


def test_selector_overrides_keep_defaults(tmp_path):
    path = tmp_path / "selectors.json"
    path.write_text(json.dumps({"confirm": "//*[@id='cli_verification_btn']/span"}))

    selectors = load_selectors(str(path))

    assert selectors.confirm == "//*[@id='cli_verification_btn']/span"
    assert selectors.allow == ALLOW_SELECTOR


@pytest.mark.parametrize(
    "content, message",
    [
        ("{not json", "cannot read"),
        ("[1, 2]", "JSON object"),
        ('{"allowed": "x"}', "unknown selector keys"),
        ('{"allow": ""}', "non-empty"),
    ],
)
def test_bad_selector_files_rejected(tmp_path, content, message):
    path = tmp_path / "selectors.json"
    path.write_text(content)

    with pytest.raises(ConfigurationError, match=message):
        load_selectors(str(path))


def test_missing_selector_file_rejected(tmp_path):
    with pytest.raises(ConfigurationError):
        load_selectors(str(tmp_path / "missing.json"))


def test_options_are_immutable():
    with pytest.raises(AttributeError):
        LoginOptions().timeout = 3
    assert SelectorSet() == SelectorSet()
