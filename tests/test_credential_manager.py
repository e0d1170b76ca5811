import pytest
from keyring.errors import NoKeyringError

import credential_manager
from constants import SERVICE_NAME
from credential_manager import CredentialManager
from exceptions import ConfigurationError, CredentialError


@pytest.fixture
def store(monkeypatch):
    data = {}

    def get_password(service, name):
        assert service == SERVICE_NAME
        return data.get(name)

    def set_password(service, name, value):
        data[name] = value

    monkeypatch.setattr(credential_manager.keyring, "get_password", get_password)
    monkeypatch.setattr(credential_manager.keyring, "set_password", set_password)
    return data


def no_prompt(message):
    raise AssertionError(f"unexpected prompt: {message}")


def test_command_line_wins_over_environment(store):
    manager = CredentialManager(environ={"AWSSSOLOGIN_USERNAME": "env-user"}, prompt=no_prompt, secret_prompt=no_prompt)
    store["password"] = "stored"

    credentials = manager.get_credentials(username="cli-user", password="cli-pass", totp_secret="JBSWY3DPEHPK3PXP")

    assert credentials.username == "cli-user"
    assert credentials.password == "cli-pass"
    assert credentials.otp.secret == "JBSWY3DPEHPK3PXP"
    assert credentials.otp_mode == "secret"


def test_environment_then_keyring(store):
    store["username"] = "stored-user"
    store["password"] = "stored-pass"
    environ = {"AWSSSOLOGIN_PASSWORD": "env-pass", "AWSSSOLOGIN_TOTP_SECRET": "jbsw y3dp ehpk 3pxp"}
    manager = CredentialManager(environ=environ, prompt=no_prompt, secret_prompt=no_prompt)

    credentials = manager.get_credentials()

    assert credentials.username == "stored-user"
    assert credentials.password == "env-pass"
    assert credentials.otp.secret == "JBSWY3DPEHPK3PXP"


def test_prompts_and_stores_missing_values(store):
    manager = CredentialManager(environ={}, prompt=lambda m: "alice\n", secret_prompt=lambda m: "hunter2")

    credentials = manager.get_credentials()

    assert credentials.username == "alice"
    assert credentials.password == "hunter2"
    assert credentials.otp.interactive
    assert store == {"username": "alice", "password": "hunter2"}


def test_update_password_skips_stored_value(store):
    store["password"] = "old"
    manager = CredentialManager(
        environ={"AWSSSOLOGIN_PASSWORD": "env"}, update_password=True, prompt=no_prompt, secret_prompt=lambda m: "new"
    )

    credentials = manager.get_credentials(username="alice", totp_code="123456")

    assert credentials.password == "new"
    assert store["password"] == "new"


def test_prompt_refused_when_stdin_carries_cli_output(store):
    manager = CredentialManager(environ={}, prompt=no_prompt, secret_prompt=no_prompt)

    with pytest.raises(CredentialError, match="stdin"):
        manager.get_credentials(password="pw", totp_secret="JBSWY3DPEHPK3PXP", allow_prompt=False)


def test_interactive_totp_refused_when_stdin_carries_cli_output(store):
    manager = CredentialManager(environ={}, prompt=no_prompt, secret_prompt=no_prompt)

    with pytest.raises(CredentialError, match="TOTP"):
        manager.get_credentials(username="alice", password="pw", allow_prompt=False)


def test_empty_prompt_answer_is_rejected(store):
    manager = CredentialManager(environ={}, prompt=lambda m: "  ", secret_prompt=no_prompt)

    with pytest.raises(CredentialError, match="username is empty"):
        manager.get_credentials()


def test_code_and_secret_together_rejected(store):
    manager = CredentialManager(environ={}, prompt=no_prompt, secret_prompt=no_prompt)

    with pytest.raises(ConfigurationError):
        manager.get_credentials(username="a", password="b", totp_secret="JBSWY3DPEHPK3PXP", totp_code="123456")


def test_unavailable_keyring_falls_through_to_prompt(monkeypatch):
    def broken(*args):
        raise NoKeyringError("no backend")

    monkeypatch.setattr(credential_manager.keyring, "get_password", broken)
    monkeypatch.setattr(credential_manager.keyring, "set_password", broken)
    manager = CredentialManager(environ={}, prompt=lambda m: "alice", secret_prompt=lambda m: "pw")

    credentials = manager.get_credentials(totp_code="123456")

    assert credentials.username == "alice"
    assert credentials.password == "pw"


def test_no_keyring_never_touches_keyring(monkeypatch):
    monkeypatch.setattr(credential_manager.keyring, "get_password", no_prompt)
    monkeypatch.setattr(credential_manager.keyring, "set_password", no_prompt)
    manager = CredentialManager(use_keyring=False, environ={}, prompt=lambda m: "alice", secret_prompt=lambda m: "pw")

    assert manager.get_credentials(totp_code="123456").username == "alice"


def test_repr_hides_password():
    credentials = CredentialManager(environ={}, use_keyring=False).get_credentials(
        username="alice", password="hunter2", totp_code="123456"
    )

    assert "hunter2" not in repr(credentials)


def test_closed_stdin_at_prompt_raises_credential_error(store):
    def closed(message):
        raise EOFError

    manager = CredentialManager(environ={}, prompt=no_prompt, secret_prompt=closed)

    with pytest.raises(CredentialError, match="failed to read password"):
        manager.get_credentials(username="alice", totp_code="123456")
