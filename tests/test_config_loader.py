import os

import pytest

from debdeploy.core.config_loader import load_deployment_config, normalize_keys
from debdeploy.exceptions import ConfigError
from tests.conftest import write_env


def test_loads_required_and_optional_fields(tmp_path):
    path = write_env(
        tmp_path / ".env",
        remoteHost="10.0.0.5",
        remoteSshPort="2222",
        remoteUsername="deployer",
        sshPassword="hunter2",
        rootPassword="r00t",
    )

    config = load_deployment_config(path)

    assert config.remote_host == "10.0.0.5"
    assert config.remote_port == 2222
    assert config.remote_username == "deployer"
    assert config.ssh_password == "hunter2"
    assert config.root_password == "r00t"
    assert config.destination == "deployer@10.0.0.5"
    assert config.uses_password_auth
    assert config.source_path == path


@pytest.mark.parametrize("missing", ["remoteHost", "remoteSshPort", "remoteUsername"])
def test_missing_required_key_is_fatal(tmp_path, missing):
    values = {
        "remoteHost": "10.0.0.5",
        "remoteSshPort": "22",
        "remoteUsername": "deployer",
    }
    del values[missing]
    path = write_env(tmp_path / ".env", **values)

    with pytest.raises(ConfigError) as exc:
        load_deployment_config(path)

    assert missing in str(exc.value)


def test_empty_required_value_counts_as_missing(tmp_path):
    path = write_env(
        tmp_path / ".env", remoteHost="", remoteSshPort="22", remoteUsername="deployer"
    )

    with pytest.raises(ConfigError, match="remoteHost"):
        load_deployment_config(path)


def test_unreadable_path(tmp_path):
    with pytest.raises(ConfigError, match="Cannot read env file"):
        load_deployment_config(tmp_path / "nope.env")


def test_directory_is_not_a_config(tmp_path):
    with pytest.raises(ConfigError, match="Cannot read env file"):
        load_deployment_config(tmp_path)


@pytest.mark.skipif(os.geteuid() == 0, reason="root can read any file")
def test_permission_denied(tmp_path):
    path = write_env(
        tmp_path / ".env", remoteHost="h", remoteSshPort="22", remoteUsername="u"
    )
    path.chmod(0)

    with pytest.raises(ConfigError):
        load_deployment_config(path)


@pytest.mark.parametrize("port", ["ssh", "0", "70000", "-1"])
def test_invalid_port(tmp_path, port):
    path = write_env(
        tmp_path / ".env", remoteHost="h", remoteSshPort=port, remoteUsername="u"
    )

    with pytest.raises(ConfigError, match="remoteSshPort"):
        load_deployment_config(path)


def test_legacy_upper_case_names(tmp_path):
    path = write_env(
        tmp_path / ".env",
        REMOTE_HOST="example.org",
        REMOTE_SSH_PORT="22",
        REMOTE_USERNAME="root",
        ROOT_PASSWORD="pw",
    )

    config = load_deployment_config(path)

    assert config.destination == "root@example.org"
    assert config.is_root_login
    assert config.root_password == "pw"
    assert not config.uses_password_auth


def test_camel_case_wins_over_alias():
    assert normalize_keys({"remoteHost": "a", "REMOTE_HOST": "b"}) == {
        "remoteHost": "a"
    }


def test_shell_style_syntax(tmp_path):
    path = tmp_path / ".env"
    path.write_text(
        "# target\n"
        "export remoteHost=10.0.0.5\n"
        "remoteSshPort='22'\n"
        'remoteUsername="deployer"\n'
        "\n"
        "sshPassword=\n"
    )

    config = load_deployment_config(path)

    assert config.remote_host == "10.0.0.5"
    assert config.remote_port == 22
    assert config.remote_username == "deployer"
    assert config.ssh_password is None


def test_host_key_policy(tmp_path):
    path = write_env(
        tmp_path / ".env",
        remoteHost="h",
        remoteSshPort="22",
        remoteUsername="u",
        strictHostKeyChecking="accept-new",
    )
    assert load_deployment_config(path).strict_host_key_checking == "accept-new"

    write_env(
        path, remoteHost="h", remoteSshPort="22", remoteUsername="u",
        strictHostKeyChecking="maybe",
    )
    with pytest.raises(ConfigError, match="strictHostKeyChecking"):
        load_deployment_config(path)


def test_repr_hides_secrets(tmp_path):
    path = write_env(
        tmp_path / ".env",
        remoteHost="h",
        remoteSshPort="22",
        remoteUsername="u",
        sshPassword="topsecret",
        rootPassword="alsosecret",
    )

    config = load_deployment_config(path)

    assert "topsecret" not in repr(config)
    assert "alsosecret" not in repr(config)
    assert set(config.secrets) == {"topsecret", "alsosecret"}


@pytest.mark.parametrize(
    "key, value",
    [
        ("remoteHost", "-oProxyCommand=touch /tmp/pwned"),
        ("remoteUsername", "-oProxyCommand=sh"),
        ("remoteHost", "10.0.0.5 -p 2222"),
        ("remoteUsername", "de ployer"),
    ],
)
def test_destination_cannot_smuggle_ssh_options(tmp_path, key, value):
    values = {"remoteHost": "10.0.0.5", "remoteSshPort": "22", "remoteUsername": "deployer"}
    values[key] = value
    path = write_env(tmp_path / ".env", **values)

    with pytest.raises(ConfigError, match=key):
        load_deployment_config(path)


def test_destination_keeps_inner_dashes(tmp_path):
    path = write_env(
        tmp_path / ".env", remoteHost="edge-1.example.org", remoteSshPort="22",
        remoteUsername="ops-user",
    )

    assert load_deployment_config(path).destination == "ops-user@edge-1.example.org"
