import textwrap
from pathlib import Path

import pytest
from click.testing import CliRunner

from ssh_identity.cli import main
from ssh_identity.core import agent
from ssh_identity.core.errors import KeyRegistrationError

SAMPLE = textwrap.dedent(
    """\
    # personal machines
    Host *
      IdentityFile old_key
      AddKeysToAgent yes

    Host example.com
      User git
      IdentityFile old_key
    """
)


@pytest.fixture
def fake_home(monkeypatch, tmp_path):
    ssh_dir = tmp_path / '.ssh'
    ssh_dir.mkdir()
    (ssh_dir / 'config').write_text(SAMPLE, encoding='utf-8')

    monkeypatch.setenv('HOME', str(tmp_path))
    monkeypatch.delenv('SSH_IDENTITY_HOST', raising=False)
    monkeypatch.delenv('SSH_IDENTITY_CONFIG', raising=False)
    # Monkeypatch Path.home to return our fake home
    monkeypatch.setattr(Path, 'home', lambda: tmp_path)
    return tmp_path


@pytest.fixture
def registered(monkeypatch):
    calls = []
    monkeypatch.setattr(agent, 'ssh_add', calls.append)
    return calls


def test_edit_default_host(fake_home, registered):
    runner = CliRunner()
    result = runner.invoke(main, ['new_key'])
    assert result.exit_code == 0, result.output

    new_key = fake_home / '.ssh' / 'new_key'
    expected = SAMPLE.replace(
        "  User git\n  IdentityFile old_key\n",
        f"  User git\n  IdentityFile {new_key}\n",
    )
    assert (fake_home / '.ssh' / 'config').read_text(encoding='utf-8') == expected
    assert registered == [new_key]
    # Progress trace shows the rewritten block
    assert f"Host example.com\n  User git\n  IdentityFile {new_key}" in result.output


def test_edit_explicit_host_flag(fake_home, registered):
    runner = CliRunner()
    result = runner.invoke(main, ['-host', 'db.internal', 'work_key'])
    assert result.exit_code == 0, result.output

    text = (fake_home / '.ssh' / 'config').read_text(encoding='utf-8')
    work_key = fake_home / '.ssh' / 'work_key'
    # Only "Host *" applies to db.internal
    assert text.count(f"IdentityFile {work_key}") == 1
    assert "Host example.com\n  User git\n  IdentityFile old_key\n" in text


def test_double_dash_spelling(fake_home, registered):
    runner = CliRunner()
    result = runner.invoke(main, ['--host=example.com', 'k'])
    assert result.exit_code == 0, result.output
    # "Host *" and "Host example.com" both apply
    assert registered == [fake_home / '.ssh' / 'k'] * 2


def test_list_prints_config_without_writing(fake_home, registered, monkeypatch):
    from ssh_identity.core import store
    monkeypatch.setattr(store, 'write_config', lambda *a: pytest.fail('config written in list mode'))

    runner = CliRunner()
    result = runner.invoke(main, ['-list'])
    assert result.exit_code == 0, result.output
    assert result.output == SAMPLE + "\n"
    assert registered == []


def test_missing_identity_argument(fake_home, registered):
    config = fake_home / '.ssh' / 'config'
    runner = CliRunner()
    result = runner.invoke(main, [])
    assert result.exit_code == 2
    assert 'no argument given' in result.output
    assert config.read_text(encoding='utf-8') == SAMPLE
    assert registered == []


def test_help_does_not_touch_config(fake_home, registered):
    (fake_home / '.ssh' / 'config').unlink()
    runner = CliRunner()
    result = runner.invoke(main, ['-help'])
    assert result.exit_code == 0
    assert '-host' in result.output
    assert '-config' in result.output


def test_missing_config_file(fake_home):
    runner = CliRunner()
    result = runner.invoke(main, ['-config', '.ssh/other', 'k'])
    assert result.exit_code == 1
    assert 'cannot read' in result.output


def test_config_relative_to_working_dir(fake_home, registered, monkeypatch, tmp_path):
    workdir = tmp_path / 'work'
    workdir.mkdir()
    (workdir / 'ssh_config').write_text("Host box\n  IdentityFile x\n", encoding='utf-8')
    monkeypatch.chdir(workdir)

    runner = CliRunner()
    result = runner.invoke(main, ['-config', './ssh_config', 'k'])
    assert result.exit_code == 0, result.output
    key = fake_home / '.ssh' / 'k'
    assert (workdir / 'ssh_config').read_text(encoding='utf-8') == f"Host box\n  IdentityFile {key}\n"
    assert (fake_home / '.ssh' / 'config').read_text(encoding='utf-8') == SAMPLE


def test_config_from_environment(fake_home, registered, monkeypatch):
    (fake_home / 'alt_config').write_text("Host alt\n  IdentityFile x\n", encoding='utf-8')
    monkeypatch.setenv('SSH_IDENTITY_CONFIG', 'alt_config')

    runner = CliRunner()
    result = runner.invoke(main, ['-list'])
    assert result.exit_code == 0, result.output
    assert result.output == "Host alt\n  IdentityFile x\n\n"


def test_registration_failure_leaves_file_untouched(fake_home, monkeypatch):
    def failing(identity):
        raise KeyRegistrationError(identity, returncode=1)

    monkeypatch.setattr(agent, 'ssh_add', failing)
    runner = CliRunner()
    result = runner.invoke(main, ['new_key'])
    assert result.exit_code == 1
    assert 'ssh-add failed' in result.output
    assert (fake_home / '.ssh' / 'config').read_text(encoding='utf-8') == SAMPLE


def test_no_agent_skips_ssh_add(fake_home, monkeypatch):
    monkeypatch.setattr(agent, 'ssh_add', lambda identity: pytest.fail('ssh-add called'))
    runner = CliRunner()
    result = runner.invoke(main, ['-no-agent', 'new_key'])
    assert result.exit_code == 0, result.output
    assert str(fake_home / '.ssh' / 'new_key') in (fake_home / '.ssh' / 'config').read_text(encoding='utf-8')


def test_malformed_config_aborts(fake_home, registered):
    config = fake_home / '.ssh' / 'config'
    config.write_text("Host a\n  IdentityFile\n", encoding='utf-8')
    runner = CliRunner()
    result = runner.invoke(main, ['k'])
    assert result.exit_code == 1
    assert 'line 2' in result.output
    assert registered == []
