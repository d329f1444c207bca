"""
Tests for the policy-reader command line.
"""

import json
import pytest

from service_policy.app.cli import main


POLICY = """
privileges:
  - privilege: manage
    includes: [read]
authorization:
  - role: admin
    title: Administrator
    body:
      - has_permission_on: employees
        to: manage
  - role: branch_admin
    body:
      - has_permission_on: employees
        body:
          - to: read
          - if_attribute:
              branch: !is user.branch
"""


@pytest.fixture
def policy_file(tmp_path):
    """Write a valid policy file."""
    path = tmp_path / "authorization_rules.yml"
    path.write_text(POLICY)
    return path


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep configuration independent of the environment."""
    monkeypatch.delenv("ACCESS_POLICY_FILE", raising=False)
    monkeypatch.delenv("ACCESS_LOG_LEVEL", raising=False)


def test_summary_output(policy_file, capsys):
    """Test the text summary."""
    assert main([str(policy_file)]) == 0

    out = capsys.readouterr().out
    assert "2 privileges, 2 roles, 2 rules" in out
    assert "admin (Administrator)" in out
    assert "employees: read, 1 conditions" in out


def test_json_output(policy_file, capsys):
    """Test the JSON summary."""
    assert main([str(policy_file), "--json"]) == 0

    summary = json.loads(capsys.readouterr().out)
    assert summary["rules"] == 2
    assert summary["grants"]["admin"] == [
        {"context": "employees", "privileges": ["manage"], "conditions": 0}
    ]


def test_policy_file_from_environment(policy_file, monkeypatch, capsys):
    """Test ACCESS_POLICY_FILE is used when no file is given."""
    monkeypatch.setenv("ACCESS_POLICY_FILE", str(policy_file))

    assert main([]) == 0
    assert "2 rules" in capsys.readouterr().out


def test_no_policy_file(capsys):
    """Test a missing policy file argument."""
    assert main([]) == 2
    assert "ACCESS_POLICY_FILE" in capsys.readouterr().err


def test_illegal_syntax_json(tmp_path, capsys):
    """Test syntax errors are reported as error responses."""
    path = tmp_path / "broken.yml"
    path.write_text("authorization:\n  - grant: employees\n")

    assert main([str(path), "--json"]) == 1

    response = json.loads(capsys.readouterr().out)
    assert response["code"] == "DSL_SYNTAX_ERROR"
    assert response["details"]["source"] == str(path)


def test_scope_error(tmp_path, capsys):
    """Test scope violations are reported."""
    path = tmp_path / "scope.yml"
    path.write_text("authorization:\n  - to: read\n")

    assert main([str(path)]) == 1
    assert "to only allowed in has_permission_on blocks" in capsys.readouterr().err


def test_unreadable_file(tmp_path, capsys):
    """Test a file that does not exist."""
    assert main([str(tmp_path / "missing.yml")]) == 1
    assert "cannot read" in capsys.readouterr().err


def test_undecodable_file(tmp_path, capsys):
    """Test a file that is not UTF-8 is reported as a syntax error."""
    path = tmp_path / "latin1.yml"
    path.write_bytes(b"\xff\xfe")

    assert main([str(path), "--json"]) == 1

    response = json.loads(capsys.readouterr().out)
    assert response["code"] == "DSL_SYNTAX_ERROR"
    assert response["details"]["source"] == str(path)
