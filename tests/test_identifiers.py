import pytest

from provisioner.app.services.provisioning.base import InvalidProjectName
from provisioner.app.utils.identifiers import (
    MAX_PROJECT_NAME_LENGTH,
    is_valid_project_name,
    quote_identifier,
    quote_literal,
    sanitize_project_name,
)

HOSTILE_NAMES = [
    "",
    "my app",
    "my\tapp",
    "my\napp",
    "robert'); DROP TABLE students;--",
    'my"app',
    "my'app",
    "my;app",
    "my$app",
    "my\\app",
    "my/app",
    "my.app",
    "my_app",
    "MyApp",
    "-leading",
    "trailing-",
    "-",
    "app\x00",
    "caf\u00e9",
    "\u0430pp",  # Cyrillic a
    "app\u200b",
    "a" * (MAX_PROJECT_NAME_LENGTH + 1),
]


@pytest.mark.parametrize("name", HOSTILE_NAMES)
def test_hostile_names_rejected(name):
    assert not is_valid_project_name(name)
    with pytest.raises(InvalidProjectName):
        sanitize_project_name(name)


@pytest.mark.parametrize(
    "name",
    ["a", "7", "my-app", "my--app", "app42", "42app", "a" * MAX_PROJECT_NAME_LENGTH],
)
def test_valid_names_pass_unchanged(name):
    assert is_valid_project_name(name)
    assert sanitize_project_name(name) == name


def test_non_string_rejected():
    assert not is_valid_project_name(None)
    assert not is_valid_project_name(42)


def test_invalid_project_name_is_not_retryable():
    with pytest.raises(InvalidProjectName) as exc_info:
        sanitize_project_name("bad name")
    assert exc_info.value.retryable is False


def test_quote_identifier():
    assert quote_identifier("user-my-app") == '"user-my-app"'
    assert quote_identifier('we"ird') == '"we""ird"'


def test_quote_literal():
    assert quote_literal("abc123") == "'abc123'"
    assert quote_literal("it's") == "'it''s'"
