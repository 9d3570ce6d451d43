import os

import pytest

import compact_jwt as m

PREFIX = "TESTJWT_"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch):
    names = [PREFIX + suffix for suffix in (
        "ALGORITHMS",
        "ISSUER",
        "AUDIENCE",
        "SUBJECT",
        "ID",
        "LEEWAY",
        "REQUIRE",
        "ALLOW_NONE",
        "MAX_TOKEN_LENGTH",
        "MAX_SEGMENT_BYTES",
    )]
    for name in names:
        monkeypatch.delenv(name, raising=False)
    yield
    # load_dotenv writes straight into os.environ
    for name in names:
        os.environ.pop(name, None)


def test_defaults():
    options = m.options_from_env(PREFIX, dotenv=False)
    assert options == m.DecodeOptions()
    assert m.allowed_algorithms_from_env(PREFIX, dotenv=False) == frozenset({m.Algorithm.HS256})


def test_values_are_read(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv(PREFIX + "ISSUER", "https://issuer.example")
    monkeypatch.setenv(PREFIX + "AUDIENCE", "api, web")
    monkeypatch.setenv(PREFIX + "SUBJECT", "user-1")
    monkeypatch.setenv(PREFIX + "ID", "abc")
    monkeypatch.setenv(PREFIX + "LEEWAY", "2.5")
    monkeypatch.setenv(PREFIX + "REQUIRE", "exp,iat")
    monkeypatch.setenv(PREFIX + "ALLOW_NONE", "Yes")
    monkeypatch.setenv(PREFIX + "MAX_TOKEN_LENGTH", "4096")
    monkeypatch.setenv(PREFIX + "MAX_SEGMENT_BYTES", "2048")

    options = m.options_from_env(PREFIX, dotenv=False)

    assert options.issuer == "https://issuer.example"
    assert options.audience == frozenset({"api", "web"})
    assert options.subject == "user-1"
    assert options.jwt_id == "abc"
    assert options.leeway_seconds == 2.5
    assert options.require == frozenset({"exp", "iat"})
    assert options.allow_none is True
    assert options.max_token_length == 4096
    assert options.max_segment_bytes == 2048


@pytest.mark.parametrize("value", ["0", "false", "", "maybe"])
def test_allow_none_needs_truthy_value(monkeypatch: pytest.MonkeyPatch, value):
    monkeypatch.setenv(PREFIX + "ALLOW_NONE", value)
    assert m.options_from_env(PREFIX, dotenv=False).allow_none is False


def test_bad_number_names_the_variable(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv(PREFIX + "LEEWAY", "ten")
    with pytest.raises(ValueError, match="TESTJWT_LEEWAY"):
        m.options_from_env(PREFIX, dotenv=False)


def test_out_of_range_number(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv(PREFIX + "MAX_TOKEN_LENGTH", "0")
    with pytest.raises(ValueError):
        m.options_from_env(PREFIX, dotenv=False)


def test_algorithm_list(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv(PREFIX + "ALGORITHMS", "RS256, ES384")
    assert m.allowed_algorithms_from_env(PREFIX, dotenv=False) == frozenset(
        {m.Algorithm.RS256, m.Algorithm.ES384}
    )

    monkeypatch.setenv(PREFIX + "ALGORITHMS", "RS256,rs512")
    with pytest.raises(m.UnknownAlgorithm):
        m.allowed_algorithms_from_env(PREFIX, dotenv=False)


def test_dotenv_file_is_loaded(monkeypatch: pytest.MonkeyPatch, tmp_path):
    (tmp_path / ".env").write_text(f"{PREFIX}ISSUER=from-dotenv\n{PREFIX}SUBJECT=file\n")
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv(PREFIX + "SUBJECT", "from-environment")

    options = m.options_from_env(PREFIX)

    assert options.issuer == "from-dotenv"
    assert options.subject == "from-environment"
