import pytest

from ccbff.utils.env import env_bool, env_int, env_list


def test_env_bool(monkeypatch):
    monkeypatch.setenv("X_FLAG", "Yes")
    assert env_bool("X_FLAG") is True
    monkeypatch.setenv("X_FLAG", "off")
    assert env_bool("X_FLAG", default=True) is False
    monkeypatch.delenv("X_FLAG")
    assert env_bool("X_FLAG", default=True) is True
    monkeypatch.setenv("X_FLAG", "maybe")
    with pytest.raises(ValueError):
        env_bool("X_FLAG")


def test_env_int_clamps(monkeypatch):
    monkeypatch.setenv("X_TIMEOUT", "90")
    assert env_int("X_TIMEOUT", default=30, minimum=5, maximum=40) == 40
    monkeypatch.setenv("X_TIMEOUT", "1")
    assert env_int("X_TIMEOUT", default=30, minimum=5, maximum=40) == 5
    monkeypatch.delenv("X_TIMEOUT")
    assert env_int("X_TIMEOUT", default=30) == 30
    monkeypatch.setenv("X_TIMEOUT", "soon")
    with pytest.raises(ValueError):
        env_int("X_TIMEOUT", default=30)


def test_env_list(monkeypatch):
    monkeypatch.setenv("X_ORIGINS", "https://a.example, ,https://b.example")
    assert env_list("X_ORIGINS") == ["https://a.example", "https://b.example"]
    monkeypatch.delenv("X_ORIGINS")
    assert env_list("X_ORIGINS", default=["*"]) == ["*"]
