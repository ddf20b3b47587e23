import os
from pathlib import Path

from ebook_catalog import environment


def test_candidates_put_explicit_files_first(monkeypatch, tmp_path):
    explicit = tmp_path / "custom.env"
    monkeypatch.setenv(environment.ENV_FILE_VAR, str(explicit))
    monkeypatch.setenv(environment.ENV_PROFILE_VAR, "staging")

    candidates = environment.dotenv_candidates(root=tmp_path)

    assert candidates == [
        explicit.resolve(),
        (tmp_path / ".env").resolve(),
        (tmp_path / ".env.staging").resolve(),
        (tmp_path / ".env.local").resolve(),
    ]


def test_candidates_skip_profile_when_unset(monkeypatch, tmp_path):
    monkeypatch.delenv(environment.ENV_FILE_VAR, raising=False)
    monkeypatch.delenv(environment.ENV_PROFILE_VAR, raising=False)

    names = [path.name for path in environment.dotenv_candidates(root=tmp_path)]

    assert names == [".env", ".env.local"]


def test_load_environment_keeps_existing_values(monkeypatch, tmp_path):
    env_file = tmp_path / "catalog.env"
    env_file.write_text("CATALOG_TEST_NEW=from-file\nCATALOG_TEST_KEPT=from-file\n", encoding="utf-8")
    monkeypatch.setenv(environment.ENV_FILE_VAR, str(env_file))
    monkeypatch.setenv("CATALOG_TEST_KEPT", "from-process")
    monkeypatch.delenv("CATALOG_TEST_NEW", raising=False)

    try:
        applied = environment.load_environment(force=True)

        assert Path(env_file).resolve() in applied
        assert os.environ["CATALOG_TEST_NEW"] == "from-file"
        assert os.environ["CATALOG_TEST_KEPT"] == "from-process"
    finally:
        os.environ.pop("CATALOG_TEST_NEW", None)
