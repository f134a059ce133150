from __future__ import annotations

from pathlib import Path

import pytest

from validgen.config import GenerateConfig, find_config, load_config


def test_defaults() -> None:
    config = GenerateConfig()
    assert config.source == Path("main.go")
    assert config.output == Path("generated.go")
    assert config.package == "main"
    assert config.debug is False


def test_override_ignores_none() -> None:
    config = GenerateConfig().override(source=None, package="models", debug=None)
    assert config.source == Path("main.go")
    assert config.package == "models"


def test_load_validgen_toml(tmp_path: Path) -> None:
    path = tmp_path / "validgen.toml"
    path.write_text('in = "models.go"\nout = "gen/models_validate.go"\noutpkg = "models"\ndebug = true\n')

    config = load_config(path)

    assert config.source == tmp_path / "models.go"
    assert config.output == tmp_path / "gen" / "models_validate.go"
    assert config.package == "models"
    assert config.debug is True


def test_load_pyproject_table(tmp_path: Path) -> None:
    path = tmp_path / "pyproject.toml"
    path.write_text('[project]\nname = "x"\n\n[tool.validgen]\noutpkg = "api"\n')

    config = load_config(path)

    assert config.package == "api"
    assert config.source == GenerateConfig().source


def test_pyproject_without_table_is_rejected(tmp_path: Path) -> None:
    path = tmp_path / "pyproject.toml"
    path.write_text('[project]\nname = "x"\n')
    with pytest.raises(ValueError, match="tool.validgen"):
        load_config(path)


@pytest.mark.parametrize(
    "body, key",
    [
        ('in = ""\n', "in"),
        ("out = 3\n", "out"),
        ('outpkg = "  "\n', "outpkg"),
        ('debug = "yes"\n', "debug"),
    ],
)
def test_bad_values(tmp_path: Path, body: str, key: str) -> None:
    path = tmp_path / "validgen.toml"
    path.write_text(body)
    with pytest.raises(ValueError, match=key):
        load_config(path)


def test_find_config_walks_up(tmp_path: Path) -> None:
    (tmp_path / "validgen.toml").write_text('outpkg = "models"\n')
    nested = tmp_path / "a" / "b"
    nested.mkdir(parents=True)

    assert find_config(nested) == (tmp_path / "validgen.toml").resolve()


def test_find_config_skips_unrelated_pyproject(tmp_path: Path) -> None:
    (tmp_path / "validgen.toml").write_text('outpkg = "models"\n')
    nested = tmp_path / "pkg"
    nested.mkdir()
    (nested / "pyproject.toml").write_text('[project]\nname = "x"\n')

    assert find_config(nested) == (tmp_path / "validgen.toml").resolve()


def test_find_config_accepts_pyproject_with_table(tmp_path: Path) -> None:
    (tmp_path / "pyproject.toml").write_text('[tool.validgen]\nout = "v.go"\n')
    assert find_config(tmp_path) == (tmp_path / "pyproject.toml").resolve()
