from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from bundle_assets import __version__, cli
from bundle_assets.exceptions import PackingError

if TYPE_CHECKING:
    from collections.abc import Callable

    from pytest_mock import MockerFixture


@pytest.mark.unit
def test_parse_args_maps_flags_to_settings() -> None:
    settings = cli.parse_args(
        [
            "--src",
            "public,templates",
            "--src",
            "favicon.ico",
            "-o",
            "gen/assets.gen.go",
            "--var",
            "static",
            "--exclude",
            "*.map",
            "--gitignore",
            "--quality",
            "6",
            "--opt",
            "--package",
            "web",
            "-v",
        ],
    )

    assert settings.inputs == ["public", "templates", "favicon.ico"]
    assert settings.output == Path("gen/assets.gen.go")
    assert settings.variable == "static"
    assert settings.exclude == "*.map"
    assert settings.gitignore is True
    assert settings.quality == 6
    assert settings.decompress is True
    assert settings.package == "web"
    assert settings.verbose is True


@pytest.mark.unit
def test_parse_args_requires_inputs(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as exc_info:
        cli.parse_args([])

    assert exc_info.value.code == 2
    assert "inputs" in capsys.readouterr().err


@pytest.mark.unit
def test_parse_args_rejects_out_of_range_quality() -> None:
    with pytest.raises(SystemExit):
        cli.parse_args(["--src", "x", "--quality", "12"])


@pytest.mark.unit
def test_parse_args_version_flag(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as exc_info:
        cli.parse_args(["--version"])

    assert exc_info.value.code == 0
    assert __version__ in capsys.readouterr().out


@pytest.mark.unit
def test_parse_args_config_file_provides_defaults(tmp_path: Path) -> None:
    cfg = tmp_path / "bundle.yaml"
    cfg.write_text(
        "inputs: [public]\nvariable: static\nquality: 3\ndecompress: true\n",
        encoding="utf-8",
    )

    settings = cli.parse_args(["--config", str(cfg), "--quality", "9"])

    assert settings.inputs == ["public"]
    assert settings.variable == "static"
    assert settings.decompress is True
    assert settings.quality == 9


@pytest.mark.unit
def test_parse_args_flags_replace_config_inputs(tmp_path: Path) -> None:
    cfg = tmp_path / "bundle.yaml"
    cfg.write_text("inputs: [public]\n", encoding="utf-8")

    settings = cli.parse_args(["--config", str(cfg), "--src", "other"])

    assert settings.inputs == ["other"]


@pytest.mark.unit
def test_main_returns_one_on_bundle_error(
    make_tree: Callable[[dict[str, str | bytes]], Path],
    monkeypatch: pytest.MonkeyPatch,
    mocker: MockerFixture,
    caplog: pytest.LogCaptureFixture,
) -> None:
    caplog.set_level(logging.INFO, logger="bundle_assets")
    root = make_tree({"in/a.txt": "a"})
    monkeypatch.chdir(root)
    mocker.patch("bundle_assets.generator.pack", side_effect=PackingError(reason="boom"))

    exit_code = cli.main(["--src", "in", "--package", "x"])

    assert exit_code == 1
    assert "boom" in caplog.text
    assert not (root / "assets.gen.go").exists()


@pytest.mark.unit
def test_main_reports_missing_input(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)

    assert cli.main(["--src", "missing", "--package", "x"]) == 1


@pytest.mark.unit
def test_main_reports_invalid_config_file(tmp_path: Path) -> None:
    assert cli.main(["--config", str(tmp_path / "nope.yaml")]) == 1


@pytest.mark.unit
def test_main_needs_package_when_discovery_fails(
    make_tree: Callable[[dict[str, str | bytes]], Path],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    root = make_tree({"in/a.txt": "a"})
    monkeypatch.chdir(root)

    assert cli.main(["--src", "in"]) == 1
    assert not (root / "assets.gen.go").exists()


@pytest.mark.unit
def test_runtime_import_documents_blob_format() -> None:
    assert cli.__doc__ is not None
    assert "tar+brotli" in cli.__doc__
    assert "--runtime-import" in cli.__doc__
    action = next(a for a in cli.build_parser()._actions if a.dest == "runtime_import")
    assert "brotli tar" in (action.help or "")
