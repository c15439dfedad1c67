"""
Tests for the command-line front-end.
"""
import importlib.util
import json
import logging
from pathlib import Path

import pytest

CLI_PATH = Path(__file__).resolve().parent.parent / "scripts" / "refsearch_cli.py"


@pytest.fixture(scope="module")
def cli():
    spec = importlib.util.spec_from_file_location("refsearch_cli", CLI_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture(autouse=True)
def reset_package_logger():
    yield
    logger = logging.getLogger("refsearch_server")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


def _run(cli, capsys, *argv):
    code = cli.run_cli(list(argv))
    return code, json.loads(capsys.readouterr().out)


class TestDecode:
    def test_valid_id(self, cli, capsys):
        code, body = _run(cli, capsys, "decode", "PRD-MAN-024")
        assert code == 0
        assert body["valid"] is True
        assert body["entity_type"] == "product"
        assert body["sequence"] == 24
        assert body["path"] == "/product/PRD-MAN-024"

    def test_lowercase_id_is_invalid(self, cli, capsys):
        _code, body = _run(cli, capsys, "decode", "prd-man-024")
        assert body == {"reference_id": "prd-man-024", "valid": False, "path": "/"}


def test_encode(cli, capsys):
    code, body = _run(cli, capsys, "encode", "PRD", "Mandsaur", "23")
    assert code == 0
    assert body == {"reference_id": "PRD-MAN-024"}


def test_search_over_data_dir(cli, capsys, clean_env, tmp_path):
    (tmp_path / "products.json").write_text(
        json.dumps([{"id": "p1", "referenceId": "PRD-MAN-001", "name": "Basmati Rice"}]),
        encoding="utf-8",
    )
    code, body = _run(cli, capsys, "--data-dir", str(tmp_path), "search", "rice")
    assert code == 0
    assert body["tier"] == "local"
    assert [r["reference_id"] for r in body["results"]] == ["PRD-MAN-001"]
