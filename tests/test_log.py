import json

from click.testing import CliRunner
from loguru import logger

from mortgage_sim.log import setup_logging
from mortgage_sim.main import cli


def test_file_sink_receives_messages(tmp_path):
    path = tmp_path / "sim.log"
    setup_logging("INFO", str(path))
    logger.info("Purged mortgage {}", "m-1")
    logger.debug("not written")
    logger.remove()
    text = path.read_text(encoding="utf-8")
    assert "Purged mortgage m-1" in text
    assert "not written" not in text


def test_cli_writes_to_configured_log_file(tmp_path, mortgage_document):
    doc = tmp_path / "mortgage.json"
    doc.write_text(json.dumps(mortgage_document), encoding="utf-8")
    log_file = tmp_path / "cli.log"
    runner = CliRunner(
        env={
            "MORTGAGE_SIM_DATABASE_URL": f"sqlite:///{tmp_path / 'cli.sqlite3'}",
            "MORTGAGE_SIM_LOG_LEVEL": "INFO",
            "MORTGAGE_SIM_LOG_FILE": str(log_file),
        }
    )
    result = runner.invoke(cli, ["import", str(doc)])
    assert result.exit_code == 0, result.output
    logger.remove()
    assert "Stored mortgage doc-1" in log_file.read_text(encoding="utf-8")
