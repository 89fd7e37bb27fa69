"""Tests for application logging setup."""

import logging

import pytest

from clab_graph.utils.logging_config import setup_logging


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    clients = logging.getLogger("clab_graph.clients")
    clients_level = clients.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
    clients.setLevel(clients_level)


class TestSetupLogging:
    """Console on stderr, optional file, quiet container lookups."""

    def test_client_lookups_quiet_at_info(self, restore_logging):
        setup_logging("INFO")
        assert logging.getLogger("clab_graph.clients").level == logging.WARNING
        assert logging.getLogger().level == logging.INFO

    def test_client_lookups_shown_when_debugging(self, restore_logging):
        setup_logging("INFO")
        setup_logging("DEBUG")
        assert logging.getLogger("clab_graph.clients").level == logging.NOTSET

    def test_console_handler_uses_stderr(self, restore_logging):
        setup_logging("WARNING")
        console = logging.getLogger().handlers[0]
        assert console.console.stderr

    def test_log_file(self, restore_logging, tmp_path):
        log_file = tmp_path / "logs" / "clab-graph.log"
        setup_logging("INFO", str(log_file))
        logging.getLogger("clab_graph.tests").info("written to file")
        for handler in logging.getLogger().handlers:
            handler.flush()

        assert "written to file" in log_file.read_text()
