"""
Tests for logging utilities.
"""

import io
import logging

from hours_tracker.logging_utils import (
    get_logger,
    log_error,
    log_section,
    log_success,
    log_warning,
    setup_logging,
)


class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_levels(self):
        assert setup_logging(verbose=True, stream=io.StringIO()).level == logging.DEBUG
        assert setup_logging(verbose=False, stream=io.StringIO()).level == logging.INFO

    def test_single_handler(self):
        """Test that repeated setup does not stack handlers."""
        setup_logging(stream=io.StringIO())
        logger = setup_logging(stream=io.StringIO())
        assert len(logger.handlers) == 1

    def test_plain_format_for_non_terminals(self):
        stream = io.StringIO()
        setup_logging(stream=stream)
        get_logger('child').warning("careful")

        assert stream.getvalue() == "WARNING  | careful\n"


class TestLogHelpers:
    """Tests for the message helpers."""

    def test_prefixes(self):
        stream = io.StringIO()
        logger = setup_logging(stream=stream)

        log_success("done", logger)
        log_warning("hmm", logger)
        log_error("bad", logger)
        log_section("Import", logger)

        lines = stream.getvalue().splitlines()
        assert lines[0].endswith("✓ done")
        assert lines[1].endswith("⚠ hmm")
        assert lines[2].endswith("✗ bad")
        assert lines[4].endswith("  Import")

    def test_debug_hidden_unless_verbose(self):
        stream = io.StringIO()
        setup_logging(verbose=False, stream=stream)
        get_logger('parser').debug("detail")
        assert stream.getvalue() == ""
