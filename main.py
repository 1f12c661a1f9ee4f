#!/usr/bin/env python

from backend.main import run
from config import LOG_FILE, LOG_LEVEL
from core.logging import app_logger, log_error, setup_logging
from eliot import log_message, start_action


def main():
    setup_logging(log_level=LOG_LEVEL, log_file=LOG_FILE)
    with start_action(app_logger, "application_run"):
        log_message(message_type="application_init", message="Starting flowr player")
        try:
            run()
        except Exception as e:
            log_error(app_logger, e, phase="server")
            raise


if __name__ == "__main__":
    main()
