"""
Logging configuration for the flowr player using eliot.

This module provides structured logging throughout the application using eliot,
which provides context-aware logging with support for nested actions
and structured data.
"""

import eliot
import logging
import sys
from eliot import log_message, write_traceback
from eliot.stdlib import EliotHandler
from pathlib import Path


class HumanReadableDestination:
    """Destination that formats eliot messages in a human-readable format."""

    # Noisy message types that would flood stdout during playback
    skip_messages = {
        "queue_operation",
        "time_update",
    }

    def __init__(self, file):
        self.file = file

    def __call__(self, message):
        """Format and write log message."""
        # Skip internal eliot action start/finish messages
        if message.get("action_type") and not message.get("message_type"):
            return

        msg_type = message.get("message_type", "")
        if msg_type in self.skip_messages:
            return

        action = message.get("action", msg_type)
        description = message.get("description", "")
        trigger = message.get("trigger_source", "")

        if msg_type == "player_action":
            track = message.get("track", "")
            old_state = message.get("old_state", "")
            new_state = message.get("new_state", "")
            prefix = f"[{trigger.upper()}] " if trigger else ""

            if track and old_state and new_state:
                output = f"{prefix}{action}: {track} ({old_state} → {new_state})"
            elif description:
                output = f"{prefix}{description}"
            elif track:
                output = f"{prefix}{action}: {track}"
            else:
                output = f"{prefix}{action}"

        elif msg_type == "stream_resolution":
            output = f"[STREAM] {message.get('outcome', '')}: {message.get('track_id', '')}"
            if description:
                output += f" ({description})"

        elif msg_type == "api_request":
            output = f"[API] {action}"
            if description:
                output += f": {description}"

        elif msg_type == "error_occurred":
            output = f"[ERROR] {message.get('error_type', '')}: {message.get('error_message', '')}"

        elif description:
            output = description
        elif "message" in message:
            output = message["message"]
        else:
            return

        if output and output.strip():
            self.file.write(output + "\n")
            self.file.flush()


def setup_logging(log_level: str = "INFO", log_file: str = None) -> None:
    """
    Set up eliot logging for the application.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file path to write JSON logs to (always logs to stdout as well)
    """
    eliot.add_destination(HumanReadableDestination(sys.stdout))

    # Raw JSON to file for machine parsing
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        eliot.to_file(open(log_file, "a"))

    # Route stdlib logging (uvicorn, requests) through eliot
    logger = logging.getLogger()
    logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))
    logger.addHandler(EliotHandler())

    log_message(
        message_type="logging_setup", log_level=log_level, log_file=log_file or "stdout", message="Eliot logging configured"
    )


def get_logger(name: str):
    """
    Get an eliot logger instance for a specific component.

    Note: the returned Logger is meant for start_action() and write_traceback().
    Use eliot.log_message() (or the helpers below) to log messages.

    Args:
        name: Module or component name

    Returns:
        Eliot Logger instance
    """
    from eliot import Logger

    return Logger()


# Global logger instances for different components
app_logger = get_logger("flowr_app")
player_logger = get_logger("flowr_player")
stream_logger = get_logger("flowr_stream")
api_logger = get_logger("flowr_api")


def log_player_action(action: str, **context):
    """
    Log player actions with context.

    Args:
        action: Player action (play, pause, next, previous, etc.)
        **context: Additional context data
    """
    log_message(message_type="player_action", action=action, **context)


def log_queue_operation(operation: str, **context):
    """
    Log queue operations with context.

    Args:
        operation: Queue operation (add, remove, insert, etc.)
        **context: Additional context data
    """
    log_message(message_type="queue_operation", operation=operation, **context)


def log_stream_resolution(outcome: str, track_id: str, **context):
    """
    Log the outcome of a stream locator resolution.

    Args:
        outcome: One of requested, resolved, failed, discarded
        track_id: Track being resolved
        **context: Additional context data
    """
    log_message(message_type="stream_resolution", outcome=outcome, track_id=track_id, **context)


def log_error(logger: eliot.Logger, error: Exception, **context):
    """
    Log errors with full context and traceback.

    Args:
        logger: Eliot logger instance
        error: Exception that occurred
        **context: Additional context data
    """
    write_traceback(logger, exc_info=sys.exc_info())
    log_message(message_type="error_occurred", error_message=str(error), error_type=type(error).__name__, **context)


def log_api_request(action: str, trigger_source: str = "api", **context):
    """
    Log API requests with context.

    Args:
        action: API action being performed
        trigger_source: Source of the request (default: "api")
        **context: Additional context data (request parameters, response, etc.)
    """
    log_message(message_type="api_request", action=action, trigger_source=trigger_source, **context)
