"""
Mock logger for testing.

Captures every log call, including the custom STATUS/RESULT/VERBOSE levels,
without writing to stdout.
"""

from typing import Dict, List


class MockLogger:
    """
    A mock logger that captures all log messages for testing.

    Attributes:
        messages: Dictionary mapping log level to list of messages.
        call_count: Dictionary mapping log level to call count.
        exc_infos: Exceptions passed with ``exc_info=`` per level.

    Example:
        logger = MockLogger()
        aggregator = ResultAggregator(logger=logger)
        ...
        assert logger.has_message('warning', 'missing metric values')
    """

    LOG_LEVELS = [
        'debug', 'info', 'warning', 'error', 'critical',
        'status', 'verbose', 'result'
    ]

    def __init__(self):
        self.clear()
        for level in self.LOG_LEVELS:
            setattr(self, level, self._make_log_method(level))

    def _make_log_method(self, level: str):
        def log_method(msg, *args, **kwargs):
            msg = str(msg)
            if args:
                try:
                    msg = msg % args
                except TypeError:
                    pass
            self.messages[level].append(msg)
            self.call_count[level] += 1
            if kwargs.get('exc_info'):
                self.exc_infos[level].append(kwargs['exc_info'])
        return log_method

    def has_message(self, level: str, substring: str) -> bool:
        return any(substring in msg for msg in self.messages.get(level, []))

    def get_messages(self, level: str) -> List[str]:
        return self.messages.get(level, [])

    def clear(self):
        self.messages: Dict[str, List[str]] = {level: [] for level in self.LOG_LEVELS}
        self.call_count: Dict[str, int] = {level: 0 for level in self.LOG_LEVELS}
        self.exc_infos: Dict[str, list] = {level: [] for level in self.LOG_LEVELS}

    def assert_logged(self, level: str, substring: str):
        if not self.has_message(level, substring):
            raise AssertionError(
                f"Expected '{substring}' in {level} messages.\n"
                f"Actual messages: {self.messages.get(level, [])}"
            )

    def assert_not_logged(self, level: str, substring: str):
        if self.has_message(level, substring):
            raise AssertionError(
                f"Did not expect '{substring}' in {level} messages.\n"
                f"Actual messages: {self.messages.get(level, [])}"
            )
