"""
Exception classes for progress sessions.

- ProgressError: One or more worker threads failed
- SessionStateError: Operation not allowed in the session's current state
"""


class ProgressError(Exception):
    """
    Raised by stop() when a renderer or consumer thread failed.

    Failures are collected from every joined thread rather than
    reporting only the first one.

    Attributes:
        label: Label of the session that failed
        failures: One description per failed thread
    """

    def __init__(self, label: str, failures: list[str]) -> None:
        self.label = label
        self.failures = failures
        super().__init__(f"progress '{label}' failed:\n" + "\n".join(failures))


class SessionStateError(Exception):
    """
    Raised when a session is asked to do something its state forbids.

    Attributes:
        label: Label of the session
        state: Name of the state the session was in
    """

    def __init__(self, label: str, state: str, action: str) -> None:
        self.label = label
        self.state = state
        super().__init__(f"cannot {action} progress '{label}': session is {state}")
