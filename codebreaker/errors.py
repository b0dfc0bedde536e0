"""
Error taxonomy for the puzzle core.

- ConfigurationError: invalid code length / color count combination, or two
  codes of different lengths handed to the scorer. Fatal at construction.
- IncompleteGuessError: submit attempted with empty slots. The session itself
  answers with a no-op (None); this exception is for callers that want one.
- InconsistentHistoryError: no code in the code space fits the recorded
  feedback. Always a caller bug (feedback paired with the wrong guess, etc).
"""


class CodeBreakerError(Exception):
    pass


class ConfigurationError(CodeBreakerError, ValueError):
    pass


class IncompleteGuessError(CodeBreakerError):
    pass


class InconsistentHistoryError(CodeBreakerError):
    pass
