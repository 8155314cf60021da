"""
Exceptions raised by the learners.
"""


class UnsupportedOperation(RuntimeError):
    """
    Raised when a hypothesis, gradient or prediction strategy is asked to do
    something its configuration cannot support (e.g. a softmax gradient over
    a single class).
    """
    pass
