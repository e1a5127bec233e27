"""restkv: compile `key<delimiter>value` tokens into HTTP requests."""

__version__ = "0.1.0"
