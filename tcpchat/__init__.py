"""TCP chat and echo servers on poll and select event loops, a one-shot server and a simple client."""

__version__ = "0.1.0"
__all__ = ["handlers", "poll_server", "select_server", "basic_server", "client"]