"""botdeploy - ship workspace units to remote hosts over SSH."""

__version__ = "0.3.0"
