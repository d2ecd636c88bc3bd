"""Core botdeploy plumbing: logging, settings, errors, workflow engine."""
