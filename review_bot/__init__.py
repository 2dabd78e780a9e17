"""AI PR Review Bot - reviews pull requests with models served by AWS Bedrock."""

__version__ = "0.1.0"
