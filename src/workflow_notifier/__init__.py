"""Slack notifications for GitHub Actions workflow runs.

Composes a success/failure/cancelled (or fully custom) Slack message
describing the event that triggered a workflow, and posts it to an
incoming webhook once the run completes.
"""

__version__ = "0.1.0"
