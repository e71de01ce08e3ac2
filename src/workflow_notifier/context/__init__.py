"""Context-building modules for the triggering workflow event.

These modules read the GitHub Actions environment (and, when the event
carries no commit data, the GitHub API) and assemble it into the
immutable EventContext the message builder reads from.
"""
