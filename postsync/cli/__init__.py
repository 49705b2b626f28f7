"""Command-line interface for postsync."""
