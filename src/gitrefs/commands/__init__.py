"""CLI commands for gitrefs."""
