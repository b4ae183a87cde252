"""Command line interface for agentchat."""
