"""Adapters for the external tools appctl drives: git, systemctl, uv."""
