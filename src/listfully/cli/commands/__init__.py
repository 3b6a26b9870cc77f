"""CLI command modules for listfully."""
