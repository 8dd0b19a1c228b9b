"""Interfaces: command-line entry point."""
