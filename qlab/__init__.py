"""Checked string queue, allocation-tracking harness, reporting, command console and a hint-balanced search tree."""

__version__ = "0.1.0"