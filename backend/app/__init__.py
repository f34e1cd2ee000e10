"""Dashgate API application."""
