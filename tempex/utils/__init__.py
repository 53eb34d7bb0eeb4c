"""Logging and trace input helpers for TEMPEX."""
