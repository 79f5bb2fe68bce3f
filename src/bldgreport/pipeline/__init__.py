"""Compliance evaluation and report generation pipeline."""
