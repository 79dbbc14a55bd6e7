"""Runnable protocol demos."""
