"""Reusable test data and provider factories."""
