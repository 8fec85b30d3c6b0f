"""Pricing, email and maps services."""
