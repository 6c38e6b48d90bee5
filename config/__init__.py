"""Configuration package for feedrank."""
