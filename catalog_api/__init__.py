"""Catalog API - category tree, product membership and visibility rules."""
