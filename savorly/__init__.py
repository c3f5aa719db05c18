"""Savorly: local recipe catalog with favorites and a shopping-list notebook."""
