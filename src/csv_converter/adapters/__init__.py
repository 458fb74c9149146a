"""Adapters binding application ports to spreadsheet reader libraries."""
