"""Decade totals, rankings and trends for neighbourhood crime counts."""
