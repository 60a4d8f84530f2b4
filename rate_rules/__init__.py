"""Scoped rate rules for the marketplace back office.

Commission and VAT overrides share one engine: per-scope, time-bounded rules
with write-time conflict detection and read-time specificity fallback.
"""
