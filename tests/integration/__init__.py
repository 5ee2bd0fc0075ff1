"""Integration tests for the protective put hedge engine.

This package contains end-to-end tests that replay YAML scenarios through the
engine with an in-memory host.

Test categories:
- Scenario host: subscriptions, holdings, fills
- Scenario loading: YAML parsing and validation
- Demo replay: adjustments, holdings and the Delta Lake audit trail per step
"""
