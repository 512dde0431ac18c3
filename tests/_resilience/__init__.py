"""Resilience and error handling tests.

This package contains tests for failure containment and race condition
prevention. These tests ensure observers behave when results resolve on
arbitrary threads, concurrently with registration.
"""
