"""
Test suite for user_vault

Contains:
- tests/unit/          : Unit tests for individual modules, run against the
                         in-memory user_vault.sim collaborators
"""
