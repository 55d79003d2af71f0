"""
Test suite for the multi-owner quorum wallet

Contains:
- tests/unit/          : Unit tests for individual components and the wallet service
"""
