"""
Test suite for bookrec.
"""
