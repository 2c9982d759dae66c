"""
Tests for the Marianatek/Webflow inventory sync.
"""
