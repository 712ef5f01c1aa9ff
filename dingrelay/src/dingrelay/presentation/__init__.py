"""
Presentation layer for Ding Relay.
"""
