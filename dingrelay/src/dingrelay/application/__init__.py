"""
Application layer for Ding Relay.
"""
