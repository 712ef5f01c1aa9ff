"""
Domain layer for Ding Relay.
"""
