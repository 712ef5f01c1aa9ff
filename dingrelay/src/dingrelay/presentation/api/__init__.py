"""
HTTP and WebSocket API for Ding Relay.
"""
