"""
HTTP routes for the proxy.
"""
