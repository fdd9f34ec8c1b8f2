"""
Data models for the protocol engine and its storage boundary
"""
