"""
End of Line - two-player turn-based territory game server.
"""
