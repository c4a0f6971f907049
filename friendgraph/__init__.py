"""
Friend suggestion engine: friendship graph, mutual-friend ranking and API.
"""
