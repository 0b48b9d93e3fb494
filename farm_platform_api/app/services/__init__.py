"""
Service layer.

Each service encapsulates business logic for a domain and talks to the
graph store only through ``core.graph.GraphStore``, so route handlers
never see Cypher or driver objects.
"""
