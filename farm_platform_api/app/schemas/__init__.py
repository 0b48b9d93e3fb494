"""
Pydantic schema definitions for API payloads.

Each domain (farms, profile, notifications, soil analysis) defines its
own Pydantic models for request and response bodies.  Field names
follow the camelCase property names stored in the graph so rows can be
validated directly into response models.
"""
