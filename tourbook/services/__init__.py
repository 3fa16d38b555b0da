"""
Service layer. Each service raises tourbook.errors exceptions and leaves
HTTP concerns to the route blueprints.
"""
