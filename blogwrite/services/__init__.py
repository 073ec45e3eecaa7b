"""
Blogwrite Backend — Services Layer
===================================

Business rules sitting between routes (HTTP) and the database.

Service Inventory:
    - access_control: the ownership predicate shared by mutating operations
    - query_builder:  list filters, sort order and page-window arithmetic
    - BlogService:    posts, views, likes, comments
    - UserService:    profiles, "my posts", statistics
    - AuthService:    registration and login
"""
