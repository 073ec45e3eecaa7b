"""
Blogwrite Backend — API Routes Package
=======================================

What:  HTTP route handlers that accept requests and return responses.
How:   One APIRouter per resource, all mounted under /api.

Route Inventory:
    - auth.py:    POST /api/auth/register, POST /api/auth/login, GET /api/auth/me
    - users.py:   GET  /api/users/profile/{id}, PUT /api/users/profile
                  GET  /api/users/my-blogs, GET /api/users/stats
    - blogs.py:   GET/POST /api/blogs, GET/PUT/DELETE /api/blogs/{id}
                  POST /api/blogs/{id}/like, POST /api/blogs/{id}/comments
    - health.py:  GET  /api/health

Routes stay thin: parse the request, call one service method, shape the
response. Business rules live in blogwrite.services.
"""
