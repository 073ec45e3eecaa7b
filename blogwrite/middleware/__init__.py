"""
Blogwrite Backend — HTTP Middleware
====================================

    - request_id.py:  X-Request-ID correlation id, stored in a ContextVar
    - logging.py:     one access-log line per request
"""
