# Services package init
"""
SNS API Server — Services Layer
================================

Service Inventory:
    - PostService: validation, store orchestration and error mapping for
      posts and likes (post_service.py)

Services receive the request's AsyncSession and never build HTTP responses,
so they can be unit-tested with a mocked store.
"""
