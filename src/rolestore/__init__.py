"""RoleStore - role storage for a centralized authorization-policy store.

Manages named roles of users, groups and nested roles, keeps reverse-lookup
indexes for principal-scoped queries, and publishes a monotonic role
version that remote enforcement agents poll for incremental sync.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
