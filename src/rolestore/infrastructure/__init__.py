"""Infrastructure layer for RoleStore."""
