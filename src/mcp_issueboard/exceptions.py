class IssueBoardError(Exception):
    """Base error for issue board operations."""


class IssueNotFoundError(IssueBoardError):
    """Raised when an issue id does not match a live issue."""


class SprintNotFoundError(IssueBoardError):
    """Raised when a sprint id does not match a stored sprint."""


class HierarchyCycleError(IssueBoardError):
    """Raised when a parent assignment would make an issue its own ancestor."""


class PositionOrderError(IssueBoardError):
    """Raised when neighbour positions leave no room between them."""


class IdentityProviderError(IssueBoardError):
    """Raised when the external identity provider rejects our credentials."""


class ProjectNotFoundError(IssueBoardError):
    """Raised when a project id or key does not match a stored project."""
