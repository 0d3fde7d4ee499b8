"""Exception hierarchy for tiki."""


class TikiError(Exception):
    """Base class for all tiki errors."""


class NotFound(TikiError):
    """Ticket id not present in the store."""

    def __init__(self, ticket_id: str):
        super().__init__(f"ticket {ticket_id} not found")
        self.ticket_id = ticket_id


class Conflict(TikiError):
    """File changed on disk since it was loaded."""

    def __init__(self, ticket_id: str, path=None):
        super().__init__(f"ticket {ticket_id} was modified on disk since it was loaded")
        self.ticket_id = ticket_id
        self.path = path


class InvalidFrontmatter(TikiError):
    """Malformed YAML or missing frontmatter delimiters."""


class InvalidWorkflow(TikiError):
    """Workflow entry that cannot be turned into a plugin."""

    def __init__(self, message: str, location: str = ""):
        super().__init__(f"{location}: {message}" if location else message)
        self.message = message
        self.location = location


class IOFailure(TikiError):
    """Read, write or stat failure on a ticket or config file."""


class VcsUnavailable(TikiError):
    """Version control is missing or a command failed."""


class Cancelled(TikiError):
    """Background job was cancelled."""
