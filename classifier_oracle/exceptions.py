"""Custom exceptions for the classifier oracle."""


class OracleError(Exception):
    """Base exception for classifier oracle errors."""
    pass


class ConfigError(OracleError):
    """Raised when an oracle configuration file is unreadable or invalid."""
    def __init__(self, message: str, source: str = None):
        super().__init__(f"{source}: {message}" if source else message)
        self.message = message
        self.source = source


class ArchiveError(OracleError):
    """Raised when an export archive cannot be opened or extracted."""
    def __init__(self, path: str, reason: str):
        super().__init__(f"Cannot extract export archive '{path}': {reason}")
        self.path = path
        self.reason = reason


class UnrecognizedEntryError(OracleError):
    """Raised when an export archive contains a file outside the known layout."""
    def __init__(self, path: str):
        super().__init__(f"Unrecognized file found in archive: '{path}'")
        self.path = path


class EntryParseError(OracleError):
    """Raised when an export entry is not valid JSON."""
    def __init__(self, path: str, reason: str):
        super().__init__(f"Cannot parse export entry '{path}': {reason}")
        self.path = path
        self.reason = reason


class MaxDepthExceededError(OracleError):
    """Raised when document nesting exceeds the configured depth."""
    def __init__(self, depth: int, path: str):
        super().__init__(f"Maximum depth ({depth}) exceeded at path: {path}")
        self.depth = depth
        self.path = path


class AncestryCycleError(OracleError):
    """Raised when a group's parent chain loops back on itself or exceeds the depth limit."""
    def __init__(self, group_id: str, chain: list, max_depth: int = None):
        rendered = " -> ".join(str(g) for g in chain)
        if max_depth is None:
            message = f"Ancestry cycle detected at group '{group_id}': {rendered}"
        else:
            message = (
                f"Ancestry depth limit ({max_depth}) exceeded at group '{group_id}': {rendered}"
            )
        super().__init__(message)
        self.group_id = group_id
        self.chain = list(chain)
        self.max_depth = max_depth


class GroupNotFoundError(OracleError):
    """Raised when a group id cannot be resolved."""
    def __init__(self, group_id: str):
        super().__init__(f"Group not found: '{group_id}'")
        self.group_id = group_id


class GroupValidationError(OracleError):
    """Raised when a group record is malformed."""
    def __init__(self, message: str, group_id: str = None):
        super().__init__(f"Invalid group '{group_id}': {message}" if group_id else message)
        self.message = message
        self.group_id = group_id


class TombstoneError(OracleError):
    """Raised when a deletion path does not name an existing class or parameter."""
    def __init__(self, path: list, message: str):
        super().__init__(f"Cannot tombstone {'/'.join(path)}: {message}")
        self.path = list(path)
        self.message = message
