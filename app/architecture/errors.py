# FILE: app/architecture/errors.py
class ArchitectureError(Exception):
    """Base class for architecture graph errors."""


class NotFoundError(ArchitectureError):
    pass


class ConflictError(ArchitectureError):
    pass


class ValidationError(ArchitectureError):
    """Raised when management input breaks a model constraint."""


class NodeNotFoundError(NotFoundError):
    def __init__(self, node_id: str):
        super().__init__(f"Node not found: {node_id}")
        self.node_id = node_id


class EdgeNotFoundError(NotFoundError):
    def __init__(self, edge_id: int):
        super().__init__(f"Edge not found: {edge_id}")
        self.edge_id = edge_id


class NodeExistsError(ConflictError):
    def __init__(self, node_id: str):
        super().__init__(f"Node already exists: {node_id}")
        self.node_id = node_id


class EdgeExistsError(ConflictError):
    def __init__(self, source_id: str, target_id: str, edge_type: str):
        super().__init__(f"Edge already exists: {source_id} -> {target_id} ({edge_type})")


class FeatureNotFoundError(NotFoundError):
    def __init__(self, node_id: str, version: str, filename: str):
        super().__init__(f"Feature not found: {node_id}@{version}/{filename}")
        self.node_id = node_id
        self.version = version
        self.filename = filename
