"""Domain errors raised by the assignment engine."""


class AssignmentError(Exception):
    """Base class for every assignment failure."""

    retryable: bool = False


class InvalidAssignmentRequest(AssignmentError):
    """The request is malformed (bad coordinates, unknown urgency, ...)."""


class NotFoundError(AssignmentError):
    """A referenced record does not exist."""


class ServiceNotFound(NotFoundError):
    def __init__(self, service_id: int):
        super().__init__(f"Service not found: {service_id}")
        self.service_id = service_id


class OrderNotFound(NotFoundError):
    def __init__(self, order_id: int):
        super().__init__(f"Order not found: {order_id}")
        self.order_id = order_id


class WorkerNotFound(NotFoundError):
    def __init__(self, worker_id: int):
        super().__init__(f"Worker not found: {worker_id}")
        self.worker_id = worker_id


class WorkerClaimConflict(AssignmentError):
    """The chosen worker was claimed by another assignment before commit."""

    retryable = True

    def __init__(self, worker_id: int):
        super().__init__(f"Worker {worker_id} is no longer available")
        self.worker_id = worker_id


class OrderNotAssignable(AssignmentError):
    """The order left the confirmed/unassigned state before commit."""

    def __init__(self, order_id: int, status: str):
        super().__init__(f"Order {order_id} cannot be assigned (status={status})")
        self.order_id = order_id
        self.status = status
