class ExplanationUnavailableError(Exception):
    """Raised when the text-generation call fails or returns unusable output"""
    pass


class AggregationError(Exception):
    """Raised when a tenant's judgment aggregation window cannot be replaced"""

    def __init__(self, tenant_id: str, message: str):
        self.tenant_id = tenant_id
        super().__init__(f"Aggregation failed for tenant {tenant_id}: {message}")
