"""
CRUD operations (Create, Read, Update, Delete) for database models.

This layer keeps query and transaction details out of the services and the
API routes.
"""

from matchcore.crud import judgment, learning, match_quality, pipeline, tenant

__all__ = ["judgment", "learning", "match_quality", "pipeline", "tenant"]
