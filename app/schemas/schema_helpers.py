from typing import List, Dict, Any, Type
from pydantic import BaseModel
import logging

logger = logging.getLogger(__name__)

def validate_sql_results(data: List[Dict[str, Any]], schema: Type[BaseModel]) -> List[BaseModel]:
    """Validate and convert SQL results to Pydantic models"""
    try:
        return [schema.model_validate(row) for row in data or []]
    except Exception as e:
        logger.error(f"Schema validation failed: {e}")
        logger.error(f"Sample data: {data[:1] if data else 'No data'}")
        raise
