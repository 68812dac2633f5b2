"""
Shared schema bases
"""

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

class CamelModel(BaseModel):
    """Schema serialised with camelCase keys, accepting either spelling on input"""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True

class EntityRef(CamelModel):
    """Weak reference to a related record (id plus display name)"""
    id: str
    name: str
