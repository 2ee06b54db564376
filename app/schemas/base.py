"""
Schema base para registros recibidos de la API remota.
"""

from pydantic import BaseModel, ConfigDict, field_serializer


class ApiRecordSchema(BaseModel):
    """
    Schema base para todos los registros de la API.
    Ignora campos desconocidos y serializa enums a su valor para templates.
    """

    model_config = ConfigDict(extra="ignore")

    @field_serializer("*")
    def serialize_enum(self, v):
        """Serializa campos enum a su valor string para templates."""
        if hasattr(v, "value"):
            return v.value
        return v
