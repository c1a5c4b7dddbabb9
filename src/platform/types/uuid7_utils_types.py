"""
Pydantic integration for uuid_utils.UUID

Enrollment ids are UUID7 (time ordered). uuid_utils.UUID has no pydantic schema,
so FastAPI could neither validate it as a path parameter nor document it in OpenAPI.

```python
@router.get('/{enrollment_id}/qr/{phone}')
async def ticket_qr(enrollment_id: UtilsUUID7, phone: str): ...
```
"""

from typing import Any

from pydantic import GetCoreSchemaHandler, GetJsonSchemaHandler
from pydantic.json_schema import JsonSchemaValue
from pydantic_core import core_schema
from uuid_utils import UUID


class UtilsUUID7(UUID):
    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        def _to_uuid(value: Any) -> UUID:
            if isinstance(value, UUID):
                return value
            try:
                return UUID(str(value))
            except ValueError as e:
                raise ValueError(f'Invalid UUID: {value}') from e

        to_uuid = core_schema.chain_schema(
            [
                core_schema.str_schema(),
                core_schema.no_info_plain_validator_function(_to_uuid),
            ]
        )
        # JSON has no UUID type; python mode also accepts ready-made UUID objects
        return core_schema.json_or_python_schema(
            json_schema=to_uuid,
            python_schema=core_schema.union_schema(
                [core_schema.is_instance_schema(UUID), to_uuid]
            ),
            serialization=core_schema.plain_serializer_function_ser_schema(
                str, when_used='always', return_schema=core_schema.str_schema()
            ),
        )

    @classmethod
    def __get_pydantic_json_schema__(
        cls, schema: core_schema.CoreSchema, handler: GetJsonSchemaHandler
    ) -> JsonSchemaValue:
        # Skip handler(schema): the validator chain has no OpenAPI meaning
        return {'type': 'string', 'format': 'uuid'}
