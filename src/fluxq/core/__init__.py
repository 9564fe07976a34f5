"""
Core package aggregator for fluxq contracts (grammar, tables, values, schema, mapper, errors).

## Contracts (single source of truth)
- Grammar: DataType and AnnotationKind enums, line splitting and classification helpers.
- Tables: FluxColumn / ColumnSchema / FluxRecord / FluxTable models.
- Values: typed cell decoding with default substitution.
- Schema: pydantic Query and Dialect request payloads.
- Mapper: records to caller types (registered decoders, pydantic models, dataclasses).
- Errors: parser failures vs server-reported query failures.

## Notes
- Zero-IO policy: stdlib + pydantic only; no file/network IO.
- fluxq.io builds the streaming pipeline on top of these contracts.

## Examples
```python
from fluxq.core.grammar import DataType
from fluxq.core.tables import FluxColumn
from fluxq.core.values import decode_cell

decode_cell(FluxColumn(index=0, label="_value", data_type=DataType.DOUBLE), "+Inf")  # inf
decode_cell(FluxColumn(index=0, label="n", data_type=DataType.LONG, default_value="7"), "")  # 7
```
"""
