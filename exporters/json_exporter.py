"""JSON exporter for scan results (machine-friendly format)."""

import json
from typing import Any, Dict, List, Mapping

from model.records import ConstantRecord
from .text_exporter import ordered_records


def to_json(
    results: Mapping[str, List[ConstantRecord]],
    package: str = "",
    indent: int = 2,
    sort_by_value: bool = False,
) -> str:
    """
    Convert scan results to JSON format.

    Args:
        results: Records per requested type name, in request order.
        package: Package name the constants were found in.
        indent: JSON indentation level.
        sort_by_value: If True, order each type's constants by value.

    Returns:
        JSON string with one array of constants per type.
    """
    types: Dict[str, List[Dict[str, Any]]] = {}
    for type_name, records in results.items():
        types[type_name] = [record.to_dict() for record in ordered_records(records, sort_by_value)]

    data: Dict[str, Any] = {
        "package": package,
        "types": types,
    }

    return json.dumps(data, indent=indent)
