"""Plain text exporter for scan results (human-friendly format)."""

from typing import Dict, List, Mapping

from model.records import ConstantRecord


def ordered_records(records: List[ConstantRecord], sort_by_value: bool = False) -> List[ConstantRecord]:
    """Return records in declaration order, or stably ordered by value."""
    if not sort_by_value:
        return list(records)
    return sorted(records, key=ConstantRecord.sort_key)


def to_text(
    results: Mapping[str, List[ConstantRecord]],
    package: str = "",
    names_only: bool = False,
    sort_by_value: bool = False,
) -> str:
    """
    Convert scan results to a plain text listing.

    Args:
        results: Records per requested type name, in request order.
        package: Package name, printed as a header when given.
        names_only: If True, print only the constant names, one per line.
        sort_by_value: If True, order each type's constants by value.

    Returns:
        The listing, without a trailing newline.
    """
    lines: List[str] = []

    if names_only:
        for records in results.values():
            lines.extend(record.name for record in ordered_records(records, sort_by_value))
        return "\n".join(lines)

    if package:
        lines.append(f"package {package}")

    for type_name, records in results.items():
        if lines:
            lines.append("")
        lines.append(f"{type_name} ({len(records)} values)")
        records = ordered_records(records, sort_by_value)
        width = max((len(record.name) for record in records), default=0)
        for record in records:
            lines.append(f"  {record.name.ljust(width)} = {record.literal}")

    return "\n".join(lines)


def summarize(results: Mapping[str, List[ConstantRecord]]) -> Dict[str, int]:
    """Count the constants found per type."""
    return {type_name: len(records) for type_name, records in results.items()}
