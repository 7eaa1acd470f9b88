from typing import Any, Dict, List


def reconcile(records: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Drop in-batch Aadhaar duplicates, keeping the last row seen for each key.

    A surviving key stays at the position of its first occurrence. Rows with no
    Aadhaar are all kept and come after the keyed rows.
    """
    keyed: Dict[str, Dict[str, Any]] = {}
    unkeyed: List[Dict[str, Any]] = []

    for record in records:
        aadhaar_no = record.get("aadhaar_no")
        if aadhaar_no:
            keyed[aadhaar_no] = record
        else:
            unkeyed.append(record)

    return list(keyed.values()) + unkeyed
