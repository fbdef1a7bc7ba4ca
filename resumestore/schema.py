from typing import Any, Dict, List

REQUIRED_ID_FIELDS = ["job_id", "owner_id"]


def _is_non_empty_str(v: Any) -> bool:
    return isinstance(v, str) and v.strip() != ""


def _is_positive_id(v: Any) -> bool:
    # bool is an int subclass; True is not an id
    return isinstance(v, int) and not isinstance(v, bool) and v > 0


def validate_submission(data: Dict[str, Any]) -> List[str]:
    """
    Returns a list of validation error messages. Empty list means valid.
    Checks the shape of one submission before it reaches the store.
    """
    errors: List[str] = []

    if "hash" not in data:
        errors.append("Missing required field: hash")
    elif not _is_non_empty_str(data["hash"]):
        errors.append("Field 'hash' must be a non-empty string")

    for f in REQUIRED_ID_FIELDS:
        if f not in data:
            errors.append(f"Missing required field: {f}")
        elif not _is_positive_id(data[f]):
            errors.append(f"Field '{f}' must be a positive integer")

    # Result may be omitted or null (evaluation not produced yet)
    if data.get("raw_result") is not None and not isinstance(data["raw_result"], str):
        errors.append("Field 'raw_result' must be a string or null")

    return errors
