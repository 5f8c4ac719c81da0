from swingpoints.errors import ClientInputError

REQUIRED_FIELDS_MESSAGE = "instrumentKey and companyName are required"


def normalize_instrument_key(instrument_key: str | None) -> str:
    cleaned = (instrument_key or "").strip()
    if not cleaned:
        raise ClientInputError(REQUIRED_FIELDS_MESSAGE)
    return cleaned


def normalize_company_name(company_name: str | None) -> str:
    cleaned = (company_name or "").strip()
    if not cleaned:
        raise ClientInputError(REQUIRED_FIELDS_MESSAGE)
    return cleaned
