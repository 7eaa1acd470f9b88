def mask_aadhaar(aadhaar_no: str) -> str:
    digits = "".join(aadhaar_no.split())
    if len(digits) <= 4:
        return "*" * len(digits)
    return "X" * (len(digits) - 4) + digits[-4:]
