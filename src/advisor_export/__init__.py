"""advisor-export — Turn advisor spreadsheets into ranked, styled XLSX and PDF tables."""

__version__ = "0.1.0"

HEADER_MARKER = "Advisor Code"

REQUIRED_COLUMNS: list[str] = [
    "Advisor Code",
    "Advisor Name",
    "Advisor Status",
    "No of Policies",
    "Annualized New Business Premium (RS)",
]
