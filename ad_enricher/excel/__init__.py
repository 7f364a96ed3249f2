from .reader import InputError, MissingColumnsError, SheetHeaderError, load_rows
from .writer import write_workbook

__all__ = ["InputError", "MissingColumnsError", "SheetHeaderError", "load_rows", "write_workbook"]
