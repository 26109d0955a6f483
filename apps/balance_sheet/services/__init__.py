from .balance_sheet import balance_sheet_summary

__all__ = ['balance_sheet_summary']
