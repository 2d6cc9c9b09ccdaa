"""Spreadsheet parsing: raw grids, cell values, header paths, report and survey layouts."""
